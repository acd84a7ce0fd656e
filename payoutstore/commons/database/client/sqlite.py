from sqlalchemy import event
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine


def configure_sqlite_engine(engine: AsyncEngine) -> AsyncEngine:
    """
    Have an embedded sqlite database enforce foreign keys and honor transactions the way postgres does.

    The sqlite driver opens transactions lazily on its own, which breaks SAVEPOINTs, so it is switched to
    autocommit and BEGIN is emitted whenever sqlalchemy begins a transaction, see
    https://docs.sqlalchemy.org/en/20/dialects/sqlite.html#serializable-isolation-savepoints-transactional-ddl

    Engines of other backends are returned untouched.
    """
    if engine.dialect.name != "sqlite":
        return engine

    event.listen(engine.sync_engine, "connect", _on_connect)
    event.listen(engine.sync_engine, "begin", _on_begin)
    return engine


def _on_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None
    # per connection, and only effective outside of a transaction
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_begin(connection: Connection):
    connection.exec_driver_sql("BEGIN")
