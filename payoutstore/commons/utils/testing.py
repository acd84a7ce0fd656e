import sqlalchemy
from sqlalchemy.ext.asyncio import create_async_engine

from payoutstore.commons.config.secrets import Secret
from payoutstore.commons.database.client.sqlite import configure_sqlite_engine


async def create_schema(db_url: Secret, metadata: sqlalchemy.MetaData):
    """
    Create every table of metadata in the database behind db_url, used to prepare embedded test databases
    """
    assert db_url.value
    engine = configure_sqlite_engine(create_async_engine(db_url.value))
    try:
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
    finally:
        await engine.dispose()
