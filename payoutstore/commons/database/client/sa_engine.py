import asyncio
from contextvars import ContextVar
from types import TracebackType
from typing import Any, Dict, List, Optional, Sequence, Union, Type, overload, Generator

from sqlalchemy import text
from sqlalchemy.engine import make_url, Row, RowMapping
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncTransaction,
    create_async_engine,
)

from payoutstore.commons.context.logger import get_logger
from payoutstore.commons.database.client.error_handlers import translate_db_error
from payoutstore.commons.database.client.sqlite import configure_sqlite_engine
from payoutstore.commons.database.client.interface import (
    DBConnection,
    DBEngine,
    DBMultiResult,
    DBResult,
    DBTransaction,
)

log = get_logger("database")


def _as_executable(stmt):
    return text(stmt) if isinstance(stmt, str) else stmt


class SAResult(DBResult):
    _row_mapping: RowMapping
    _matched_row_count: int

    def __init__(self, row: Row, matched_row_count: int):
        self._row_mapping = row._mapping
        self._matched_row_count = matched_row_count

    @property
    def matched_row_count(self) -> int:
        return self._matched_row_count

    def __getitem__(self, key):
        return self._row_mapping[key]

    def __len__(self) -> int:
        return len(self._row_mapping)

    def __iter__(self):
        return iter(self._row_mapping)


class SAMultiResult(DBMultiResult[SAResult]):
    _results: Sequence[SAResult]
    _matched_row_count: int

    def __init__(self, rows: Sequence[Row], matched_row_count: int):
        self._results = [
            SAResult(row, matched_row_count=matched_row_count) for row in rows
        ]
        self._matched_row_count = matched_row_count

    @property
    def matched_row_count(self) -> int:
        return self._matched_row_count

    def __len__(self) -> int:
        return len(self._results)

    @overload
    def __getitem__(self, i: int) -> SAResult:
        ...

    @overload
    def __getitem__(self, s: slice) -> Sequence[SAResult]:
        ...

    def __getitem__(self, i: Union[int, slice]) -> Union[SAResult, Sequence[SAResult]]:
        return self._results[i]


class SATransaction(DBTransaction):
    _raw_transaction: Optional[AsyncTransaction]
    _connection: "SAConnection"

    def __init__(self, connection: "SAConnection"):
        self._connection = connection
        self._raw_transaction = None

    def connection(self) -> "SAConnection":
        return self._connection

    @property
    def raw_transaction(self) -> AsyncTransaction:
        assert self._raw_transaction, "_raw_transaction not initialized"
        return self._raw_transaction

    @translate_db_error
    async def start(self) -> "SATransaction":
        async with self._connection._transaction_lock:
            is_root = not self._connection._transaction_stack
            await self._connection.__aenter__()
            async with self._connection._query_lock:
                if is_root:
                    self._raw_transaction = (
                        await self._connection.raw_connection.begin()
                    )
                else:
                    self._raw_transaction = (
                        await self._connection.raw_connection.begin_nested()
                    )
            self._connection._transaction_stack.append(self)
        return self

    @translate_db_error
    async def commit(self) -> None:
        async with self._connection._transaction_lock:
            assert self._raw_transaction, "transaction has started"
            assert self._connection._transaction_stack[-1] is self
            self._connection._transaction_stack.pop()
            try:
                async with self._connection._query_lock:
                    await self._raw_transaction.commit()
            finally:
                self._raw_transaction = None
                await self._connection.__aexit__()

    @translate_db_error
    async def rollback(
        self,
        exc_type: Optional[Type[BaseException]] = None,
        exc_value: Optional[BaseException] = None,
        traceback: Optional[TracebackType] = None,
    ) -> None:
        async with self._connection._transaction_lock:
            assert self._raw_transaction, "transaction has started"
            assert self._connection._transaction_stack[-1] is self
            self._connection._transaction_stack.pop()
            try:
                async with self._connection._query_lock:
                    await self._raw_transaction.rollback()
            finally:
                self._raw_transaction = None
                await self._connection.__aexit__(exc_type, exc_value, traceback)

    def __await__(self) -> Generator:
        """
        Called if using the low-level `transaction = await engine.transaction()`
        """
        return self.start().__await__()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ):
        if exc_type:
            await self.rollback(exc_type, exc_value, traceback)
        else:
            await self.commit()


class SAConnection(DBConnection):
    _raw_connection: Optional[AsyncConnection]
    engine: "SAEngine"
    database_name: str
    instance_name: str

    _transaction_stack: List[SATransaction]

    def __init__(self, engine: "SAEngine"):
        if engine.closed():
            raise ValueError("engine is closed!")

        self.engine = engine
        self.database_name = engine.database_name
        self.instance_name = engine.instance_name
        self._raw_connection = None

        self._connection_lock = asyncio.Lock()
        self._connection_counter = 0

        self._transaction_lock = asyncio.Lock()
        self._transaction_stack = []

        self._query_lock = asyncio.Lock()

    async def __aenter__(self) -> "SAConnection":
        async with self._connection_lock:
            self._connection_counter += 1
            if self._connection_counter == 1:
                assert self._raw_connection is None
                self._raw_connection = await self.engine.raw_engine.connect()
        return self

    async def __aexit__(
        self,
        exc_type: Type[BaseException] = None,
        exc_value: BaseException = None,
        traceback: TracebackType = None,
    ) -> None:
        async with self._connection_lock:
            assert self._raw_connection is not None
            self._connection_counter -= 1
            if self._connection_counter == 0:
                await self._raw_connection.close()
                self._raw_connection = None

    def transaction(self) -> SATransaction:
        return SATransaction(connection=self)

    @property
    def in_transaction(self) -> bool:
        return bool(self._transaction_stack)

    async def _autocommit(self):
        # sqlalchemy always begins a transaction implicitly, close it when not managed by SATransaction
        if not self.in_transaction and self.raw_connection.in_transaction():
            await self.raw_connection.commit()

    @translate_db_error
    async def execute(self, stmt) -> SAMultiResult:
        async with self._query_lock:
            result = await self.raw_connection.execute(_as_executable(stmt))
            rows: Sequence[Row] = result.fetchall() if result.returns_rows else []
            await self._autocommit()
            return SAMultiResult(rows, matched_row_count=result.rowcount)

    @translate_db_error
    async def fetch_one(self, stmt) -> Optional[SAResult]:
        async with self._query_lock:
            result = await self.raw_connection.execute(_as_executable(stmt))
            row: Optional[Row] = None
            matched_row_count = result.rowcount
            if result.returns_rows:
                row = result.fetchone()
                result.close()
            await self._autocommit()
            return SAResult(row, matched_row_count) if row else None

    @translate_db_error
    async def fetch_all(self, stmt) -> SAMultiResult:
        async with self._query_lock:
            result = await self.raw_connection.execute(_as_executable(stmt))
            rows: Sequence[Row] = result.fetchall() if result.returns_rows else []
            await self._autocommit()
            return SAMultiResult(rows, matched_row_count=result.rowcount)

    @translate_db_error
    async def fetch_value(self, stmt):
        async with self._query_lock:
            value = await self.raw_connection.scalar(_as_executable(stmt))
            await self._autocommit()
            return value

    @property
    def raw_connection(self) -> AsyncConnection:
        assert self._raw_connection, "_raw_connection not initialized"
        return self._raw_connection


class SAEngine(DBEngine):
    database_name: str
    instance_name: str
    _dsn: str
    maxsize: int
    connection_timeout_sec: float
    closing_timeout_sec: float
    default_client_stmt_timeout_sec: float
    debug: bool
    _raw_engine: Optional[AsyncEngine]

    def __init__(
        self,
        dsn: str,
        *,
        database_name: Optional[str] = None,
        instance_name: str = "",
        maxsize: int = 1,
        connection_timeout_sec: float = 1,
        default_client_stmt_timeout_sec: float = 1,
        closing_timeout_sec: float = 30,
        debug: bool = False,
    ):
        if not dsn:
            raise ValueError("dsn cannot be empty or None")
        if maxsize <= 0:
            raise ValueError(f"maxsize should be > 0 but found {maxsize}")
        if connection_timeout_sec <= 0:
            raise ValueError(
                f"connection_timeout_sec should be > 0 but found {connection_timeout_sec}"
            )
        if closing_timeout_sec < 0:
            raise ValueError(
                f"closing_timeout_sec should be > 0 but found {closing_timeout_sec}"
            )
        if default_client_stmt_timeout_sec <= 0:
            raise ValueError(
                f"default_stmt_timeout_sec should be > 0 but found {default_client_stmt_timeout_sec}"
            )

        self._dsn = dsn
        self.maxsize = maxsize
        self.connection_timeout_sec = connection_timeout_sec
        self.closing_timeout_sec = closing_timeout_sec
        self.default_client_stmt_timeout_sec = default_client_stmt_timeout_sec
        self.database_name = database_name if database_name else "undefined"
        self.instance_name = instance_name
        self._raw_engine = None
        self.debug = debug

        # Connections are stored as task-local state.
        self._connection_context: ContextVar[SAConnection] = ContextVar(
            "connection_context"
        )

    def closed(self):
        return self._raw_engine is None

    def _connect_args(self) -> Dict[str, Any]:
        backend = make_url(self.dsn).get_backend_name()
        if backend == "postgresql":
            # asyncpg statement timeout
            return {"command_timeout": self.default_client_stmt_timeout_sec}
        if backend == "sqlite":
            # how long sqlite waits on a locked database
            return {"timeout": self.default_client_stmt_timeout_sec}
        return {}

    async def connect(self) -> "SAEngine":
        if self.closed():
            self._raw_engine = configure_sqlite_engine(
                create_async_engine(
                    self.dsn,
                    pool_size=self.maxsize,
                    max_overflow=0,
                    pool_timeout=self.connection_timeout_sec,
                    echo=self.debug,
                    connect_args=self._connect_args(),
                )
            )
            log.debug(
                "engine created",
                database=self.database_name,
                instance=self.instance_name,
            )
        return self

    @property
    def dsn(self) -> str:
        return self._dsn

    async def disconnect(self):
        if not self.closed():
            raw_engine = self.raw_engine
            self._raw_engine = None
            try:
                await asyncio.wait_for(
                    raw_engine.dispose(), timeout=self.closing_timeout_sec
                )
            except Exception:  # No matter what, let's drop the pool to prevent leaking
                log.exception(
                    "engine dispose failed",
                    database=self.database_name,
                    instance=self.instance_name,
                )
                await raw_engine.dispose(close=False)

    def connection(self) -> SAConnection:
        try:
            return self._connection_context.get()
        except LookupError:
            connection = SAConnection(engine=self)
            self._connection_context.set(connection)
            return connection

    def transaction(self) -> SATransaction:
        return self.connection().transaction()

    async def execute(self, stmt) -> SAMultiResult:
        async with self.connection() as conn:
            result = await conn.execute(stmt)
        return result

    async def fetch_one(self, stmt) -> Optional[SAResult]:
        async with self.connection() as conn:
            result = await conn.fetch_one(stmt)
        return result

    async def fetch_all(self, stmt) -> SAMultiResult:
        async with self.connection() as conn:
            result = await conn.fetch_all(stmt)
        return result

    async def fetch_value(self, stmt) -> Optional[Any]:
        async with self.connection() as conn:
            result = await conn.fetch_value(stmt)
        return result

    @property
    def raw_engine(self) -> AsyncEngine:
        assert self._raw_engine, "_raw_engine not initialized"
        return self._raw_engine

    async def __aenter__(self):
        if self.closed():
            await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
