from abc import ABC, abstractmethod
from typing import Any, Generator, Mapping, Optional, Sequence, TypeVar


class DBResult(Mapping):
    """
    One returned row, keyed by column name.
    """

    @property
    @abstractmethod
    def matched_row_count(self) -> int:
        """
        rows matched by the statement, e.g. by the `where` clause of an update,
        which can differ from the number of rows returned
        """


DBResultT = TypeVar("DBResultT", bound=DBResult)


class DBMultiResult(ABC, Sequence[DBResultT]):
    """
    Every row returned by a statement, in order.
    """

    @property
    @abstractmethod
    def matched_row_count(self) -> int:
        """
        see :attr:`DBResult.matched_row_count`
        """


class DBExecutor(ABC):
    """
    Runs sqlalchemy Core statements, or plain sql strings.
    """

    @abstractmethod
    async def execute(self, stmt) -> DBMultiResult:
        pass

    @abstractmethod
    async def fetch_one(self, stmt) -> Optional[DBResult]:
        """
        first returned row, or None when nothing is returned
        """

    @abstractmethod
    async def fetch_all(self, stmt) -> DBMultiResult:
        pass

    @abstractmethod
    async def fetch_value(self, stmt) -> Optional[Any]:
        """
        first column of the first returned row
        """


class DBTransaction(ABC):
    """
    Started either by `async with` (committed on success, rolled back on error)
    or by `await`, which leaves commit/rollback to the caller.
    A transaction started while another one is open on the same connection is a savepoint.
    """

    @abstractmethod
    def connection(self) -> "DBConnection":
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    def __await__(self) -> Generator:
        pass

    @abstractmethod
    async def __aenter__(self) -> "DBTransaction":
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class DBConnection(DBExecutor):
    """
    A connection borrowed from an engine pool while inside `async with`.
    Outside of a transaction every statement is committed as soon as it ran.
    """

    @abstractmethod
    def transaction(self) -> DBTransaction:
        pass

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class DBEngine(DBExecutor):
    """
    Connection pool of one database instance.

        # one-off statement, the connection goes back to the pool right away
        row = await engine.fetch_one(stmt)

        # several statements on the same connection
        async with engine.connection() as conn:
            rows = await conn.fetch_all(stmt)

        # atomic statements
        async with engine.transaction() as tx:
            await tx.connection().execute(update_stmt)
            await tx.connection().execute(other_update_stmt)

    See payoutstore/commons/test_integration/database/client/test_sa_engine.py
    """

    @property
    @abstractmethod
    def dsn(self) -> str:
        pass

    @abstractmethod
    def closed(self) -> bool:
        pass

    def is_connected(self) -> bool:
        return not self.closed()

    @abstractmethod
    async def connect(self):
        pass

    @abstractmethod
    async def disconnect(self):
        pass

    @abstractmethod
    def connection(self) -> DBConnection:
        pass

    @abstractmethod
    def transaction(self) -> DBTransaction:
        pass

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass
