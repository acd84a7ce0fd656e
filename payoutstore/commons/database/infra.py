from dataclasses import dataclass

from payoutstore.commons.config.app_config import DBConfig
from payoutstore.commons.config.secrets import Secret
from payoutstore.commons.context.logger import get_logger
from payoutstore.commons.database.client.interface import DBEngine
from payoutstore.commons.database.client.sa_engine import SAEngine


log = get_logger("database")


@dataclass(frozen=True)
class DB:
    """
    Master and replica engines of one database.
    Writes and transactions go to master(), lookups that tolerate replication lag to replica().
    """

    _master: DBEngine
    _replica: DBEngine
    _id: str

    @property
    def id(self) -> str:
        return self._id

    def master(self) -> DBEngine:
        return self._master

    def replica(self) -> DBEngine:
        return self._replica

    @property
    def connected(self) -> bool:
        return self._master.is_connected() and self._replica.is_connected()

    async def connect(self):
        try:
            for engine in (self._master, self._replica):
                if not engine.is_connected():
                    await engine.connect()
        except Exception:
            log.exception("connect failed", database=self.id)
            raise
        log.info("connected", database=self.id)

    async def disconnect(self):
        try:
            for engine in (self._master, self._replica):
                if engine.is_connected():
                    await engine.disconnect()
        except Exception:
            log.exception("disconnect failed", database=self.id)
            raise
        log.info("disconnected", database=self.id)

    async def __aenter__(self) -> "DB":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self.disconnect()

    @classmethod
    def create(
        cls, *, db_id: str, db_config: DBConfig, master_url: Secret, replica_url: Secret
    ) -> "DB":
        """
        Build the engines of a database, pools are only opened by :meth:`connect`.
        """
        master = _create_engine(
            db_id, "master", master_url, db_config, db_config.master_pool_max_size
        )
        replica = _create_engine(
            db_id, "replica", replica_url, db_config, db_config.replica_pool_max_size
        )
        return cls(_master=master, _replica=replica, _id=db_id)


def _create_engine(
    db_id: str, instance_name: str, url: Secret, db_config: DBConfig, maxsize: int
) -> SAEngine:
    if not url.value:
        raise ValueError(f"{url.name} of {db_id} {instance_name} is not set")
    return SAEngine(
        url.value,
        database_name=db_id,
        instance_name=instance_name,
        maxsize=maxsize,
        connection_timeout_sec=db_config.connection_timeout_sec,
        default_client_stmt_timeout_sec=db_config.statement_timeout_sec,
        closing_timeout_sec=db_config.closing_timeout_sec,
        debug=db_config.debug,
    )
