from payoutstore.commons.config.app_config import AppConfig
from payoutstore.commons.context.logger import init_logger
from payoutstore.commons.database.infra import DB
from payoutstore.storage.repository.contributor import (
    ContributorRepository,
    ContributorRepositoryInterface,
)
from payoutstore.storage.repository.payout_method import (
    PayoutMethodRepository,
    PayoutMethodRepositoryInterface,
)


STORAGE_DB_ID = "storage_db"


class Storage:
    """
    Entry point of the storage layer, handing out the repositories backed by one database.

    Usage:
        async with Storage.create(app_config) as storage:
            contributor = await storage.contributors().get_by_id("john", ProviderName.GITHUB)
            methods = await storage.payout_methods().of_contributor(contributor)
    """

    _database: DB
    _contributors: ContributorRepositoryInterface
    _payout_methods: PayoutMethodRepositoryInterface

    def __init__(self, database: DB):
        self._database = database
        self._contributors = ContributorRepository(database=database)
        self._payout_methods = PayoutMethodRepository(database=database)

    @classmethod
    def create(cls, app_config: AppConfig) -> "Storage":
        database = DB.create(
            db_id=STORAGE_DB_ID,
            db_config=app_config.DEFAULT_DB_CONFIG,
            master_url=app_config.STORAGE_DB_MASTER_URL,
            replica_url=app_config.STORAGE_DB_REPLICA_URL,
        )
        init_logger.info("storage created", environment=app_config.ENVIRONMENT)
        return cls(database=database)

    @property
    def database(self) -> DB:
        return self._database

    def contributors(self) -> ContributorRepositoryInterface:
        return self._contributors

    def payout_methods(self) -> PayoutMethodRepositoryInterface:
        return self._payout_methods

    async def __aenter__(self) -> "Storage":
        await self._database.connect()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback):
        await self._database.disconnect()
