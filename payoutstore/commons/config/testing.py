import os

from payoutstore.commons.config.app_config import AppConfig, DBConfig
from payoutstore.commons.config.secrets import Secret


def create_app_config() -> AppConfig:
    """
    Create AppConfig for testing environment, backed by an embedded sqlite database
    """
    db_path: str = os.getenv("STORAGE_TEST_DB_PATH", "storagedb_test.sqlite3")

    return AppConfig(
        ENVIRONMENT="testing",
        DEBUG=True,
        STORAGE_DB_MASTER_URL=Secret(
            name="storage_db_url", value=f"sqlite+aiosqlite:///{db_path}"
        ),
        STORAGE_DB_REPLICA_URL=Secret(
            name="storage_db_url", value=f"sqlite+aiosqlite:///{db_path}"
        ),
        DEFAULT_DB_CONFIG=DBConfig(
            debug=False,
            master_pool_max_size=2,
            replica_pool_max_size=2,
            statement_timeout_sec=5,
        ),
    )
