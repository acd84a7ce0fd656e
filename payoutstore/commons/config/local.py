import os

from payoutstore.commons.config.app_config import AppConfig, DBConfig
from payoutstore.commons.config.secrets import Secret


def create_app_config() -> AppConfig:
    """
    Create AppConfig for local environment
    """
    # allow db endpoint (host:port) be overridden in docker compose
    db_endpoint: str = os.getenv("STORAGE_DB_ENDPOINT", "localhost:5435")

    return AppConfig(
        ENVIRONMENT="local",
        DEBUG=True,
        STORAGE_DB_MASTER_URL=Secret(
            name="storage_db_url",
            value=f"postgresql+asyncpg://storage_user@{db_endpoint}/storagedb",
        ),
        STORAGE_DB_REPLICA_URL=Secret(
            name="storage_db_url",
            value=f"postgresql+asyncpg://storage_user@{db_endpoint}/storagedb",
        ),
        DEFAULT_DB_CONFIG=DBConfig(
            debug=True, master_pool_max_size=5, replica_pool_max_size=5
        ),
    )
