from payoutstore.commons.config.app_config import AppConfig, DBConfig
from payoutstore.commons.config.secrets import Secret


def create_app_config() -> AppConfig:
    """
    Create AppConfig for prod environment
    """
    return AppConfig(
        ENVIRONMENT="prod",
        DEBUG=False,
        STORAGE_DB_MASTER_URL=Secret.from_env(
            name="storage_db_master_url", env="STORAGE_DB_MASTER_URL"
        ),
        STORAGE_DB_REPLICA_URL=Secret.from_env(
            name="storage_db_replica_url", env="STORAGE_DB_REPLICA_URL"
        ),
        DEFAULT_DB_CONFIG=DBConfig(
            debug=False,
            master_pool_max_size=10,
            replica_pool_max_size=10,
            statement_timeout_sec=3,
        ),
    )
