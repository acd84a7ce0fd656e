from dataclasses import dataclass

from typing_extensions import final

from payoutstore.commons.config.secrets import Secret


@dataclass(frozen=True)
class DBConfig:
    debug: bool
    master_pool_max_size: int
    replica_pool_max_size: int
    connection_timeout_sec: float = 1
    statement_timeout_sec: float = 1
    closing_timeout_sec: float = 30

    def __post_init__(self):
        if self.master_pool_max_size <= 0:
            raise ValueError(
                f"master_pool_size should be > 0 but found={self.master_pool_max_size}"
            )
        if self.replica_pool_max_size <= 0:
            raise ValueError(
                f"replica_pool_size should be > 0 but found={self.replica_pool_max_size}"
            )


@final
@dataclass(frozen=True)
class AppConfig:
    """
    A config class contains all necessary config key-values to bootstrap the storage layer.
    For local/testing/prod environments, there are corresponding factories:
    - local: local.py::create_app_config
    - testing: testing.py::create_app_config
    - prod: prod.py::create_app_config
    """

    ENVIRONMENT: str
    DEBUG: bool

    # DB configs
    STORAGE_DB_MASTER_URL: Secret
    STORAGE_DB_REPLICA_URL: Secret

    DEFAULT_DB_CONFIG: DBConfig
