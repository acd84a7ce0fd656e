import os
from typing import Callable, Mapping

from payoutstore.commons.config.app_config import AppConfig
from payoutstore.commons.config.local import create_app_config as LOCAL
from payoutstore.commons.config.prod import create_app_config as PROD
from payoutstore.commons.config.testing import create_app_config as TESTING

_CONFIG_MAP: Mapping[str, Callable[..., AppConfig]] = {
    "prod": PROD,
    "local": LOCAL,
    "testing": TESTING,
}


def init_app_config() -> AppConfig:
    environment = os.getenv("ENVIRONMENT", None)
    assert environment is not None, (
        "ENVIRONMENT is not set through environment variable, "
        "valid ENVIRONMENT includes [prod, local, testing]"
    )

    config_key = environment.lower()
    assert (
        config_key in _CONFIG_MAP
    ), f"Cannot find AppConfig specified by environment={config_key}"

    return _CONFIG_MAP[config_key]()
