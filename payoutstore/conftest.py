import os
from pathlib import Path

import pytest

os.environ["ENVIRONMENT"] = "testing"

from payoutstore.commons.config.app_config import AppConfig  # noqa: E402
from payoutstore.commons.config.utils import init_app_config  # noqa: E402
from payoutstore.commons.database.infra import DB  # noqa: E402
from payoutstore.commons.utils.testing import create_schema  # noqa: E402
from payoutstore.storage.repository.model import storage_metadata  # noqa: E402
from payoutstore.storage.storage import STORAGE_DB_ID  # noqa: E402


@pytest.fixture
def app_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    """
    testing AppConfig pointing to an embedded database file private to the current test
    """
    monkeypatch.setenv("STORAGE_TEST_DB_PATH", str(tmp_path / "storagedb_test.sqlite3"))
    return init_app_config()


@pytest.fixture
async def storage_db(app_config: AppConfig):
    """
    initialize the storage db connection, with schema created
    """
    await create_schema(app_config.STORAGE_DB_MASTER_URL, storage_metadata)
    async with DB.create(
        db_id=STORAGE_DB_ID,
        db_config=app_config.DEFAULT_DB_CONFIG,
        master_url=app_config.STORAGE_DB_MASTER_URL,
        replica_url=app_config.STORAGE_DB_REPLICA_URL,
    ) as db:
        yield db
