import pytest

from payoutstore.commons.database.infra import DB
from payoutstore.storage.repository.contributor import ContributorRepository
from payoutstore.storage.repository.payout_method import PayoutMethodRepository
from payoutstore.storage.storage import Storage
from payoutstore.storage.test_integration.utils import prepare_and_insert_contributors


@pytest.fixture
def storage(storage_db: DB) -> Storage:
    return Storage(database=storage_db)


@pytest.fixture
async def seeded_storage(storage: Storage) -> Storage:
    """
    storage holding the github contributors john, bob, maria and dmarkov,
    maria owns an active stripe payout method "acct_001"
    """
    await prepare_and_insert_contributors(storage)
    return storage


@pytest.fixture
def contributor_repo(storage_db: DB) -> ContributorRepository:
    return ContributorRepository(database=storage_db)


@pytest.fixture
def payout_method_repo(storage_db: DB) -> PayoutMethodRepository:
    return PayoutMethodRepository(database=storage_db)
