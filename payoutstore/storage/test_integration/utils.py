from typing import List

from payoutstore.storage.models import PayoutMethodType, ProviderName
from payoutstore.storage.repository.contributor import ContributorRepositoryInterface
from payoutstore.storage.repository.model.contributor import Contributor
from payoutstore.storage.repository.model.payout_method import PayoutMethod
from payoutstore.storage.repository.payout_method import (
    PayoutMethodRepositoryInterface,
)
from payoutstore.storage.storage import Storage

SEEDED_CONTRIBUTORS = ["john", "bob", "maria", "dmarkov"]
MARIA_PAYOUT_METHOD_IDENTIFIER = "acct_001"


async def prepare_and_insert_contributor(
    contributor_repo: ContributorRepositoryInterface,
    username: str,
    provider: ProviderName = ProviderName.GITHUB,
) -> Contributor:
    contributor = await contributor_repo.register(username, provider)
    assert contributor.username == username
    assert contributor.provider == provider.value
    assert contributor.created_at
    return contributor


async def prepare_and_insert_payout_method(
    payout_method_repo: PayoutMethodRepositoryInterface,
    contributor: Contributor,
    identifier: str,
    active: bool = False,
) -> PayoutMethod:
    payout_method = await payout_method_repo.register(
        contributor, PayoutMethodType.STRIPE, identifier
    )
    assert payout_method.id, "payout method is created, assigned an ID"
    assert payout_method.belongs_to(contributor)
    assert not payout_method.active, "payout method starts inactive"
    if active:
        payout_method = await payout_method_repo.activate(payout_method)
        assert payout_method.active
    return payout_method


async def prepare_and_insert_contributors(storage: Storage) -> List[Contributor]:
    contributors = [
        await prepare_and_insert_contributor(storage.contributors(), username)
        for username in SEEDED_CONTRIBUTORS
    ]
    maria = contributors[SEEDED_CONTRIBUTORS.index("maria")]
    await prepare_and_insert_payout_method(
        storage.payout_methods(),
        maria,
        MARIA_PAYOUT_METHOD_IDENTIFIER,
        active=True,
    )
    return contributors
