import pytest

from payoutstore.commons.core.errors import (
    DBIntegrityError,
    DBIntegrityUniqueViolationError,
)
from payoutstore.commons.utils.timestamps import utc_now
from payoutstore.storage.core.errors import (
    PayoutMethodErrorCode,
    PayoutMethodNotFoundError,
    PayoutMethodOperationNotSupportedError,
    PayoutMethodTypeNotSupportedError,
)
from payoutstore.storage.models import PayoutMethodType, ProviderName
from payoutstore.storage.repository.contributor import ContributorRepository
from payoutstore.storage.repository.model.contributor import Contributor
from payoutstore.storage.repository.payout_method import PayoutMethodRepository
from payoutstore.storage.storage import Storage
from payoutstore.storage.test_integration.utils import (
    MARIA_PAYOUT_METHOD_IDENTIFIER,
    prepare_and_insert_contributor,
    prepare_and_insert_payout_method,
)


async def get_contributor(storage: Storage, username: str) -> Contributor:
    contributor = await storage.contributors().get_by_id(username, ProviderName.GITHUB)
    assert contributor is not None, f"{username} is seeded"
    return contributor


class TestPayoutMethodRepository:
    pytestmark = [pytest.mark.asyncio]

    async def test_registers_only_stripe_methods(self, seeded_storage: Storage):
        john = await get_contributor(seeded_storage, "john")
        with pytest.raises(PayoutMethodTypeNotSupportedError) as e:
            await seeded_storage.payout_methods().register(
                john, PayoutMethodType.PAYPAL, "paypal123Id"
            )
        assert e.value.error_code == PayoutMethodErrorCode.TYPE_NOT_SUPPORTED
        assert not e.value.retryable
        assert isinstance(e.value, PayoutMethodOperationNotSupportedError)
        assert len(await seeded_storage.payout_methods().of_contributor(john)) == 0

    async def test_registers_method(self, seeded_storage: Storage):
        methods = seeded_storage.payout_methods()
        john = await get_contributor(seeded_storage, "john")
        assert len(await methods.of_contributor(john)) == 0

        registered = await methods.register(john, PayoutMethodType.STRIPE, "acct2_0002")

        assert registered.belongs_to(john)
        assert registered.contributor_id == john.contributor_id
        assert registered.identifier == "acct2_0002"
        assert registered.active is False
        assert registered.type.lower() == PayoutMethodType.STRIPE.value
        assert len(await methods.of_contributor(john)) == 1

    async def test_registers_method_with_case_insensitive_type(
        self, seeded_storage: Storage
    ):
        bob = await get_contributor(seeded_storage, "bob")
        registered = await seeded_storage.payout_methods().register(
            bob, "STRIPE", "acct_upper"
        )
        assert registered.type == PayoutMethodType.STRIPE

    async def test_register_same_identifier_twice_fails(self, seeded_storage: Storage):
        john = await get_contributor(seeded_storage, "john")
        methods = seeded_storage.payout_methods()
        await methods.register(john, PayoutMethodType.STRIPE, "acct_dup")
        with pytest.raises(DBIntegrityUniqueViolationError):
            await methods.register(john, PayoutMethodType.STRIPE, "acct_dup")
        assert len(await methods.of_contributor(john)) == 1

    async def test_same_identifier_for_different_contributors(
        self, seeded_storage: Storage
    ):
        john = await get_contributor(seeded_storage, "john")
        bob = await get_contributor(seeded_storage, "bob")
        methods = seeded_storage.payout_methods()
        johns = await methods.register(john, PayoutMethodType.STRIPE, "acct_shared")
        bobs = await methods.register(bob, PayoutMethodType.STRIPE, "acct_shared")
        assert johns.id != bobs.id
        assert johns.belongs_to(john) and not johns.belongs_to(bob)

    async def test_activates_payout_method(self, seeded_storage: Storage):
        methods = seeded_storage.payout_methods()
        bob = await get_contributor(seeded_storage, "bob")
        registered = await methods.register(bob, PayoutMethodType.STRIPE, "acct2_0002")
        assert registered.active is False
        assert len(await methods.of_contributor(bob)) == 1

        activated = await methods.activate(registered)
        assert activated.active is True
        assert activated.id == registered.id
        assert activated.updated_at >= registered.updated_at

        selected = next(iter(await methods.of_contributor(bob)))
        assert selected.active is True

    async def test_activate_deactivates_other_methods_of_contributor(
        self, seeded_storage: Storage
    ):
        methods = seeded_storage.payout_methods()
        maria = await get_contributor(seeded_storage, "maria")
        john = await get_contributor(seeded_storage, "john")
        johns = await prepare_and_insert_payout_method(
            methods, john, "acct_john", active=True
        )

        second = await methods.register(maria, PayoutMethodType.STRIPE, "acct_002")
        await methods.activate(second)

        marias = await methods.of_contributor(maria)
        assert [(m.identifier, m.active) for m in marias] == [
            (MARIA_PAYOUT_METHOD_IDENTIFIER, False),
            ("acct_002", True),
        ]
        active = marias.active()
        assert active is not None
        assert active.identifier == "acct_002"

        # other contributors are left untouched
        still_johns = (await methods.of_contributor(john)).active()
        assert still_johns == johns

    async def test_activate_unknown_payout_method_fails(self, seeded_storage: Storage):
        methods = seeded_storage.payout_methods()
        maria = await get_contributor(seeded_storage, "maria")
        marias = await methods.of_contributor(maria)
        original = marias[0]
        unknown = original.model_copy(update={"id": original.id + 1000})

        with pytest.raises(PayoutMethodNotFoundError) as e:
            await methods.activate(unknown)
        assert e.value.error_code == PayoutMethodErrorCode.PAYOUT_METHOD_NOT_FOUND

        # nothing changed, the transaction was rolled back
        assert (await methods.of_contributor(maria)).active() == original

    async def test_of_contributor_returns_payout_methods(self, seeded_storage: Storage):
        maria = await get_contributor(seeded_storage, "maria")
        methods = await seeded_storage.payout_methods().of_contributor(maria)
        assert len(methods) == 1
        assert methods.contributor == maria

        method = next(iter(methods))
        assert method.identifier == MARIA_PAYOUT_METHOD_IDENTIFIER
        assert method.active is True
        assert method.type.lower() == PayoutMethodType.STRIPE.value
        assert method.belongs_to(maria)

    async def test_of_contributor_returns_empty(self, seeded_storage: Storage):
        dan = await get_contributor(seeded_storage, "dmarkov")
        methods = await seeded_storage.payout_methods().of_contributor(dan)
        assert list(methods) == []
        assert methods.active() is None

    async def test_contributor_payout_methods_register_and_activate(
        self, seeded_storage: Storage
    ):
        dan = await get_contributor(seeded_storage, "dmarkov")
        dans = await seeded_storage.payout_methods().of_contributor(dan)

        registered = await dans.register(PayoutMethodType.STRIPE, "acct_dan")
        assert registered.belongs_to(dan)
        activated = await dans.activate(registered)
        assert activated.active is True

        refreshed = await seeded_storage.payout_methods().of_contributor(dan)
        assert refreshed.active() == activated

    async def test_contributor_payout_methods_refuse_other_contributor(
        self, seeded_storage: Storage
    ):
        maria = await get_contributor(seeded_storage, "maria")
        dan = await get_contributor(seeded_storage, "dmarkov")
        marias = await seeded_storage.payout_methods().of_contributor(maria)
        dans = await seeded_storage.payout_methods().of_contributor(dan)

        assert await dans.of_contributor(dan) is dans
        with pytest.raises(PayoutMethodOperationNotSupportedError):
            await dans.of_contributor(maria)
        with pytest.raises(PayoutMethodOperationNotSupportedError):
            await dans.activate(marias[0])

    async def test_cannot_iterate(self, storage: Storage):
        with pytest.raises(PayoutMethodOperationNotSupportedError) as e:
            iter(storage.payout_methods())
        assert e.value.error_code == PayoutMethodErrorCode.OPERATION_NOT_SUPPORTED

    async def test_cannot_get_active(self, storage: Storage):
        with pytest.raises(PayoutMethodOperationNotSupportedError) as e:
            storage.payout_methods().active()
        assert e.value.error_code == PayoutMethodErrorCode.OPERATION_NOT_SUPPORTED

    async def test_methods_are_scoped_by_provider(
        self,
        contributor_repo: ContributorRepository,
        payout_method_repo: PayoutMethodRepository,
    ):
        on_github = await prepare_and_insert_contributor(
            contributor_repo, "maria", ProviderName.GITHUB
        )
        on_gitlab = await prepare_and_insert_contributor(
            contributor_repo, "maria", ProviderName.GITLAB
        )
        github_method = await prepare_and_insert_payout_method(
            payout_method_repo, on_github, "acct_maria", active=True
        )
        gitlab_method = await prepare_and_insert_payout_method(
            payout_method_repo, on_gitlab, "acct_maria", active=True
        )

        github_methods = await payout_method_repo.of_contributor(on_github)
        gitlab_methods = await payout_method_repo.of_contributor(on_gitlab)
        assert list(github_methods) == [github_method]
        assert list(gitlab_methods) == [gitlab_method]
        assert github_methods.active() == github_method
        assert gitlab_methods.active() == gitlab_method

    async def test_register_for_unregistered_contributor_fails(
        self, seeded_storage: Storage
    ):
        nobody = Contributor(
            username="nobody", provider=ProviderName.GITHUB, created_at=utc_now()
        )
        with pytest.raises(DBIntegrityError) as e:
            await seeded_storage.payout_methods().register(
                nobody, PayoutMethodType.STRIPE, "acct_nobody"
            )
        assert not isinstance(e.value, DBIntegrityUniqueViolationError)
        assert len(await seeded_storage.payout_methods().of_contributor(nobody)) == 0

    async def test_contributor_payout_methods_reflect_own_changes(
        self, seeded_storage: Storage
    ):
        maria = await get_contributor(seeded_storage, "maria")
        marias = await seeded_storage.payout_methods().of_contributor(maria)
        first = marias.active()
        assert first is not None

        registered = await marias.register(PayoutMethodType.STRIPE, "acct_002")
        assert list(marias)[-1] == registered
        activated = await marias.activate(registered)

        assert marias.active() == activated
        assert [m.active for m in marias] == [False, True]
        reloaded = await seeded_storage.payout_methods().of_contributor(maria)
        assert [(m.id, m.active) for m in reloaded] == [
            (m.id, m.active) for m in marias
        ]
