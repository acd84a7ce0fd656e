from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union, overload

from sqlalchemy import and_
from typing_extensions import final

from payoutstore.commons.core.errors import DBOperationError
from payoutstore.commons.database.infra import DB
from payoutstore.commons.utils.timestamps import utc_now
from payoutstore.storage.core.errors import (
    PayoutMethodNotFoundError,
    PayoutMethodOperationNotSupportedError,
    PayoutMethodTypeNotSupportedError,
)
from payoutstore.storage.models import (
    SUPPORTED_PAYOUT_METHOD_TYPES,
    PayoutMethodIdentifier,
    PayoutMethodType,
)
from payoutstore.storage.repository.base import StorageDBRepository
from payoutstore.storage.repository.model import payout_methods
from payoutstore.storage.repository.model.contributor import Contributor
from payoutstore.storage.repository.model.payout_method import (
    PayoutMethod,
    PayoutMethodCreate,
    PayoutMethodUpdate,
)


def _payout_method_type(payout_method_type: Union[PayoutMethodType, str]) -> str:
    if isinstance(payout_method_type, PayoutMethodType):
        return payout_method_type.value
    return payout_method_type.lower()


class PayoutMethodRepositoryInterface(ABC):
    @abstractmethod
    async def register(
        self,
        contributor: Contributor,
        payout_method_type: Union[PayoutMethodType, str],
        identifier: PayoutMethodIdentifier,
    ) -> PayoutMethod:
        pass

    @abstractmethod
    async def of_contributor(
        self, contributor: Contributor
    ) -> "ContributorPayoutMethods":
        pass

    @abstractmethod
    async def activate(self, payout_method: PayoutMethod) -> PayoutMethod:
        pass

    @abstractmethod
    def active(self) -> Optional[PayoutMethod]:
        pass


@final
class PayoutMethodRepository(StorageDBRepository, PayoutMethodRepositoryInterface):
    """
    Payout methods of all contributors.

    Lookups are always scoped per contributor through :meth:`of_contributor`,
    iterating all of them or asking for "the" active one is refused.
    """

    def __init__(self, database: DB):
        super().__init__(_database=database)

    async def register(
        self,
        contributor: Contributor,
        payout_method_type: Union[PayoutMethodType, str],
        identifier: PayoutMethodIdentifier,
    ) -> PayoutMethod:
        method_type = _payout_method_type(payout_method_type)
        if method_type not in SUPPORTED_PAYOUT_METHOD_TYPES:
            raise PayoutMethodTypeNotSupportedError()

        data = PayoutMethodCreate(
            username=contributor.username,
            provider=contributor.provider,
            type=method_type,
            identifier=identifier,
            active=False,
        )
        ts_now = utc_now()
        values = data.model_dump(exclude_unset=True)
        values.update(created_at=ts_now, updated_at=ts_now)
        stmt = (
            payout_methods.table.insert()
            .values(values)
            .returning(*payout_methods.table.columns.values())
        )
        row = await self._database.master().fetch_one(stmt)
        if row is None:
            raise DBOperationError("inserting payout method returned no row")
        return PayoutMethod.from_row(row)

    async def of_contributor(
        self, contributor: Contributor
    ) -> "ContributorPayoutMethods":
        stmt = (
            payout_methods.table.select()
            .where(
                and_(
                    payout_methods.username == contributor.username,
                    payout_methods.provider == contributor.provider,
                )
            )
            .order_by(payout_methods.id)
        )
        rows = await self._database.replica().fetch_all(stmt)
        return ContributorPayoutMethods(
            contributor=contributor,
            methods=[PayoutMethod.from_row(row) for row in rows],
            payout_methods=self,
        )

    async def activate(self, payout_method: PayoutMethod) -> PayoutMethod:
        """
        Activate payout_method and deactivate every other payout method of the same contributor.
        """
        ts_now = utc_now()
        activate_values = PayoutMethodUpdate(active=True).model_dump(
            exclude_unset=True
        )
        activate_values.update(updated_at=ts_now)
        deactivate_values = PayoutMethodUpdate(active=False).model_dump(
            exclude_unset=True
        )
        deactivate_values.update(updated_at=ts_now)

        async with self._database.master().transaction() as tx:
            connection = tx.connection()
            activate_stmt = (
                payout_methods.table.update()
                .where(
                    and_(
                        payout_methods.id == payout_method.id,
                        payout_methods.username == payout_method.username,
                        payout_methods.provider == payout_method.provider,
                    )
                )
                .values(activate_values)
                .returning(*payout_methods.table.columns.values())
            )
            row = await connection.fetch_one(activate_stmt)
            if not row:
                raise PayoutMethodNotFoundError()

            deactivate_others_stmt = (
                payout_methods.table.update()
                .where(
                    and_(
                        payout_methods.username == payout_method.username,
                        payout_methods.provider == payout_method.provider,
                        payout_methods.id != payout_method.id,
                        payout_methods.active.is_(True),
                    )
                )
                .values(deactivate_values)
            )
            await connection.execute(deactivate_others_stmt)
        return PayoutMethod.from_row(row)

    def active(self) -> Optional[PayoutMethod]:
        raise PayoutMethodOperationNotSupportedError(
            "Active payout method is only available per contributor."
        )

    def __iter__(self):
        raise PayoutMethodOperationNotSupportedError(
            "Payout methods can only be listed per contributor."
        )


class ContributorPayoutMethods(Sequence[PayoutMethod]):
    """
    Payout methods of one contributor, ordered by registration.

    Loaded once by :meth:`PayoutMethodRepository.of_contributor`, afterwards only
    register and activate made through this object are reflected in it.
    """

    _contributor: Contributor
    _methods: List[PayoutMethod]
    _payout_methods: PayoutMethodRepositoryInterface

    def __init__(
        self,
        *,
        contributor: Contributor,
        methods: List[PayoutMethod],
        payout_methods: PayoutMethodRepositoryInterface,
    ):
        self._contributor = contributor
        self._methods = list(methods)
        self._payout_methods = payout_methods

    @property
    def contributor(self) -> Contributor:
        return self._contributor

    def __len__(self) -> int:
        return len(self._methods)

    @overload
    def __getitem__(self, i: int) -> PayoutMethod:
        ...

    @overload
    def __getitem__(self, s: slice) -> Sequence[PayoutMethod]:
        ...

    def __getitem__(
        self, i: Union[int, slice]
    ) -> Union[PayoutMethod, Sequence[PayoutMethod]]:
        return self._methods[i]

    def active(self) -> Optional[PayoutMethod]:
        return next((method for method in self._methods if method.active), None)

    async def of_contributor(
        self, contributor: Contributor
    ) -> "ContributorPayoutMethods":
        if contributor.contributor_id != self._contributor.contributor_id:
            raise PayoutMethodOperationNotSupportedError(
                "These are the payout methods of another contributor."
            )
        return self

    async def register(
        self,
        payout_method_type: Union[PayoutMethodType, str],
        identifier: PayoutMethodIdentifier,
    ) -> PayoutMethod:
        registered = await self._payout_methods.register(
            self._contributor, payout_method_type, identifier
        )
        self._methods.append(registered)
        return registered

    async def activate(self, payout_method: PayoutMethod) -> PayoutMethod:
        if not payout_method.belongs_to(self._contributor):
            raise PayoutMethodOperationNotSupportedError(
                "Payout method belongs to another contributor."
            )
        activated = await self._payout_methods.activate(payout_method)
        others = [
            method.model_copy(update={"active": False}) if method.active else method
            for method in self._methods
            if method.id != activated.id
        ]
        self._methods = sorted(others + [activated], key=lambda method: method.id)
        return activated
