from abc import ABC, abstractmethod
from typing import Optional, Union

from sqlalchemy import and_
from typing_extensions import final

from payoutstore.commons.core.errors import (
    DBIntegrityUniqueViolationError,
    DBOperationError,
)
from payoutstore.commons.database.infra import DB
from payoutstore.commons.utils.timestamps import utc_now
from payoutstore.storage.models import ContributorUsername, ProviderName
from payoutstore.storage.repository.base import StorageDBRepository
from payoutstore.storage.repository.model import contributors
from payoutstore.storage.repository.model.contributor import (
    Contributor,
    ContributorCreate,
)


def _provider_name(provider: Union[ProviderName, str]) -> str:
    return provider.value if isinstance(provider, ProviderName) else provider


class ContributorRepositoryInterface(ABC):
    @abstractmethod
    async def get_by_id(
        self, username: ContributorUsername, provider: Union[ProviderName, str]
    ) -> Optional[Contributor]:
        pass

    @abstractmethod
    async def register(
        self, username: ContributorUsername, provider: Union[ProviderName, str]
    ) -> Contributor:
        pass


@final
class ContributorRepository(StorageDBRepository, ContributorRepositoryInterface):
    def __init__(self, database: DB):
        super().__init__(_database=database)

    async def get_by_id(
        self, username: ContributorUsername, provider: Union[ProviderName, str]
    ) -> Optional[Contributor]:
        stmt = contributors.table.select().where(
            and_(
                contributors.username == username,
                contributors.provider == _provider_name(provider),
            )
        )
        row = await self._database.replica().fetch_one(stmt)
        return Contributor.from_row(row) if row else None

    async def register(
        self, username: ContributorUsername, provider: Union[ProviderName, str]
    ) -> Contributor:
        """
        Register a contributor, or return the already registered one.
        """
        data = ContributorCreate(username=username, provider=_provider_name(provider))
        values = data.model_dump(exclude_unset=True)
        values.update(created_at=utc_now())
        stmt = (
            contributors.table.insert()
            .values(values)
            .returning(*contributors.table.columns.values())
        )
        try:
            row = await self._database.master().fetch_one(stmt)
        except DBIntegrityUniqueViolationError:
            existing = await self._get_by_id_from_master(data.username, data.provider)
            if existing is None:
                raise
            return existing
        if row is None:
            raise DBOperationError("inserting contributor returned no row")
        return Contributor.from_row(row)

    async def _get_by_id_from_master(
        self, username: ContributorUsername, provider: str
    ) -> Optional[Contributor]:
        stmt = contributors.table.select().where(
            and_(contributors.username == username, contributors.provider == provider)
        )
        row = await self._database.master().fetch_one(stmt)
        return Contributor.from_row(row) if row else None
