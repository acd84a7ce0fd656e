from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Text
from typing_extensions import final

from payoutstore.commons.database.model import DBEntity, TableDefinition, column
from payoutstore.commons.utils.dataclass_extensions import no_init_field
from payoutstore.storage.models import ContributorId


@final
@dataclass(frozen=True)
class ContributorTable(TableDefinition):
    name: str = no_init_field("contributors")
    # username on the provider
    username: Column = column("username", Text, primary_key=True)
    # provider
    provider: Column = column("provider", Text, primary_key=True)
    # created_at
    created_at: Column = column("created_at", DateTime(False), nullable=False)


class _ContributorPartial(DBEntity):
    username: Optional[str] = None
    provider: Optional[str] = None
    created_at: Optional[datetime] = None


class Contributor(_ContributorPartial):
    username: str
    provider: str
    created_at: datetime

    @property
    def contributor_id(self) -> ContributorId:
        return ContributorId(username=self.username, provider=self.provider)


class ContributorCreate(_ContributorPartial):
    username: str
    provider: str
