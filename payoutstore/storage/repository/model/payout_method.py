from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKeyConstraint,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql.schema import SchemaItem
from typing_extensions import final

from payoutstore.commons.database.model import DBEntity, TableDefinition, column
from payoutstore.commons.utils.dataclass_extensions import no_init_field
from payoutstore.storage.models import ContributorId
from payoutstore.storage.repository.model.contributor import Contributor


@final
@dataclass(frozen=True)
class PayoutMethodTable(TableDefinition):
    name: str = no_init_field("payout_methods")
    # id
    id: Column = column("id", Integer, primary_key=True, autoincrement=True)
    # owning contributor
    username: Column = column("username", Text, nullable=False)
    provider: Column = column("provider", Text, nullable=False)
    # type
    type: Column = column("type", Text, nullable=False)
    # external account identifier
    identifier: Column = column("identifier", Text, nullable=False)
    # active
    active: Column = column("active", Boolean, nullable=False)
    # created_at
    created_at: Column = column("created_at", DateTime(False), nullable=False)
    # updated_at
    updated_at: Column = column("updated_at", DateTime(False), nullable=False)

    def _schema_args(self) -> List[SchemaItem]:
        return [
            ForeignKeyConstraint(
                ["username", "provider"],
                ["contributors.username", "contributors.provider"],
                name="payout_methods_contributor_fkey",
            ),
            UniqueConstraint(
                "username",
                "provider",
                "identifier",
                name="payout_methods_contributor_identifier_key",
            ),
        ]


class _PayoutMethodPartial(DBEntity):
    username: Optional[str] = None
    provider: Optional[str] = None
    type: Optional[str] = None
    identifier: Optional[str] = None
    active: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PayoutMethod(_PayoutMethodPartial):
    id: int
    username: str
    provider: str
    type: str
    identifier: str
    active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def contributor_id(self) -> ContributorId:
        return ContributorId(username=self.username, provider=self.provider)

    def belongs_to(self, contributor: Contributor) -> bool:
        return self.contributor_id == contributor.contributor_id


class PayoutMethodCreate(_PayoutMethodPartial):
    username: str
    provider: str
    type: str
    identifier: str
    active: bool

    @classmethod
    def not_allow_set_none_fields(cls) -> List[str]:
        return ["active"]


class PayoutMethodUpdate(_PayoutMethodPartial):
    active: bool
