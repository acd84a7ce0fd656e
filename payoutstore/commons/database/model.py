from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

import sqlalchemy
from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, Table
from sqlalchemy.exc import ArgumentError
from sqlalchemy.sql.schema import SchemaItem

from payoutstore.commons.utils.dataclass_extensions import (
    no_init_factory_field,
    no_init_field,
)


def column(*args, **kwargs) -> Column:
    """
    Declare a column attribute of a :class:`TableDefinition`.
    Each TableDefinition instance gets its own Column object, so one definition class
    can be bound to several sqlalchemy.MetaData instances.
    """
    return no_init_factory_field(lambda: Column(*args, **kwargs))


@dataclass(frozen=True)
class TableDefinition:
    """
    Customized wrapper around SqlAlchemy Table object so that we can statically refer to column names and add more
    extensions around table schema
    """

    db_metadata: sqlalchemy.MetaData
    table: Table = no_init_field()
    name: str = no_init_field()

    # Additional positional SchemaItem args passed to creating a Sqlalchemy table
    # See https://docs.sqlalchemy.org/en/20/core/metadata.html#sqlalchemy.schema.Table
    additional_schema_args: List[SchemaItem] = no_init_field([])

    # Additional kwargs passed to creating a Sqlalchemy table
    # See https://docs.sqlalchemy.org/en/20/core/metadata.html#sqlalchemy.schema.Table
    additional_schema_kwargs: Dict[str, Any] = no_init_field({})

    def _validate_column(self, column: Column):
        if column.default is not None:
            raise ArgumentError(
                f"Application-level defaults are not supported; they must be manually specified in INSERT statements.\n"
                f"Column '{column.name}' in table '{self.name}' has "
                f"application-level default specified: {repr(column.default)}"
            )

    def _schema_args(self) -> List[SchemaItem]:
        """
        Override to provide constraints which have to be built per table instance,
        e.g. ForeignKeyConstraint or UniqueConstraint referencing this definition's columns
        """
        return []

    def __post_init__(self):
        """
        Utilize dataclass post init hook to load any instance attribute
        with sqlalchemy.Column type as a column of delegate Table
        """
        sa_schema_positional_args: List[SchemaItem] = []
        # Append Column instances first
        for k in dir(self):
            attribute = self.__getattribute__(k)
            if isinstance(attribute, Column):
                self._validate_column(attribute)
                sa_schema_positional_args.append(attribute)
        # Then append other schema items
        sa_schema_positional_args.extend(self.additional_schema_args)
        sa_schema_positional_args.extend(self._schema_args())

        object.__setattr__(
            self,
            "table",
            Table(
                self.name,
                self.db_metadata,
                *sa_schema_positional_args,
                **self.additional_schema_kwargs,
            ),
        )


class DBEntity(BaseModel):
    """
    Base pydantic entity model. Represents a DB entity converted from raw Database row result.

    Note: a subclass of DBEntity need to conform two restrictions determined by the Table schema it's associated to:
    1. all field names is subset of table's column names
    2. python type of each field is exactly same as corresponding table column's python type
    with the exception of field's nullability

    These any newly implemented subclass of DBEntity should be tested
    via :func:`payoutstore.commons.test_unit.database.utils.validation_db_entity_and_table_schema`
    """

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_row(cls, row: Mapping):
        """
        Construct a Pydantic Model from a row/mapping, ignoring extra fields
        """
        return cls.model_validate(
            {name: row[name] for name in cls.model_fields if name in row}
        )

    def __init__(__pydantic_self__, **data: Any) -> None:
        super().__init__(**data)

        # Does not allow specifying an instance of DB entity without any specified field value
        if type(__pydantic_self__).model_fields and (
            not __pydantic_self__.model_fields_set
        ):
            raise ValueError(
                f"At least 1 field need to be specified in model={type(__pydantic_self__)}"
            )

        # validate if an optional field is set to None by user and throw error if it is not allowed to do so
        for field in __pydantic_self__.model_fields_set:
            if (
                __pydantic_self__.__getattribute__(field) is None
                and field in __pydantic_self__.__class__.not_allow_set_none_fields()
            ):
                raise ValueError(f"{field} is not allowed to set as None")

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs):
        # enforce only None is allowed as default in DB entity
        # since we heavily rely on .model_dump(exclude_unset=True) to avoid unexpected behavior
        for name, field in cls.model_fields.items():
            if not field.is_required() and field.default is not None:
                raise ValueError(
                    f"only default=None is allowed for field, "
                    f"but found field={name} default={field.default} model={cls}"
                )

    @classmethod
    def not_allow_set_none_fields(cls) -> List[str]:
        """
        Override this to provide set of fields that are not allowed to specified as None.
        When specifying a field as Optional, this means user can leave the field unset.
        But this doesn't mean underlying consumer of this model accept None value on this field.
        """
        return []
