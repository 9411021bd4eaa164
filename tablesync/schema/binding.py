"""
Schema binding: derive column and index descriptors from a record type.

Binding is pure. It validates the identity-field rule and the identifier
allow-list, maps every field's type once and parses index declarations once;
the result is immutable for the binding's lifetime.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from pydantic import BaseModel

from tablesync.domain.models import IDENTITY_KINDS, FieldDescriptor, IndexDescriptor
from tablesync.domain.naming import is_identifier, to_snake, to_table_name
from tablesync.domain.records import RecordType
from tablesync.errors import InvalidFieldDefinition
from tablesync.schema.indexes import parse_index_specs
from tablesync.schema.types import map_type
from tablesync.utils.logging import get_logger

log = get_logger(__name__)

IDENTITY_COLUMN = "id"
DEFAULT_SCHEMA = "public"


class SchemaBinding(BaseModel):
    """
    Described schema of one record type, bound to a table.
    """

    record_name: str
    schema_name: str
    table_name: str
    fields: Tuple[FieldDescriptor, ...]
    indexes: Tuple[IndexDescriptor, ...] = ()
    primary_key: Optional[IndexDescriptor] = None

    model_config = {"frozen": True}

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.table_name}"

    @property
    def identity(self) -> FieldDescriptor:
        return self.fields[0]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    def field(self, column: str) -> FieldDescriptor:
        for descriptor in self.fields:
            if descriptor.name == column:
                return descriptor
        raise KeyError(column)


def _check_identifier(owner: str, name: str, what: str) -> None:
    if not is_identifier(name):
        raise InvalidFieldDefinition(owner, f"{what} '{name}' is not a lower snake_case identifier")


def bind(
    record: RecordType,
    schema: Optional[str] = None,
    table_name: Optional[str] = None,
) -> SchemaBinding:
    """
    Derive the described schema of `record`. Does not touch the database.

    Parameters
    ----------
    record : RecordType
        Ordered field definitions.
    schema : str | None
        Target schema; defaults to the record's own schema, then "public".
    table_name : str | None
        Target table; defaults to the record's own table name, then the
        pluralized snake_case record name.

    Raises
    ------
    InvalidFieldDefinition
        If the first field is not an unsigned-integer or text `id`, a name is
        not a valid identifier, or two fields share a column name.
    UnsupportedType
        If a field type has no SQL mapping.
    InvalidIndexSpec
        If an index declaration cannot be parsed.
    """
    schema_name = schema or record.schema or DEFAULT_SCHEMA
    table = table_name or record.table_name or to_table_name(record.name)
    _check_identifier(record.name, schema_name, "schema")
    _check_identifier(record.name, table, "table")

    if not record.fields:
        raise InvalidFieldDefinition(record.name, "record type has no fields")

    descriptors = []
    index_specs: Dict[str, str] = {}
    for position, spec in enumerate(record.fields):
        column = to_snake(spec.name)
        _check_identifier(spec.name, column, "column")
        if any(descriptor.name == column for descriptor in descriptors):
            raise InvalidFieldDefinition(spec.name, f"column '{column}' is declared twice")

        is_identity = position == 0
        if is_identity:
            if column != IDENTITY_COLUMN:
                raise InvalidFieldDefinition(
                    spec.name, f"the first field must be named '{IDENTITY_COLUMN}'"
                )
            native = spec.native
            if native.kind not in IDENTITY_KINDS or native.optional or native.element is not None:
                raise InvalidFieldDefinition(
                    spec.name,
                    f"identity type must be one of uint16, uint32, uint64, text; got {native}",
                )

        column_type = map_type(
            spec.native, column, is_identity=is_identity, length=spec.length, limit=spec.limit
        )
        descriptors.append(
            FieldDescriptor(
                name=column,
                native=spec.native,
                is_identity=is_identity,
                length=spec.length,
                limit=spec.limit,
                index_spec=spec.index,
                column_type=column_type,
            )
        )
        if spec.index is not None:
            index_specs[column] = spec.index

    primary_key, indexes = parse_index_specs(index_specs, identity_column=IDENTITY_COLUMN)

    binding = SchemaBinding(
        record_name=record.name,
        schema_name=schema_name,
        table_name=table,
        fields=tuple(descriptors),
        indexes=tuple(indexes),
        primary_key=primary_key,
    )
    log.debug(
        f"Bound {record.name} to {binding.qualified_name}",
        extra={"table": table, "columns": len(descriptors), "indexes": len(indexes)},
    )
    return binding


__all__ = ["SchemaBinding", "bind", "IDENTITY_COLUMN", "DEFAULT_SCHEMA"]
