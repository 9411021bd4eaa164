"""
Domain models for tablesync.

Descriptors are derived once from a record type at binding time and are
immutable afterwards. Remote facts are fetched fresh from the catalog on every
reconciliation pass. Reconciliation actions form the plan the differ builds and
the DDL synthesizer renders.
"""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field

_FROZEN = {"frozen": True, "populate_by_name": True, "arbitrary_types_allowed": False}


class Kind(str, Enum):
    """Semantic type tag of a record field."""

    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT64 = "float64"
    TEXT = "text"
    BOOL = "bool"
    BYTES = "bytes"
    LIST = "list"
    MAP = "map"
    TIMESTAMP = "timestamp"

    @property
    def is_unsigned(self) -> bool:
        return self in (Kind.UINT16, Kind.UINT32, Kind.UINT64)


# Kinds allowed on the identity (first) field.
IDENTITY_KINDS = frozenset({Kind.UINT16, Kind.UINT32, Kind.UINT64, Kind.TEXT})


class NativeType(BaseModel):
    """
    Native type of a field: a kind, an element kind for sequences, and an
    optional wrapper.
    """

    kind: Kind
    element: Optional[Kind] = Field(None, description="Element kind for Kind.LIST.")
    optional: bool = Field(False, description="Whether the field is wrapped in Optional.")

    model_config = _FROZEN

    def __str__(self) -> str:
        base = f"{self.kind.value}[{self.element.value}]" if self.element else self.kind.value
        return f"optional[{base}]" if self.optional else base


class FieldSpec(BaseModel):
    """
    One field as registered on a RecordType, before binding.
    """

    name: str
    native: NativeType
    length: int = 0
    limit: int = 0
    index: Optional[str] = None

    model_config = _FROZEN


class ColumnType(BaseModel):
    """
    Rendered SQL type expression plus the facets the differ compares.
    """

    rendered: str
    primitive_family: str
    nullable: bool
    has_default: bool

    model_config = _FROZEN

    def __str__(self) -> str:
        return self.rendered


class FieldDescriptor(BaseModel):
    """
    Canonical description of one column, in declaration order.
    """

    name: str = Field(..., description="snake_case column name.")
    native: NativeType
    is_identity: bool = False
    length: int = 0
    limit: int = 0
    index_spec: Optional[str] = None
    column_type: ColumnType

    model_config = _FROZEN


class IndexKey(BaseModel):
    column: str
    case_folded: bool = False

    model_config = _FROZEN


class IndexDescriptor(BaseModel):
    """
    Normalized index intent. Key order is significant.
    """

    keys: Tuple[IndexKey, ...]
    unique: bool = False
    is_primary_key_group: bool = False

    model_config = _FROZEN

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(key.column for key in self.keys)


class RemoteColumn(BaseModel):
    """
    Row of information_schema.columns.
    """

    column_name: str
    data_type: str
    is_nullable: str = "YES"

    model_config = _FROZEN

    @property
    def nullable(self) -> bool:
        return self.is_nullable.upper() != "NO"


class RemoteIndex(BaseModel):
    """
    Row of pg_indexes.
    """

    schema_name: str = "public"
    table_name: str
    index_name: str
    index_def: str

    model_config = _FROZEN

    @property
    def unique(self) -> bool:
        # Textual check on the rendered definition, not a structured parse.
        return "UNIQUE" in self.index_def


class ColumnDefinition(BaseModel):
    name: str
    column_type: str

    model_config = _FROZEN


class CreateTable(BaseModel):
    kind: Literal["create_table"] = "create_table"
    columns: Tuple[ColumnDefinition, ...]
    primary_key: Optional[IndexDescriptor] = None

    model_config = _FROZEN


class AddColumn(BaseModel):
    kind: Literal["add_column"] = "add_column"
    name: str
    column_type: str

    model_config = _FROZEN


class DropColumn(BaseModel):
    kind: Literal["drop_column"] = "drop_column"
    name: str

    model_config = _FROZEN


class CreateIndex(BaseModel):
    kind: Literal["create_index"] = "create_index"
    name: str = Field(..., description="Derived index name the database will assign.")
    descriptor: IndexDescriptor

    model_config = _FROZEN


class DropIndex(BaseModel):
    kind: Literal["drop_index"] = "drop_index"
    name: str

    model_config = _FROZEN


Action = Union[CreateTable, AddColumn, DropColumn, CreateIndex, DropIndex]


class ReconciliationPlan(BaseModel):
    """
    Ordered actions that bring one live table in line with its binding.
    """

    schema_name: str
    table_name: str
    actions: Tuple[Action, ...] = ()

    model_config = _FROZEN

    @property
    def creates_table(self) -> bool:
        return any(isinstance(action, CreateTable) for action in self.actions)

    @property
    def is_empty(self) -> bool:
        return not self.actions


__all__ = [
    "Kind",
    "IDENTITY_KINDS",
    "NativeType",
    "FieldSpec",
    "ColumnType",
    "FieldDescriptor",
    "IndexKey",
    "IndexDescriptor",
    "RemoteColumn",
    "RemoteIndex",
    "ColumnDefinition",
    "CreateTable",
    "AddColumn",
    "DropColumn",
    "CreateIndex",
    "DropIndex",
    "Action",
    "ReconciliationPlan",
]
