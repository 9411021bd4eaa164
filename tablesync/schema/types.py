"""
Type mapping from native field kinds to PostgreSQL column types.

`map_type` renders the full column type expression (type, nullability,
default, check constraint). `reduce_primitive` folds any rendered type, or a
`data_type` value read from information_schema.columns, to the coarse
primitive family the differ compares.

Family table (non-optional kinds):

    int16/uint16      smallint      uint16 identity  -> smallserial -> smallint
    int32/uint32      integer       uint32 identity  -> serial      -> integer
    int64/uint64      bigint        uint64 identity  -> bigserial   -> bigint
    float64           double
    text              text | character (varchar/char)
    bool              boolean
    timestamp         timestamp
    bytes             bytea
    list[...]         ARRAY
    map               jsonb
"""

from __future__ import annotations

from typing import Dict

from tablesync.domain.models import ColumnType, Kind, NativeType
from tablesync.errors import UnsupportedType

NOT_NULL = "not null"
EPOCH_ZERO = "'0001-01-01 00:00:00+00'"

_INTEGER_TYPES: Dict[Kind, str] = {
    Kind.INT16: "smallint",
    Kind.INT32: "integer",
    Kind.INT64: "bigint",
    Kind.UINT16: "smallint",
    Kind.UINT32: "integer",
    Kind.UINT64: "bigint",
}

_SERIAL_TYPES: Dict[Kind, str] = {
    Kind.UINT16: "smallserial",
    Kind.UINT32: "serial",
    Kind.UINT64: "bigserial",
}

_ARRAY_TYPES: Dict[Kind, str] = {
    Kind.INT32: "integer[]",
    Kind.INT64: "bigint[]",
    Kind.TEXT: "text[]",
}

_FAMILY_ALIASES: Dict[str, str] = {
    "smallserial": "smallint",
    "serial": "integer",
    "bigserial": "bigint",
    "char": "character",
    "varchar": "character",
}


def reduce_primitive(type_string: str) -> str:
    """
    Reduce a SQL type expression to its primitive family.

    Drops every trailing clause and any parenthesized width, folds serial
    types to their integer family and char/varchar to "character". Anything
    ending in `[]` (or information_schema's own "ARRAY") is "ARRAY".
    """
    head = type_string.strip().split(" ", 1)[0]
    if head.endswith("[]"):
        return "ARRAY"
    head = head.split("(", 1)[0]
    return _FAMILY_ALIASES.get(head, head)


def _text_type(length: int, limit: int) -> str:
    if limit > 0:
        return f"varchar({limit})"
    if length > 0:
        return f"char({length})"
    return "text"


def _render(native: NativeType, column: str, is_identity: bool, length: int, limit: int) -> str:
    kind = native.kind
    if native.element is not None and kind is not Kind.LIST:
        raise UnsupportedType(str(native), "only list fields take an element kind")

    if native.optional:
        if kind in _INTEGER_TYPES:
            if kind is Kind.UINT16 and is_identity:
                return _SERIAL_TYPES[kind]
            if kind.is_unsigned:
                return f"{_INTEGER_TYPES[kind]} check ({column} > -1)"
            return _INTEGER_TYPES[kind]
        if kind is Kind.FLOAT64:
            return "double precision"
        if kind is Kind.TEXT:
            return _text_type(length, limit)
        if kind is Kind.BOOL:
            return "boolean"
        if kind is Kind.TIMESTAMP:
            return "timestamp with time zone"
        raise UnsupportedType(str(native), f"{kind.value} cannot be optional")

    if kind in _INTEGER_TYPES:
        if kind.is_unsigned:
            if is_identity:
                return f"{_SERIAL_TYPES[kind]} {NOT_NULL}"
            return f"{_INTEGER_TYPES[kind]} {NOT_NULL} default 0 check ({column} > -1)"
        return f"{_INTEGER_TYPES[kind]} {NOT_NULL} default 0"
    if kind is Kind.FLOAT64:
        return f"double precision {NOT_NULL} default 0"
    if kind is Kind.TEXT:
        return f"{_text_type(length, limit)} {NOT_NULL} default ''"
    if kind is Kind.BOOL:
        return f"boolean {NOT_NULL} default false"
    if kind is Kind.TIMESTAMP:
        return f"timestamp with time zone {NOT_NULL} default {EPOCH_ZERO}"
    if kind is Kind.BYTES:
        return "bytea"
    if kind is Kind.MAP:
        return "jsonb"
    if kind is Kind.LIST:
        if native.element not in _ARRAY_TYPES:
            raise UnsupportedType(str(native), "lists hold int32, int64 or text elements")
        return _ARRAY_TYPES[native.element]
    raise UnsupportedType(str(native), "no SQL mapping")


def map_type(
    native: NativeType,
    column: str,
    is_identity: bool = False,
    length: int = 0,
    limit: int = 0,
) -> ColumnType:
    """
    Map one field's native type and tags to a PostgreSQL column type.

    Parameters
    ----------
    native : NativeType
        Field kind, element kind and optional flag.
    column : str
        Column name, used in the non-negative check of unsigned kinds.
    is_identity : bool
        Whether the field is the identity column; unsigned identities map to
        serial types.
    length, limit : int
        char(length) / varchar(limit) hints for text fields; limit wins.

    Raises
    ------
    UnsupportedType
        If the kind/structure combination has no mapping.
    """
    rendered = _render(native, column, is_identity, length, limit)
    return ColumnType(
        rendered=rendered,
        primitive_family=reduce_primitive(rendered),
        nullable=NOT_NULL not in rendered,
        has_default=" default " in rendered,
    )


__all__ = ["NOT_NULL", "EPOCH_ZERO", "map_type", "reduce_primitive"]
