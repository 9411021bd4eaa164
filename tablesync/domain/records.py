"""
Record type definitions.

A RecordType is an explicit, ordered list of fields built once per record,
either through the chained builder API:

    users = (
        RecordType("User")
        .field("id", Kind.UINT64)
        .field("name", Kind.TEXT, limit=32, index="single=asc,unique")
        .field("createdAt", Kind.TIMESTAMP)
    )

or from an existing pydantic model with `RecordType.from_model(UserModel)`.
"""

from __future__ import annotations

import types
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union, get_args, get_origin

from annotated_types import Ge, Gt, MaxLen
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from tablesync.domain.models import FieldSpec, Kind, NativeType
from tablesync.errors import InvalidFieldDefinition, UnsupportedType

_SCALAR_KINDS: Dict[Any, Kind] = {
    int: Kind.INT64,
    float: Kind.FLOAT64,
    str: Kind.TEXT,
    bool: Kind.BOOL,
    bytes: Kind.BYTES,
    datetime: Kind.TIMESTAMP,
}

# Kinds that map to nullable SQL types already; Optional[...] adds nothing.
_NULLABLE_KINDS = frozenset({Kind.BYTES, Kind.LIST, Kind.MAP})


class RecordType:
    """
    Ordered field registry for one record type.

    Parameters
    ----------
    name : str
        Record type name; the default table name is derived from it.
    table_name : str | None
        Explicit table name, bypassing derivation.
    schema : str | None
        Explicit schema name, otherwise the binding default applies.
    """

    def __init__(
        self,
        name: str,
        table_name: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> None:
        self.name = name
        self.table_name = table_name
        self.schema = schema
        self._fields: List[FieldSpec] = []

    @property
    def fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(self._fields)

    def field(
        self,
        name: str,
        kind: Union[Kind, str],
        *,
        element: Union[Kind, str, None] = None,
        optional: bool = False,
        length: int = 0,
        limit: int = 0,
        index: Optional[str] = None,
    ) -> "RecordType":
        """Register the next field and return self for chaining."""
        if any(existing.name == name for existing in self._fields):
            raise InvalidFieldDefinition(name, "field is declared twice")
        if length < 0 or limit < 0:
            raise InvalidFieldDefinition(name, "length and limit must not be negative")
        try:
            native = NativeType(
                kind=Kind(kind),
                element=Kind(element) if element is not None else None,
                optional=optional,
            )
        except ValueError as exc:
            raise InvalidFieldDefinition(name, f"unknown kind: {exc}") from exc
        self._fields.append(
            FieldSpec(name=name, native=native, length=length, limit=limit, index=index)
        )
        return self

    @classmethod
    def from_model(cls, model: Type[BaseModel], name: Optional[str] = None) -> "RecordType":
        """
        Build a RecordType from a pydantic model's fields, in declaration order.

        Recognized field metadata:
        - `Optional[X]` / `X | None` marks the field optional.
        - `Field(ge=0)` on an int marks it unsigned (uint64).
        - `Field(max_length=n)` on a str sets the varchar limit.
        - `json_schema_extra` keys: `kind` (explicit Kind value), `index`,
          `length`, `limit`.

        The model may set `__sql_table__` and `__sql_schema__` class attributes.
        """
        record = cls(
            name or model.__name__,
            table_name=getattr(model, "__sql_table__", None),
            schema=getattr(model, "__sql_schema__", None),
        )
        for field_name, info in model.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            native = _native_type(field_name, info, extra)
            record.field(
                field_name,
                native.kind,
                element=native.element,
                optional=native.optional,
                length=int(extra.get("length", 0)),
                limit=int(extra.get("limit", _max_length(info))),
                index=extra.get("index"),
            )
        return record

    def __repr__(self) -> str:
        return f"RecordType({self.name!r}, fields={[f.name for f in self._fields]!r})"


def _max_length(info: FieldInfo) -> int:
    for constraint in info.metadata:
        if isinstance(constraint, MaxLen):
            return constraint.max_length
    return 0


def _is_unsigned(info: FieldInfo) -> bool:
    for constraint in info.metadata:
        if isinstance(constraint, Ge) and constraint.ge >= 0:
            return True
        if isinstance(constraint, Gt) and constraint.gt >= -1:
            return True
    return False


def _unwrap_optional(field_name: str, annotation: Any) -> Tuple[Any, bool]:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        members = [arg for arg in args if arg is not type(None)]
        if len(members) != 1:
            raise UnsupportedType(str(annotation), f"field '{field_name}': unions are not supported")
        return members[0], len(members) != len(args)
    return annotation, False


def _native_type(field_name: str, info: FieldInfo, extra: Mapping[str, Any]) -> NativeType:
    annotation, optional = _unwrap_optional(field_name, info.annotation)

    if "kind" in extra:
        try:
            kind = Kind(extra["kind"])
            element = Kind(extra["element"]) if extra.get("element") else None
        except ValueError as exc:
            raise InvalidFieldDefinition(field_name, f"unknown kind: {exc}") from exc
        return NativeType(kind=kind, element=element, optional=optional and kind not in _NULLABLE_KINDS)

    origin = get_origin(annotation)
    if annotation is dict or origin is dict:
        return NativeType(kind=Kind.MAP)
    if origin is list:
        (item,) = get_args(annotation) or (None,)
        element = _SCALAR_KINDS.get(item)
        if element is None:
            raise UnsupportedType(str(annotation), f"field '{field_name}': unsupported list element")
        return NativeType(kind=Kind.LIST, element=element)

    kind = _SCALAR_KINDS.get(annotation)
    if kind is None:
        raise UnsupportedType(str(annotation), f"field '{field_name}' has no SQL mapping")
    if kind is Kind.INT64 and _is_unsigned(info):
        kind = Kind.UINT64
    return NativeType(kind=kind, optional=optional and kind not in _NULLABLE_KINDS)


__all__ = ["RecordType"]
