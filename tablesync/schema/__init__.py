"""
Schema package: type mapping, index parsing, binding, diffing and DDL rendering.

Everything in this package is pure; catalog reads and statement execution live
in `tablesync.sync` and `tablesync.infrastructure`.
"""

from tablesync.schema.binding import SchemaBinding, bind
from tablesync.schema.ddl import render, render_plan
from tablesync.schema.differ import reconcile
from tablesync.schema.indexes import (
    derive_index_name,
    parse_index_name,
    parse_index_specs,
)
from tablesync.schema.types import map_type, reduce_primitive

__all__ = [
    "SchemaBinding",
    "bind",
    "derive_index_name",
    "map_type",
    "parse_index_name",
    "parse_index_specs",
    "reconcile",
    "reduce_primitive",
    "render",
    "render_plan",
]
