"""
Domain package for tablesync.

Exports record definitions, descriptor value objects and naming helpers.
Keep this package focused on data definitions and validation concerns.
"""

from tablesync.domain.models import (
    AddColumn,
    ColumnType,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropIndex,
    FieldDescriptor,
    IndexDescriptor,
    IndexKey,
    Kind,
    NativeType,
    ReconciliationPlan,
    RemoteColumn,
    RemoteIndex,
)
from tablesync.domain.naming import to_snake, to_table_name
from tablesync.domain.records import RecordType

__all__ = [
    "AddColumn",
    "ColumnType",
    "CreateIndex",
    "CreateTable",
    "DropColumn",
    "DropIndex",
    "FieldDescriptor",
    "IndexDescriptor",
    "IndexKey",
    "Kind",
    "NativeType",
    "ReconciliationPlan",
    "RecordType",
    "RemoteColumn",
    "RemoteIndex",
    "to_snake",
    "to_table_name",
]
