"""
Error types raised by schema binding, reconciliation and DDL execution.

All errors derive from TableSyncError so callers can catch the whole family
at the `synchronize` boundary. None of them are retried internally.
"""

from __future__ import annotations

from typing import Optional


class TableSyncError(Exception):
    """Base error for tablesync operations."""


class InvalidFieldDefinition(TableSyncError):
    """A record field is missing, malformed, or breaks the identity-field rule."""

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(f"Invalid field '{field}': {detail}")
        self.field = field
        self.detail = detail


class UnsupportedType(TableSyncError):
    """A native field type has no SQL mapping."""

    def __init__(self, kind: str, detail: str) -> None:
        super().__init__(f"Unsupported field type {kind}: {detail}")
        self.kind = kind
        self.detail = detail


class InvalidIndexSpec(TableSyncError):
    """An index declaration on a field could not be parsed."""

    def __init__(self, field: str, detail: str) -> None:
        super().__init__(f"Invalid index spec on field '{field}': {detail}")
        self.field = field
        self.detail = detail


class SchemaMismatch(TableSyncError):
    """Local and remote column types reduce to different primitive families."""

    def __init__(self, column: str, local_family: str, remote_family: str) -> None:
        super().__init__(
            f"Column '{column}' type '{local_family}' doesn't match remote column type '{remote_family}'"
        )
        self.column = column
        self.local_family = local_family
        self.remote_family = remote_family


class NullabilityMismatch(TableSyncError):
    """Local and remote column nullability differ."""

    def __init__(self, column: str, local_nullable: bool, remote_nullable: bool) -> None:
        super().__init__(
            f"Column '{column}' nullability doesn't match remote column: "
            f"local nullable={local_nullable}, remote nullable={remote_nullable}"
        )
        self.column = column
        self.local_nullable = local_nullable
        self.remote_nullable = remote_nullable


class IndexUniquenessMismatch(TableSyncError):
    """A local index and the remote index with the same name disagree on uniqueness."""

    def __init__(self, index_name: str, local_unique: bool, remote_unique: bool) -> None:
        super().__init__(
            f"Index '{index_name}' unique option is inconsistent with remote database: "
            f"{local_unique} vs {remote_unique}"
        )
        self.index_name = index_name
        self.local_unique = local_unique
        self.remote_unique = remote_unique


class UnexpectedRemoteColumn(TableSyncError):
    """The live table has a column the record type does not describe."""

    def __init__(self, column: str) -> None:
        super().__init__(
            f"Remote column '{column}' is not described locally; "
            "enable auto_drop_columns to drop it"
        )
        self.column = column


class CatalogReadError(TableSyncError):
    """Reading the live columns or indexes of a table failed."""

    def __init__(self, table: str, cause: BaseException) -> None:
        super().__init__(f"Failed to read catalog for '{table}': {cause}")
        self.table = table
        self.cause = cause


class ExecutionFailure(TableSyncError):
    """A statement failed to execute. The offending SQL is kept on the error."""

    def __init__(self, statement: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{cause}: {statement}" if cause is not None else statement)
        self.statement = statement
        self.cause = cause


__all__ = [
    "TableSyncError",
    "InvalidFieldDefinition",
    "UnsupportedType",
    "InvalidIndexSpec",
    "SchemaMismatch",
    "NullabilityMismatch",
    "IndexUniquenessMismatch",
    "UnexpectedRemoteColumn",
    "CatalogReadError",
    "ExecutionFailure",
]
