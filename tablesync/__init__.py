"""
tablesync - keep PostgreSQL tables in line with in-process record definitions.

This package derives a table schema from a record type and reconciles it
against the live catalog:

- Native types mapped to PostgreSQL column types
- Index declarations parsed into single and grouped indexes
- Missing tables, columns and indexes created; incompatible ones rejected
- Optional removal of columns and indexes no longer described
- Row CRUD statement templates for bound tables

The schema core is pure; catalog reads and DDL execution sit behind small
protocols so the same pass can run against PostgreSQL or a dry-run executor.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from tablesync.config import Settings, get_settings
from tablesync.domain.models import Kind, NativeType, ReconciliationPlan
from tablesync.domain.records import RecordType
from tablesync.errors import (
    CatalogReadError,
    ExecutionFailure,
    IndexUniquenessMismatch,
    InvalidFieldDefinition,
    InvalidIndexSpec,
    NullabilityMismatch,
    SchemaMismatch,
    TableSyncError,
    UnexpectedRemoteColumn,
    UnsupportedType,
)
from tablesync.schema.binding import SchemaBinding, bind
from tablesync.schema.ddl import render, render_plan
from tablesync.schema.differ import reconcile
from tablesync.sync import (
    DryRunExecutor,
    SchemaSynchronizer,
    plan_synchronization,
    render_create_table_statement,
    render_index_statements,
    synchronize,
)
from tablesync.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Record definitions
    "Kind",
    "NativeType",
    "RecordType",
    # Schema core
    "SchemaBinding",
    "bind",
    "reconcile",
    "render",
    "render_plan",
    "ReconciliationPlan",
    # Synchronization
    "DryRunExecutor",
    "SchemaSynchronizer",
    "plan_synchronization",
    "render_create_table_statement",
    "render_index_statements",
    "synchronize",
    # Errors
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
    # Logging
    "configure_logging",
    "get_logger",
]
