"""
Infrastructure package for tablesync.

Centralizes database connectivity concerns (connection factory, pooling,
catalog reads and DDL execution). Keep this layer focused on I/O and resource
management, decoupled from the schema core.
"""

from tablesync.infrastructure.db_factory import (
    PoolManager,
    ensure_database,
    get_sync_connection,
    get_sync_pool,
)
from tablesync.infrastructure.dsn import database_name, format_dsn, parse_dsn
from tablesync.infrastructure.postgres import PostgresCatalog, PostgresExecutor

__all__ = [
    "PoolManager",
    "PostgresCatalog",
    "PostgresExecutor",
    "database_name",
    "ensure_database",
    "format_dsn",
    "get_sync_connection",
    "get_sync_pool",
    "parse_dsn",
]
