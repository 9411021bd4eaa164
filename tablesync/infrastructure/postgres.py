"""
PostgreSQL implementations of the catalog reader and DDL executor.

The catalog reader queries information_schema.columns and pg_indexes; both
return an empty list when the table does not exist. The executor runs one
statement per pooled connection, committing on success.
"""

from __future__ import annotations

from typing import List, Optional

from psycopg.rows import class_row
from psycopg_pool import ConnectionPool

from tablesync.domain.models import RemoteColumn, RemoteIndex

COLUMNS_QUERY = """
    SELECT column_name, data_type, is_nullable
    FROM information_schema.columns
    WHERE table_catalog = %s AND table_schema = %s AND table_name = %s
    ORDER BY ordinal_position
"""

INDEXES_QUERY = """
    SELECT schemaname AS schema_name, tablename AS table_name,
           indexname AS index_name, indexdef AS index_def
    FROM pg_indexes
    WHERE tablename = %s
"""


class PostgresCatalog:
    """
    Catalog reader backed by a psycopg connection pool.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def list_columns(self, database: str, schema: str, table: str) -> List[RemoteColumn]:
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=class_row(RemoteColumn)) as cur:
                cur.execute(COLUMNS_QUERY, (database, schema, table))
                return cur.fetchall()

    def list_indexes(self, table: str, schema: Optional[str] = None) -> List[RemoteIndex]:
        query = INDEXES_QUERY
        params: tuple = (table,)
        if schema is not None:
            query += " AND schemaname = %s"
            params = (table, schema)
        with self._pool.connection() as conn:
            with conn.cursor(row_factory=class_row(RemoteIndex)) as cur:
                cur.execute(query + " ORDER BY indexname", params)
                return cur.fetchall()


class PostgresExecutor:
    """
    DDL executor backed by a psycopg connection pool.

    Each statement runs on its own pooled connection and is committed when the
    connection is returned. Driver errors propagate unchanged.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def execute(self, statement: str) -> None:
        with self._pool.connection() as conn:
            conn.execute(statement)


__all__ = ["PostgresCatalog", "PostgresExecutor", "COLUMNS_QUERY", "INDEXES_QUERY"]
