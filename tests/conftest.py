"""
Pytest configuration for tablesync.

Provides fixtures for:
- Settings override and database availability for integration tests
- An in-memory catalog fake for synchronization tests
- Sample record types and bindings
"""

from __future__ import annotations

import os
import uuid
from typing import Dict, Generator, List, Optional, Sequence, Tuple

import psycopg
import pytest

from tablesync.config import Settings
from tablesync.domain.models import Kind, RemoteColumn, RemoteIndex
from tablesync.domain.records import RecordType
from tablesync.schema.binding import SchemaBinding, bind


class FakeCatalog:
    """
    In-memory catalog keyed by (schema, table).

    Mirrors the live catalog contract: unknown tables yield empty sequences.
    """

    def __init__(self) -> None:
        self.columns: Dict[Tuple[str, str], List[RemoteColumn]] = {}
        self.indexes: Dict[Tuple[str, str], List[RemoteIndex]] = {}
        self.column_reads = 0
        self.index_reads = 0

    def add_column(
        self, schema: str, table: str, name: str, data_type: str, nullable: bool = False
    ) -> None:
        self.columns.setdefault((schema, table), []).append(
            RemoteColumn(
                column_name=name,
                data_type=data_type,
                is_nullable="YES" if nullable else "NO",
            )
        )

    def add_index(self, schema: str, table: str, name: str, unique: bool = False) -> None:
        definition = (
            f"CREATE {'UNIQUE ' if unique else ''}INDEX {name} ON {schema}.{table} USING btree (x)"
        )
        self.indexes.setdefault((schema, table), []).append(
            RemoteIndex(schema_name=schema, table_name=table, index_name=name, index_def=definition)
        )

    def list_columns(self, database: str, schema: str, table: str) -> Sequence[RemoteColumn]:
        del database
        self.column_reads += 1
        return list(self.columns.get((schema, table), []))

    def list_indexes(self, table: str, schema: Optional[str] = None) -> Sequence[RemoteIndex]:
        self.index_reads += 1
        return list(self.indexes.get((schema or "public", table), []))


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def user_record() -> RecordType:
    """
    User record with a varchar name, a case-folded unique email and a timestamp.
    """
    return (
        RecordType("User")
        .field("id", Kind.UINT64)
        .field("name", Kind.TEXT, limit=32)
        .field("email", Kind.TEXT, index="single,unique,lower")
        .field("createdAt", Kind.TIMESTAMP)
    )


@pytest.fixture
def user_binding(user_record: RecordType) -> SchemaBinding:
    return bind(user_record)


@pytest.fixture
def follow_binding() -> SchemaBinding:
    """
    Follow record with a composite primary key and a plain single index.
    """
    return bind(
        RecordType("Follow")
        .field("id", Kind.UINT64)
        .field("followerId", Kind.UINT64, index="group=pkey")
        .field("followeeId", Kind.UINT64, index="single")
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "tablesync_test"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.dsn


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            conn.execute("SELECT 1")
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def throwaway_schema(
    test_dsn: str, db_connection_available: bool
) -> Generator[str, None, None]:
    """
    Create a uniquely named schema for one test and drop it afterwards.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    name = f"tablesync_{uuid.uuid4().hex[:12]}"
    with psycopg.connect(test_dsn, autocommit=True) as conn:
        conn.execute(f"CREATE SCHEMA {name}")
    try:
        yield name
    finally:
        with psycopg.connect(test_dsn, autocommit=True) as conn:
            conn.execute(f"DROP SCHEMA IF EXISTS {name} CASCADE")
