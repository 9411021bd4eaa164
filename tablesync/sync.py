"""
Synchronize live tables with their schema bindings.

Usage:
    from tablesync import RecordType, Kind, bind
    from tablesync.sync import SchemaSynchronizer

    binding = bind(RecordType("User").field("id", Kind.UINT64).field("name", Kind.TEXT))
    synchronizer = SchemaSynchronizer.from_settings()
    created = synchronizer.synchronize(binding)

A pass reads the catalog, builds the full plan (failing on any incompatibility
before touching the table), then executes the rendered statements in order.
The first failing statement aborts the pass with ExecutionFailure; nothing is
rolled back or retried. Re-running a pass against a matching table yields an
empty plan.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

from tablesync.config import Settings, get_settings
from tablesync.domain.models import ReconciliationPlan, RemoteColumn, RemoteIndex
from tablesync.errors import CatalogReadError, ExecutionFailure, TableSyncError
from tablesync.schema.binding import SchemaBinding
from tablesync.schema.ddl import render_create_index, render_create_table, render_plan
from tablesync.schema.differ import create_table_action, reconcile
from tablesync.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class CatalogReader(Protocol):
    """
    Read-only access to the live catalog.

    Both methods return an empty sequence, not an error, when the table does
    not exist.
    """

    def list_columns(self, database: str, schema: str, table: str) -> Sequence[RemoteColumn]:
        ...

    def list_indexes(self, table: str, schema: Optional[str] = None) -> Sequence[RemoteIndex]:
        ...


@runtime_checkable
class DDLExecutor(Protocol):
    """Executes one plain SQL statement; raises on failure."""

    def execute(self, statement: str) -> None:
        ...


class DryRunExecutor:
    """
    Executor that records statements instead of running them.
    """

    def __init__(self) -> None:
        self.statements: List[str] = []

    def execute(self, statement: str) -> None:
        self.statements.append(statement)


def render_create_table_statement(binding: SchemaBinding) -> str:
    """CREATE TABLE statement for `binding`, as issued against an empty database."""
    return render_create_table(binding.schema_name, binding.table_name, create_table_action(binding))


def render_index_statements(binding: SchemaBinding) -> List[str]:
    """CREATE INDEX statements for every index `binding` declares."""
    return [
        render_create_index(binding.schema_name, binding.table_name, descriptor)
        for descriptor in binding.indexes
    ]


def plan_synchronization(
    binding: SchemaBinding,
    catalog: CatalogReader,
    database: str,
    auto_drop_columns: bool = False,
) -> ReconciliationPlan:
    """
    Read a fresh catalog snapshot and compute the plan, without executing it.

    Raises
    ------
    CatalogReadError
        If the catalog reader fails, carrying the driver error as cause.
    """
    try:
        remote_columns = list(
            catalog.list_columns(database, binding.schema_name, binding.table_name)
        )
        remote_indexes: List[RemoteIndex] = []
        if remote_columns:
            remote_indexes = list(catalog.list_indexes(binding.table_name, binding.schema_name))
    except TableSyncError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise CatalogReadError(binding.qualified_name, exc) from exc
    return reconcile(binding, remote_columns, remote_indexes, auto_drop_columns=auto_drop_columns)


def execute_plan(plan: ReconciliationPlan, executor: DDLExecutor) -> List[str]:
    """
    Execute the rendered plan in order, stopping at the first failure.

    Returns
    -------
    List[str]
        The statements executed.

    Raises
    ------
    ExecutionFailure
        Carrying the offending statement and the driver error as cause.
    """
    statements = render_plan(plan)
    for statement in statements:
        log.debug(f"Executing: {statement}", extra={"table": plan.table_name})
        try:
            executor.execute(statement)
        except ExecutionFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ExecutionFailure(statement, exc) from exc
    return statements


def synchronize(
    binding: SchemaBinding,
    catalog: CatalogReader,
    executor: DDLExecutor,
    database: str,
    auto_drop_columns: bool = False,
) -> bool:
    """
    Bring the live table in line with `binding`.

    Parameters
    ----------
    binding : SchemaBinding
        Described schema.
    catalog : CatalogReader
        Source of the live columns and indexes.
    executor : DDLExecutor
        Runs the rendered statements.
    database : str
        Database (catalog) name the table lives in.
    auto_drop_columns : bool
        Drop live columns the binding does not describe instead of failing
        with UnexpectedRemoteColumn.

    Returns
    -------
    bool
        True if the table was created by this pass.
    """
    table = binding.qualified_name
    log.info(f"[SYNC START] {table}", extra={"table": binding.table_name})
    try:
        plan = plan_synchronization(binding, catalog, database, auto_drop_columns)
        statements = execute_plan(plan, executor)
    except TableSyncError as exc:
        log.error(f"[SYNC FAILED] {table}: {exc}", extra={"table": binding.table_name})
        raise

    log.info(
        f"[SYNC DONE] {table}",
        extra={
            "table": binding.table_name,
            "statements": len(statements),
            "created": plan.creates_table,
        },
    )
    return plan.creates_table


class SchemaSynchronizer:
    """
    Binds a catalog reader, an executor and a database name for repeated use.

    Holds no per-table state, so one instance may synchronize several bindings,
    including concurrently through `synchronize_all`.
    """

    def __init__(
        self,
        catalog: CatalogReader,
        executor: DDLExecutor,
        database: str,
        auto_drop_columns: bool = False,
    ) -> None:
        self.catalog = catalog
        self.executor = executor
        self.database = database
        self.auto_drop_columns = auto_drop_columns

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SchemaSynchronizer":
        """
        Build a synchronizer on the shared PostgreSQL pool described by settings.

        Creates the database first when it is missing and DB_CREATE_DATABASE is set.
        """
        from tablesync.infrastructure import (
            PostgresCatalog,
            PostgresExecutor,
            ensure_database,
            get_sync_pool,
        )

        settings = settings or get_settings()
        if settings.db_create_database:
            ensure_database(settings.dsn)
        pool = get_sync_pool(
            dsn=settings.dsn,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )
        return cls(
            catalog=PostgresCatalog(pool),
            executor=PostgresExecutor(pool),
            database=settings.db_name,
            auto_drop_columns=settings.auto_drop_columns,
        )

    def _auto_drop(self, auto_drop_columns: Optional[bool]) -> bool:
        return self.auto_drop_columns if auto_drop_columns is None else auto_drop_columns

    def plan(self, binding: SchemaBinding, auto_drop_columns: Optional[bool] = None) -> ReconciliationPlan:
        return plan_synchronization(
            binding, self.catalog, self.database, self._auto_drop(auto_drop_columns)
        )

    def synchronize(self, binding: SchemaBinding, auto_drop_columns: Optional[bool] = None) -> bool:
        return synchronize(
            binding,
            self.catalog,
            self.executor,
            self.database,
            self._auto_drop(auto_drop_columns),
        )

    def verify(self, binding: SchemaBinding) -> ReconciliationPlan:
        """
        Re-read the catalog and return what would still need to change.

        The plan is empty when the live table matches the binding.
        """
        return self.plan(binding, auto_drop_columns=True)

    def synchronize_all(
        self,
        bindings: Sequence[SchemaBinding],
        max_workers: Optional[int] = None,
    ) -> Dict[str, bool]:
        """
        Synchronize several bindings concurrently, one worker per table.

        Returns table -> created. The first failure, in `bindings` order, is
        re-raised after every pass has finished.
        """
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [(binding, pool.submit(self.synchronize, binding)) for binding in bindings]
            outcomes = []
            for binding, future in futures:
                try:
                    outcomes.append((binding, future.result(), None))
                except TableSyncError as exc:
                    outcomes.append((binding, False, exc))

        for _, _, error in outcomes:
            if error is not None:
                raise error
        return {binding.qualified_name: created for binding, created, _ in outcomes}


__all__ = [
    "CatalogReader",
    "DDLExecutor",
    "DryRunExecutor",
    "SchemaSynchronizer",
    "execute_plan",
    "plan_synchronization",
    "render_create_table_statement",
    "render_index_statements",
    "synchronize",
]
