"""
Schema differ: compare a binding's described schema against the live catalog
and build the ordered reconciliation plan.

The differ never executes anything. Every compatibility check runs while the
plan is built, so an incompatible table fails before the first statement.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from tablesync.domain.models import (
    Action,
    AddColumn,
    ColumnDefinition,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropIndex,
    RemoteColumn,
    RemoteIndex,
    ReconciliationPlan,
)
from tablesync.errors import (
    IndexUniquenessMismatch,
    NullabilityMismatch,
    SchemaMismatch,
    UnexpectedRemoteColumn,
)
from tablesync.schema.binding import SchemaBinding
from tablesync.schema.indexes import column_for_index_name, derive_index_name
from tablesync.schema.types import reduce_primitive
from tablesync.utils.logging import get_logger

log = get_logger(__name__)

# Indexes backing a PRIMARY KEY constraint carry this in their system-generated name.
PRIMARY_KEY_INDEX_MARKER = "_pkey"


def create_table_action(binding: SchemaBinding) -> CreateTable:
    """CreateTable action for `binding`: every column, and the composite primary key if declared."""
    return CreateTable(
        columns=tuple(
            ColumnDefinition(name=field.name, column_type=field.column_type.rendered)
            for field in binding.fields
        ),
        primary_key=binding.primary_key,
    )


def _create_table_plan(binding: SchemaBinding) -> List[Action]:
    actions: List[Action] = [create_table_action(binding)]
    log.info(f"Table '{binding.qualified_name}' to be created", extra={"table": binding.table_name})
    for descriptor in binding.indexes:
        name = derive_index_name(binding.table_name, descriptor)
        actions.append(CreateIndex(name=name, descriptor=descriptor))
    return actions


def _column_actions(
    binding: SchemaBinding,
    remote_columns: Sequence[RemoteColumn],
    auto_drop_columns: bool,
) -> List[Action]:
    actions: List[Action] = []
    remote_by_name: Dict[str, RemoteColumn] = {c.column_name: c for c in remote_columns}

    for field in binding.fields:
        remote = remote_by_name.get(field.name)
        if remote is None:
            log.info(
                f"Remote column '{field.name}' to be created",
                extra={"table": binding.table_name, "column": field.name},
            )
            actions.append(AddColumn(name=field.name, column_type=field.column_type.rendered))
            continue

        local_family = field.column_type.primitive_family
        remote_family = reduce_primitive(remote.data_type)
        if local_family != remote_family:
            raise SchemaMismatch(field.name, local_family, remote_family)
        if field.column_type.nullable != remote.nullable:
            raise NullabilityMismatch(field.name, field.column_type.nullable, remote.nullable)

    local_names = set(binding.column_names)
    for remote in remote_columns:
        if remote.column_name in local_names:
            continue
        if not auto_drop_columns:
            raise UnexpectedRemoteColumn(remote.column_name)
        log.info(
            f"Remote column '{remote.column_name}' to be dropped",
            extra={"table": binding.table_name, "column": remote.column_name},
        )
        actions.append(DropColumn(name=remote.column_name))
    return actions


def _index_actions(binding: SchemaBinding, remote_indexes: Sequence[RemoteIndex]) -> List[Action]:
    actions: List[Action] = []
    remote_by_name: Dict[str, RemoteIndex] = {index.index_name: index for index in remote_indexes}

    local_names = set()
    for descriptor in binding.indexes:
        name = derive_index_name(binding.table_name, descriptor)
        local_names.add(name)
        remote = remote_by_name.get(name)
        if remote is None:
            log.info(
                f"Remote index '{name}' to be created",
                extra={"table": binding.table_name, "index": name},
            )
            actions.append(CreateIndex(name=name, descriptor=descriptor))
            continue
        if descriptor.unique != remote.unique:
            raise IndexUniquenessMismatch(name, descriptor.unique, remote.unique)

    for name in sorted(remote_by_name):
        if name in local_names or PRIMARY_KEY_INDEX_MARKER in name:
            continue
        column = column_for_index_name(binding.table_name, name, binding.column_names)
        if column is None:
            log.debug(
                f"Remote index '{name}' is not managed by this binding, skipping",
                extra={"table": binding.table_name, "index": name},
            )
            continue
        log.info(
            f"Remote index '{name}' to be dropped",
            extra={"table": binding.table_name, "index": name},
        )
        actions.append(DropIndex(name=name))
    return actions


def reconcile(
    binding: SchemaBinding,
    remote_columns: Sequence[RemoteColumn],
    remote_indexes: Sequence[RemoteIndex] = (),
    auto_drop_columns: bool = False,
) -> ReconciliationPlan:
    """
    Compute the actions that bring the live table in line with `binding`.

    Parameters
    ----------
    binding : SchemaBinding
        Described (local) schema.
    remote_columns : Sequence[RemoteColumn]
        Live columns; empty means the table does not exist.
    remote_indexes : Sequence[RemoteIndex]
        Live indexes on the table. Ignored when the table does not exist.
    auto_drop_columns : bool
        Drop live columns the binding does not describe instead of failing.

    Returns
    -------
    ReconciliationPlan
        CreateTable then CreateIndex for a missing table; otherwise AddColumn,
        DropColumn, CreateIndex, DropIndex in that order. Empty when the live
        table already matches.

    Raises
    ------
    SchemaMismatch, NullabilityMismatch, UnexpectedRemoteColumn, IndexUniquenessMismatch
    """
    if not remote_columns:
        actions = _create_table_plan(binding)
    else:
        actions = _column_actions(binding, remote_columns, auto_drop_columns)
        actions.extend(_index_actions(binding, remote_indexes))

    return ReconciliationPlan(
        schema_name=binding.schema_name,
        table_name=binding.table_name,
        actions=tuple(actions),
    )


__all__ = ["PRIMARY_KEY_INDEX_MARKER", "create_table_action", "reconcile"]
