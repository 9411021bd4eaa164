"""
DDL synthesizer: render reconciliation actions as PostgreSQL statements.

Pure rendering, no I/O. Identifiers are spliced in as-is: every name reaching
this module comes from a binding, which only admits lower snake_case
identifiers.
"""

from __future__ import annotations

from typing import List

from tablesync.domain.models import (
    Action,
    AddColumn,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropIndex,
    IndexDescriptor,
    IndexKey,
    ReconciliationPlan,
)


def _key_expression(key: IndexKey) -> str:
    column = f"lower({key.column})" if key.case_folded else key.column
    return f"{column} ASC"


def render_create_table(schema: str, table: str, action: CreateTable) -> str:
    definitions = []
    for position, column in enumerate(action.columns):
        definition = f"{column.name} {column.column_type}"
        if position == 0 and action.primary_key is None:
            definition += " PRIMARY KEY"
        definitions.append(definition)
    if action.primary_key is not None:
        definitions.append(f"PRIMARY KEY ({', '.join(action.primary_key.columns)})")
    return f"CREATE TABLE {schema}.{table} ({', '.join(definitions)})"


def render_create_index(schema: str, table: str, descriptor: IndexDescriptor) -> str:
    unique = "UNIQUE " if descriptor.unique else ""
    expressions = ", ".join(_key_expression(key) for key in descriptor.keys)
    return f"CREATE {unique}INDEX ON {schema}.{table} ({expressions})"


def render(schema: str, table: str, action: Action) -> str:
    """Render one action against `schema.table` as a single statement."""
    if isinstance(action, CreateTable):
        return render_create_table(schema, table, action)
    if isinstance(action, CreateIndex):
        return render_create_index(schema, table, action.descriptor)
    if isinstance(action, AddColumn):
        return f"ALTER TABLE {schema}.{table} ADD COLUMN {action.name} {action.column_type}"
    if isinstance(action, DropColumn):
        return f"ALTER TABLE {schema}.{table} DROP COLUMN {action.name}"
    if isinstance(action, DropIndex):
        return f"DROP INDEX {schema}.{action.name}"
    raise TypeError(f"Unknown reconciliation action: {action!r}")


def render_plan(plan: ReconciliationPlan) -> List[str]:
    """Render every action of `plan`, preserving order."""
    return [render(plan.schema_name, plan.table_name, action) for action in plan.actions]


__all__ = ["render", "render_plan", "render_create_table", "render_create_index"]
