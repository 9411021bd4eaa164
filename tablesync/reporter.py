from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from tablesync.domain.models import (
    Action,
    AddColumn,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropIndex,
    ReconciliationPlan,
)
from tablesync.schema.ddl import render

_ACTION_STYLES = {
    "create_table": "bold green",
    "add_column": "green",
    "create_index": "cyan",
    "drop_column": "bold red",
    "drop_index": "red",
}


def _target(plan: ReconciliationPlan, action: Action) -> str:
    if isinstance(action, CreateTable):
        return f"{plan.schema_name}.{plan.table_name}"
    if isinstance(action, (AddColumn, DropColumn, CreateIndex, DropIndex)):
        return action.name
    return ""


def build_plan_table(plan: ReconciliationPlan) -> Table:
    """
    Build a rich table listing each planned action and its statement.
    """
    table = Table(
        title=f"Reconciliation plan for {plan.schema_name}.{plan.table_name}",
        box=box.ROUNDED,
        caption="Executed top to bottom; the first failure stops the pass",
    )
    table.add_column("#", justify="right", style="magenta")
    table.add_column("Action", no_wrap=True)
    table.add_column("Target", style="yellow", no_wrap=True)
    table.add_column("Statement", overflow="fold")

    for position, action in enumerate(plan.actions, start=1):
        style = _ACTION_STYLES.get(action.kind, "")
        table.add_row(
            str(position),
            f"[{style}]{action.kind}[/{style}]" if style else action.kind,
            _target(plan, action),
            render(plan.schema_name, plan.table_name, action),
        )
    return table


def print_plan(plan: ReconciliationPlan, console: Optional[Console] = None) -> None:
    """
    Render a reconciliation plan as a rich table.

    Prints a single line instead when the live table already matches.
    """
    console = console or Console()

    if plan.is_empty:
        console.print(
            f"[green]{plan.schema_name}.{plan.table_name} is up to date.[/green]"
        )
        return

    console.print(build_plan_table(plan))


__all__ = ["build_plan_table", "print_plan"]
