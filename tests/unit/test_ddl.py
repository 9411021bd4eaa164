from __future__ import annotations

import pytest

from tablesync.domain.models import (
    AddColumn,
    ColumnDefinition,
    CreateIndex,
    CreateTable,
    DropColumn,
    DropIndex,
    IndexDescriptor,
    IndexKey,
    ReconciliationPlan,
)
from tablesync.schema.ddl import render, render_create_index, render_create_table, render_plan
from tablesync.schema.indexes import parse_index_specs


def test_create_table_marks_first_column_primary_key() -> None:
    action = CreateTable(
        columns=(
            ColumnDefinition(name="id", column_type="text not null default ''"),
            ColumnDefinition(name="score", column_type="double precision"),
        )
    )

    assert render_create_table("app", "scores", action) == (
        "CREATE TABLE app.scores (id text not null default '' PRIMARY KEY, score double precision)"
    )


def test_create_table_with_composite_primary_key() -> None:
    action = CreateTable(
        columns=(
            ColumnDefinition(name="id", column_type="bigserial not null"),
            ColumnDefinition(name="tenant", column_type="integer not null default 0"),
        ),
        primary_key=IndexDescriptor(
            keys=(IndexKey(column="id"), IndexKey(column="tenant")),
            is_primary_key_group=True,
        ),
    )

    statement = render_create_table("public", "things", action)

    assert "PRIMARY KEY (id, tenant)" in statement
    assert "bigserial not null PRIMARY KEY" not in statement


@pytest.mark.parametrize(
    ("descriptor", "expected"),
    [
        (
            IndexDescriptor(keys=(IndexKey(column="name"),)),
            "CREATE INDEX ON public.users (name ASC)",
        ),
        (
            IndexDescriptor(keys=(IndexKey(column="email", case_folded=True),), unique=True),
            "CREATE UNIQUE INDEX ON public.users (lower(email) ASC)",
        ),
        (
            IndexDescriptor(keys=(IndexKey(column="created_at"),)),
            "CREATE INDEX ON public.users (created_at ASC)",
        ),
        (
            IndexDescriptor(
                keys=(IndexKey(column="a"), IndexKey(column="b", case_folded=True)),
                unique=True,
            ),
            "CREATE UNIQUE INDEX ON public.users (a ASC, lower(b) ASC)",
        ),
    ],
)
def test_render_create_index(descriptor: IndexDescriptor, expected: str) -> None:
    assert render_create_index("public", "users", descriptor) == expected


def test_descending_declaration_still_renders_ascending() -> None:
    _, indexes = parse_index_specs({"created_at": "single=desc"})

    assert [render_create_index("public", "users", d) for d in indexes] == [
        "CREATE INDEX ON public.users (created_at ASC)"
    ]


def test_render_alter_statements() -> None:
    assert (
        render("public", "users", AddColumn(name="age", column_type="integer"))
        == "ALTER TABLE public.users ADD COLUMN age integer"
    )
    assert (
        render("public", "users", DropColumn(name="age"))
        == "ALTER TABLE public.users DROP COLUMN age"
    )
    assert render("crm", "users", DropIndex(name="users_age_idx")) == "DROP INDEX crm.users_age_idx"


def test_render_rejects_unknown_actions() -> None:
    with pytest.raises(TypeError):
        render("public", "users", object())  # type: ignore[arg-type]


def test_render_plan_preserves_order() -> None:
    plan = ReconciliationPlan(
        schema_name="public",
        table_name="users",
        actions=(
            AddColumn(name="age", column_type="integer"),
            CreateIndex(
                name="users_age_idx",
                descriptor=IndexDescriptor(keys=(IndexKey(column="age"),)),
            ),
            DropIndex(name="users_old_idx"),
        ),
    )

    assert render_plan(plan) == [
        "ALTER TABLE public.users ADD COLUMN age integer",
        "CREATE INDEX ON public.users (age ASC)",
        "DROP INDEX public.users_old_idx",
    ]
