"""
Row CRUD statement templates for a bound table.

Pure string builders. Placeholders use psycopg's `%s` style; `where` and
`sets` fragments are passed through verbatim and must carry their own
placeholders.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from tablesync.schema.binding import SchemaBinding

_CLAUSE_KEYWORD = re.compile(r"(where|order|limit)\b", re.IGNORECASE)


def to_where(where: str) -> str:
    """
    Normalize a condition fragment into a clause suffix.

    >>> to_where("name = %s")
    ' where name = %s'
    >>> to_where("order by id")
    ' order by id'
    >>> to_where("limited = %s")
    ' where limited = %s'
    >>> to_where("")
    ''
    """
    where = where.strip()
    if not where:
        return ""
    if _CLAUSE_KEYWORD.match(where):
        return " " + where
    return " where " + where


def _serial(binding: SchemaBinding, column: str) -> bool:
    return "serial" in binding.field(column).column_type.rendered


def select_columns(binding: SchemaBinding) -> str:
    return f"select {', '.join(binding.column_names)} from {binding.qualified_name}"


def insert(binding: SchemaBinding) -> Tuple[List[str], str]:
    """
    INSERT statement without RETURNING.

    Returns the columns whose values must be supplied, in placeholder order;
    serial identity columns are left to the database.
    """
    columns = [column for column in binding.column_names if not _serial(binding, column)]
    placeholders = ", ".join("%s" for _ in columns)
    statement = (
        f"insert into {binding.qualified_name} ({', '.join(columns)}) values ({placeholders})"
    )
    return columns, statement


def insert_returning(binding: SchemaBinding) -> Tuple[List[str], str]:
    """INSERT statement returning the identity column."""
    columns, statement = insert(binding)
    return columns, f"{statement} returning {binding.identity.name}"


def find_by_id(binding: SchemaBinding) -> str:
    return f"{select_columns(binding)} where {binding.identity.name} = %s"


def find_where(binding: SchemaBinding, where: str) -> str:
    return select_columns(binding) + to_where(where)


def exists(binding: SchemaBinding) -> str:
    return f"select 1 from {binding.qualified_name} where {binding.identity.name} = %s limit 1"


def exists_where(binding: SchemaBinding, where: str) -> str:
    return f"select 1 from {binding.qualified_name}{to_where(where)} limit 1"


def count_where(binding: SchemaBinding, where: str) -> str:
    return f"select count(*) as count from {binding.qualified_name}{to_where(where)}"


def update_set(binding: SchemaBinding, sets: str, where: str) -> str:
    return f"update {binding.qualified_name} set {sets}{to_where(where)}"


def delete_by_id(binding: SchemaBinding) -> str:
    return f"delete from {binding.qualified_name} where {binding.identity.name} = %s"


def delete_where(binding: SchemaBinding, where: str) -> str:
    return f"delete from {binding.qualified_name}{to_where(where)}"


def truncate(binding: SchemaBinding) -> str:
    return f"truncate table {binding.qualified_name}"


__all__ = [
    "to_where",
    "select_columns",
    "insert",
    "insert_returning",
    "find_by_id",
    "find_where",
    "exists",
    "exists_where",
    "count_where",
    "update_set",
    "delete_by_id",
    "delete_where",
    "truncate",
]
