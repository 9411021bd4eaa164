"""
Pooled row access for a bound table.

Executes the statement templates from `tablesync.queries` on a psycopg
connection pool. Rows come back as plain dicts keyed by column name.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool
from pydantic import BaseModel

from tablesync import queries
from tablesync.domain.models import Kind
from tablesync.domain.naming import to_snake
from tablesync.errors import ExecutionFailure
from tablesync.schema.binding import SchemaBinding

Row = Dict[str, Any]

_FETCH_NONE = "none"
_FETCH_ONE = "one"
_FETCH_ALL = "all"


class TableRepository:
    """
    CRUD helpers for one schema binding.

    Parameters
    ----------
    binding : SchemaBinding
        Table the repository reads and writes.
    pool : ConnectionPool
        Shared connection pool.
    """

    def __init__(self, binding: SchemaBinding, pool: ConnectionPool) -> None:
        self.binding = binding
        self._pool = pool

    def _run(self, statement: str, args: Sequence[Any] = (), fetch: str = _FETCH_NONE) -> Any:
        try:
            with self._pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(statement, tuple(args) or None)
                    if fetch == _FETCH_ONE:
                        return cur.fetchone()
                    if fetch == _FETCH_ALL:
                        return cur.fetchall()
                    return cur.rowcount
        except psycopg.Error as exc:
            raise ExecutionFailure(statement, exc) from exc

    def _adapt(self, column: str, value: Any) -> Any:
        if value is not None and self.binding.field(column).native.kind is Kind.MAP:
            return Jsonb(value)
        return value

    def insert(self, values: Union[Mapping[str, Any], BaseModel]) -> Any:
        """
        Insert one row and return its identity value.

        Serial identity columns are generated by the database; every other
        column must be present in `values`.
        """
        if isinstance(values, BaseModel):
            values = {to_snake(name): value for name, value in values.model_dump().items()}
        columns, statement = queries.insert_returning(self.binding)
        missing = [column for column in columns if column not in values]
        if missing:
            raise ValueError(f"Missing values for columns: {', '.join(missing)}")
        args = [self._adapt(column, values[column]) for column in columns]
        row = self._run(statement, args, fetch=_FETCH_ONE)
        return row[self.binding.identity.name]

    def find(self, identity: Any) -> Optional[Row]:
        return self._run(queries.find_by_id(self.binding), (identity,), fetch=_FETCH_ONE)

    def find_where(self, where: str, *args: Any) -> Optional[Row]:
        return self._run(queries.find_where(self.binding, where), args, fetch=_FETCH_ONE)

    def query_where(self, where: str, *args: Any) -> List[Row]:
        return self._run(queries.find_where(self.binding, where), args, fetch=_FETCH_ALL)

    def exists(self, identity: Any) -> bool:
        return self._run(queries.exists(self.binding), (identity,), fetch=_FETCH_ONE) is not None

    def exists_where(self, where: str, *args: Any) -> bool:
        return self._run(queries.exists_where(self.binding, where), args, fetch=_FETCH_ONE) is not None

    def count_where(self, where: str = "", *args: Any) -> int:
        row = self._run(queries.count_where(self.binding, where), args, fetch=_FETCH_ONE)
        return int(row["count"])

    def update_set(self, sets: str, where: str, *args: Any) -> int:
        """Run `update ... set <sets> <where>`; returns the affected row count."""
        return self._run(queries.update_set(self.binding, sets, where), args)

    def delete(self, identity: Any) -> int:
        return self._run(queries.delete_by_id(self.binding), (identity,))

    def delete_where(self, where: str, *args: Any) -> int:
        return self._run(queries.delete_where(self.binding, where), args)

    def truncate(self) -> None:
        self._run(queries.truncate(self.binding))


__all__ = ["TableRepository"]
