"""
Connection-string helpers.

Accepts both libpq forms: `key=value` pairs (`host=db dbname=app`) and URLs
(`postgresql://user@db/app`). Parsing is delegated to libpq through
psycopg.conninfo.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

import psycopg
from psycopg.conninfo import conninfo_to_dict, make_conninfo

MAINTENANCE_DATABASE = "postgres"


def parse_dsn(dsn: str) -> Dict[str, str]:
    """
    Parse a DSN into its connection parameters.

    Raises
    ------
    ValueError
        If libpq rejects the DSN.
    """
    try:
        params = conninfo_to_dict(dsn)
    except psycopg.ProgrammingError as exc:
        raise ValueError(f"Invalid dsn: {exc}") from exc
    return {key: str(value) for key, value in params.items() if value is not None}


def format_dsn(params: Mapping[str, Any]) -> str:
    """Render connection parameters as a `key=value` DSN, quoting where needed."""
    return make_conninfo(**{key: str(value) for key, value in params.items()})


def database_name(dsn: str) -> str:
    """
    Database a DSN points at.

    Raises
    ------
    ValueError
        If the DSN does not name a database.
    """
    name = parse_dsn(dsn).get("dbname", "")
    if not name:
        raise ValueError("dsn: dbname is not set")
    return name


def with_database(dsn: str, dbname: str) -> str:
    """Same connection parameters, different database."""
    return make_conninfo(dsn, dbname=dbname)


__all__ = ["MAINTENANCE_DATABASE", "parse_dsn", "format_dsn", "database_name", "with_database"]
