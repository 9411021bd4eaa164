"""
Database connection factory utilities for tablesync.

Provides centralized management of PostgreSQL connections and the shared
connection pool. The PoolManager singleton ensures the pool is cleaned up on
application exit; multiple schema bindings may synchronize concurrently
through it.

Connection acquisition retries transient failures using tenacity. Statement
execution is never retried.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from psycopg import Connection, sql
from psycopg_pool import ConnectionPool
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from tablesync.config import get_settings
from tablesync.infrastructure.dsn import MAINTENANCE_DATABASE, database_name, with_database
from tablesync.utils.logging import get_logger

log = get_logger(__name__)


def _is_missing_database(exc: BaseException) -> bool:
    return isinstance(exc, psycopg.OperationalError) and "does not exist" in str(exc)


def _is_transient(exc: BaseException) -> bool:
    """Connection errors worth retrying; a missing database is not one."""
    if _is_missing_database(exc):
        return False
    return isinstance(exc, (psycopg.OperationalError, psycopg.InterfaceError))


def _retrying(attempts: Optional[int] = None) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(attempts or get_settings().db_connect_retries),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(_is_transient),
        reraise=True,
    )


class PoolManager:
    """
    Thread-safe singleton for managing the database connection pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._sync_pool: Optional[ConnectionPool] = None
                # Register cleanup on exit
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(
        self,
        dsn: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        dsn : str | None
            Connection string; defaults to the settings DSN. Only used when the
            pool is first created.
        min_size : int | None
            Minimum number of idle connections to keep.
        max_size : int | None
            Maximum total connections in the pool.

        Returns
        -------
        ConnectionPool
            The managed sync pool instance.
        """
        with self._lock:
            if self._sync_pool is None:
                settings = get_settings()
                self._sync_pool = ConnectionPool(
                    conninfo=dsn or settings.dsn,
                    min_size=min_size or settings.db_pool_min_size,
                    max_size=max_size or settings.db_pool_max_size,
                    open=True,
                )
            return self._sync_pool

    @contextmanager
    def sync_connection(self) -> Generator[Connection, None, None]:
        """
        Context manager for obtaining a sync connection from the pool.

        Example
        -------
            manager = PoolManager()
            with manager.sync_connection() as conn:
                conn.execute("SELECT 1")
        """
        pool = self.get_sync_pool()
        with pool.connection() as conn:
            yield conn

    def close_all(self) -> None:
        """
        Close the managed pool and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._sync_pool is not None:
                try:
                    self._sync_pool.close()
                except Exception:
                    pass  # Best-effort cleanup
                finally:
                    self._sync_pool = None


def get_sync_connection(dsn: Optional[str] = None, autocommit: bool = False) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries transient connection errors with exponential backoff, up to
    `DB_CONNECT_RETRIES` attempts. Use this for one-off operations; prefer the
    pool for repeated use.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts, or the database does
        not exist.
    """
    conninfo = dsn or get_settings().dsn
    for attempt in _retrying():
        with attempt:
            return psycopg.connect(conninfo, autocommit=autocommit)
    raise AssertionError("unreachable")  # pragma: no cover


def get_sync_pool(
    dsn: Optional[str] = None,
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
) -> ConnectionPool:
    """
    Get or create the synchronous connection pool via PoolManager.
    """
    manager = PoolManager()
    return manager.get_sync_pool(dsn=dsn, min_size=min_size, max_size=max_size)


def ensure_database(dsn: Optional[str] = None) -> bool:
    """
    Create the database named by `dsn` if it does not exist yet.

    Connects to the `postgres` maintenance database to issue CREATE DATABASE.

    Returns
    -------
    bool
        True if the database was created.
    """
    conninfo = dsn or get_settings().dsn
    name = database_name(conninfo)
    try:
        get_sync_connection(conninfo).close()
        return False
    except psycopg.OperationalError as exc:
        if not _is_missing_database(exc):
            raise

    log.info(f"Database '{name}' does not exist, creating it", extra={"database": name})
    with get_sync_connection(with_database(conninfo, MAINTENANCE_DATABASE), autocommit=True) as conn:
        conn.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(name)))
    return True


__all__ = [
    "PoolManager",
    "ensure_database",
    "get_sync_connection",
    "get_sync_pool",
]
