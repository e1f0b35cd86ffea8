"""
Database connection factory utilities for the user seed service.

Provides centralized management of the PostgreSQL connection pool with proper
lifecycle management. The PoolManager singleton ensures the pool is closed on
application exit; its size bounds how many seed batches can be written
concurrently.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import atexit
import threading
from typing import Optional

import psycopg
from psycopg import Connection, Cursor
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from user_service.config import Settings, get_settings
from user_service.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
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
                cls._instance._pool = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(
        self,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        min_size : int, optional
            Minimum number of idle connections to keep. Defaults to settings.
        max_size : int, optional
            Maximum total connections in the pool. Defaults to settings.
        timeout : float, optional
            Seconds to wait for a free connection before raising PoolTimeout.

        Returns
        -------
        ConnectionPool
            The managed pool instance. Sizing arguments only apply when the
            pool is first created.
        """
        with self._lock:
            if self._pool is None:
                settings = get_settings()
                if min_size is None:
                    min_size = settings.db_pool_min_size
                if max_size is None:
                    max_size = settings.db_pool_max_size
                max_size = max(max_size, min_size)
                self._pool = ConnectionPool(
                    conninfo=build_dsn(settings),
                    min_size=min_size,
                    max_size=max_size,
                    timeout=timeout if timeout is not None else settings.db_pool_timeout_seconds,
                    name="user_service",
                    open=True,
                )
                log.info(
                    "Connection pool opened",
                    extra={"pool_min_size": min_size, "pool_max_size": max_size},
                )
            return self._pool

    def close_all(self) -> None:
        """
        Close the managed pool and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._pool is not None:
                pool, self._pool = self._pool, None
                pool.close()
                log.info("Connection pool closed")


def get_sync_pool(
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
    timeout: Optional[float] = None,
) -> ConnectionPool:
    """
    Get or create the synchronous connection pool via PoolManager.
    """
    return PoolManager().get_sync_pool(min_size=min_size, max_size=max_size, timeout=timeout)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. Used for one-off work such as schema sync; the operations go
    through the pool.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


def apply_statement_timeout(cur: Cursor, timeout_ms: int) -> None:
    """
    Bound every statement of the current transaction to `timeout_ms`.

    A value of 0 leaves the server default in place.
    """
    if timeout_ms > 0:
        cur.execute("SELECT set_config('statement_timeout', %s, true)", (str(timeout_ms),))


__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
]
