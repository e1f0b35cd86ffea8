"""
Infrastructure package for the user seed service.

Centralizes database concerns (connection pool, schema sync, the SQL-backed
user store). Keep this layer focused on I/O and resource management,
decoupled from the seed/reset logic.
"""

from user_service.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    get_sync_connection,
    get_sync_pool,
)
from user_service.infrastructure.schema import ensure_schema
from user_service.infrastructure.user_store import PostgresUserStore, UserStore

__all__ = [
    "PoolManager",
    "PostgresUserStore",
    "UserStore",
    "build_dsn",
    "ensure_schema",
    "get_sync_connection",
    "get_sync_pool",
]
