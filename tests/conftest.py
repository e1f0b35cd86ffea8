"""
Pytest configuration for the user seed service.

Provides fixtures for:
- Database connection management
- Schema setup and a clean users table per test
- A pooled `PostgresUserStore` for integration tests
"""

from __future__ import annotations

import os
from typing import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from user_service.config import Settings
from user_service.infrastructure.schema import ensure_schema
from user_service.infrastructure.user_store import PostgresUserStore


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "nest_user"),
        db_password=os.getenv("DB_PASSWORD", "nest_password"),
        db_name=os.getenv("DB_NAME", "nest_db"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Session-scoped autocommit connection for setup and verification queries.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    ensure_schema(db_connection)
    return True


@pytest.fixture(scope="function")
def clean_users_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the users table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.users RESTART IDENTITY;")
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.users RESTART IDENTITY;")


@pytest.fixture(scope="function")
def user_pool(test_dsn: str, clean_users_table) -> Generator[ConnectionPool, None, None]:
    pool = ConnectionPool(conninfo=test_dsn, min_size=1, max_size=4, timeout=10, open=True)
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture(scope="function")
def user_store(user_pool: ConnectionPool) -> PostgresUserStore:
    return PostgresUserStore(user_pool)
