"""
Table definition for `public.users` and the schema-sync step run at startup.
"""

from __future__ import annotations

from psycopg import Connection

from user_service.utils.logging import get_logger

log = get_logger(__name__)

USERS_TABLE = "public.users"

USERS_DDL = """
CREATE TABLE IF NOT EXISTS public.users (
    id           BIGSERIAL PRIMARY KEY,
    first_name   TEXT    NOT NULL,
    last_name    TEXT    NOT NULL,
    age          INTEGER NOT NULL,
    gender       TEXT    NOT NULL,
    has_problems BOOLEAN NOT NULL DEFAULT FALSE
);
CREATE INDEX IF NOT EXISTS users_has_problems_idx
    ON public.users (has_problems) WHERE has_problems;
"""


def ensure_schema(conn: Connection) -> None:
    """Create the users table and its partial index if they are missing."""
    with conn.transaction():
        with conn.cursor() as cur:
            cur.execute(USERS_DDL)
    log.info("Schema synchronized", extra={"table": USERS_TABLE})


__all__ = ["USERS_DDL", "USERS_TABLE", "ensure_schema"]
