"""
PostgreSQL-backed record store for users.

The store is the only place that talks SQL. It exposes the three primitives
the operations need (batched insert, predicate count, and the atomic
count-and-clear of the problems flag) and translates psycopg exceptions into
the service error taxonomy at this boundary.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Protocol, Sequence, runtime_checkable

import psycopg
from psycopg_pool import ConnectionPool, PoolTimeout

from user_service.domain.models import USER_COLUMNS, NewUser
from user_service.errors import (
    StoreConnectionError,
    StoreError,
    TransactionConflictError,
    UserServiceError,
)
from user_service.infrastructure.db_factory import apply_statement_timeout
from user_service.infrastructure.schema import USERS_TABLE

_COPY_SQL = f"COPY {USERS_TABLE} ({', '.join(USER_COLUMNS)}) FROM STDIN"
_COUNT_ALL_SQL = f"SELECT count(*) FROM {USERS_TABLE}"
_COUNT_FLAGGED_SQL = f"SELECT count(*) FROM {USERS_TABLE} WHERE has_problems"
_CLEAR_FLAGGED_SQL = f"UPDATE {USERS_TABLE} SET has_problems = false WHERE has_problems"
_REPEATABLE_READ_SQL = "SET TRANSACTION ISOLATION LEVEL REPEATABLE READ"

# SQLSTATE class 40. psycopg maps each of these straight onto OperationalError,
# so they must be matched before the connection-error branch.
_CONFLICT_ERRORS = (
    psycopg.errors.SerializationFailure,
    psycopg.errors.DeadlockDetected,
    psycopg.errors.TransactionRollback,
)


@runtime_checkable
class UserStore(Protocol):
    """
    What the seed and reset operations require from a record store.
    """

    @property
    def max_connections(self) -> int:
        """Upper bound on concurrent writers the store can serve."""
        ...

    def insert_batch(self, users: Sequence[NewUser]) -> int:
        """Persist `users` in one transaction and return how many were written."""
        ...

    def count_and_clear_flags(self) -> int:
        """
        Count flagged users and clear the flag on exactly those rows, atomically.

        Raises TransactionConflictError when a concurrent writer interferes;
        the caller may retry the whole call.
        """
        ...


@contextmanager
def translate_store_errors(action: str) -> Iterator[None]:
    """Re-raise psycopg failures as service errors."""
    try:
        yield
    except UserServiceError:
        raise
    except _CONFLICT_ERRORS as exc:
        raise TransactionConflictError(f"{action}: {exc}") from exc
    except PoolTimeout as exc:
        raise StoreConnectionError(f"{action}: no connection available from pool") from exc
    except (psycopg.OperationalError, psycopg.InterfaceError) as exc:
        raise StoreConnectionError(f"{action}: {exc}") from exc
    except psycopg.Error as exc:
        raise StoreError(f"{action}: {exc}") from exc


class PostgresUserStore:
    """
    `UserStore` implementation over a psycopg `ConnectionPool`.
    """

    def __init__(self, pool: ConnectionPool, statement_timeout_ms: int = 0) -> None:
        self._pool = pool
        self.statement_timeout_ms = statement_timeout_ms

    @property
    def max_connections(self) -> int:
        return self._pool.max_size

    def insert_batch(self, users: Sequence[NewUser]) -> int:
        """
        Write one batch with COPY inside its own transaction.

        The whole batch commits or none of it does.
        """
        if not users:
            return 0
        with translate_store_errors("insert batch"):
            with self._pool.connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        apply_statement_timeout(cur, self.statement_timeout_ms)
                        with cur.copy(_COPY_SQL) as copy:
                            for user in users:
                                copy.write_row(user.as_row())
        return len(users)

    def count_and_clear_flags(self) -> int:
        """
        Count and clear the problems flag in a single REPEATABLE READ transaction.

        Both statements see the same snapshot. PostgreSQL aborts the UPDATE
        with a serialization failure if another transaction changed a
        qualifying row after the snapshot was taken, so the returned count is
        exactly the number of rows transitioned from true to false.
        """
        with translate_store_errors("reset problems flag"):
            with self._pool.connection() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        cur.execute(_REPEATABLE_READ_SQL)
                        apply_statement_timeout(cur, self.statement_timeout_ms)
                        cur.execute(_COUNT_FLAGGED_SQL)
                        (flagged,) = cur.fetchone()
                        cur.execute(_CLEAR_FLAGGED_SQL)
                        cleared = cur.rowcount
                        if cleared != flagged:
                            # Raising inside the block rolls the UPDATE back.
                            raise TransactionConflictError(
                                f"reset problems flag: counted {flagged} flagged users "
                                f"but cleared {cleared}"
                            )
        return flagged

    def count_users(self) -> int:
        return self._scalar(_COUNT_ALL_SQL, "count users")

    def count_flagged(self) -> int:
        return self._scalar(_COUNT_FLAGGED_SQL, "count flagged users")

    def _scalar(self, sql: str, action: str) -> int:
        with translate_store_errors(action):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql)
                    (value,) = cur.fetchone()
        return int(value)


__all__ = ["PostgresUserStore", "UserStore", "translate_store_errors"]
