"""
Error taxonomy for the seed and reset operations.

Every error raised to callers derives from `UserServiceError` and carries a
machine-friendly `kind` plus the HTTP status the API layer should answer with.
Seeding errors also report how many rows were committed before the run
stopped, so a caller can tell a clean abort from a partial load.
"""

from __future__ import annotations

from typing import Optional, Tuple


class UserServiceError(Exception):
    """Base class for all service errors."""

    kind: str = "internal"
    status_code: int = 500

    def to_dict(self) -> dict:
        return {"message": str(self), "error": self.kind}


class ValidationError(UserServiceError):
    """Rejected input; raised before any work begins."""

    kind = "validation"
    status_code = 400


class StoreError(UserServiceError):
    """Unexpected database error (e.g. a constraint violation). Not retried."""

    kind = "store"


class StoreConnectionError(UserServiceError):
    """The store is unreachable or the connection pool is exhausted."""

    kind = "connection"

    def __init__(self, message: str, inserted: int = 0) -> None:
        super().__init__(message)
        self.inserted = inserted

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["inserted"] = self.inserted
        return payload


class TransactionConflictError(UserServiceError):
    """
    A concurrent writer invalidated the reset transaction.

    Retryable while `exhausted` is False; the resetter raises an exhausted
    instance once its retry budget is spent.
    """

    kind = "transaction_conflict"

    def __init__(self, message: str, attempts: int = 1, exhausted: bool = False) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.exhausted = exhausted

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["attempts"] = self.attempts
        return payload


class BatchWriteError(UserServiceError):
    """A seed batch failed to persist; remaining batches were abandoned."""

    kind = "batch_write"

    def __init__(
        self,
        message: str,
        inserted: int,
        batch: Optional[Tuple[int, int]] = None,
    ) -> None:
        super().__init__(message)
        self.inserted = inserted
        self.batch = batch

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["inserted"] = self.inserted
        if self.batch is not None:
            payload["batch"] = list(self.batch)
        return payload


class SeedCancelledError(UserServiceError):
    """The seed run was cancelled or timed out after committing `inserted` rows."""

    kind = "cancelled"
    status_code = 503

    def __init__(self, message: str, inserted: int) -> None:
        super().__init__(message)
        self.inserted = inserted

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["inserted"] = self.inserted
        return payload


__all__ = [
    "UserServiceError",
    "ValidationError",
    "StoreError",
    "StoreConnectionError",
    "TransactionConflictError",
    "BatchWriteError",
    "SeedCancelledError",
]
