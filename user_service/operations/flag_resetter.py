"""
Problems-flag reset.

Counts the users flagged with `has_problems` and clears the flag on exactly
those rows as one atomic unit (see `PostgresUserStore.count_and_clear_flags`).
A transaction that loses a race with a concurrent writer is retried as a
whole, with exponential backoff, up to a bounded number of attempts.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from user_service.config import get_settings
from user_service.errors import TransactionConflictError, ValidationError
from user_service.infrastructure.user_store import UserStore
from user_service.operations.abstract import ResetResult
from user_service.utils.logging import get_logger

log = get_logger(__name__)


class FlagResetter:
    """
    Reset `has_problems` to false on every flagged user and report the count.

    Parameters
    ----------
    store : UserStore
        Store providing the atomic count-and-clear primitive.
    max_attempts : int, optional
        Transactions attempted before giving up on conflicts.
    backoff_min, backoff_max : float, optional
        Bounds in seconds of the exponential wait between attempts.
    """

    name: str = "reset_problems"
    description: str = "Snapshot-consistent count and clear of the problems flag."

    def __init__(
        self,
        store: UserStore,
        max_attempts: Optional[int] = None,
        backoff_min: Optional[float] = None,
        backoff_max: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self._store = store
        self.max_attempts = (
            settings.reset_max_attempts if max_attempts is None else max_attempts
        )
        if self.max_attempts < 1:
            raise ValidationError(f"max_attempts must be >= 1, got {self.max_attempts}")
        self.backoff_min = (
            settings.reset_backoff_min_seconds if backoff_min is None else backoff_min
        )
        self.backoff_max = (
            settings.reset_backoff_max_seconds if backoff_max is None else backoff_max
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_min, min=self.backoff_min, max=self.backoff_max),
            retry=retry_if_exception_type(TransactionConflictError),
            before_sleep=before_sleep_log(log, logging.WARNING),
            reraise=True,
        )

    def run(self) -> ResetResult:
        """
        Count and clear flagged users.

        Returns
        -------
        ResetResult
            `reset_count` is the number of users that were flagged and are now
            cleared; `attempts` counts transactions tried.

        Raises
        ------
        TransactionConflictError
            Every attempt conflicted; raised with `exhausted=True`.
        StoreConnectionError, StoreError
            Not retried.
        """
        start = time.perf_counter()
        attempts = 0
        try:
            for attempt in self._retrying():
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    reset_count = self._store.count_and_clear_flags()
        except TransactionConflictError as exc:
            raise TransactionConflictError(
                f"Problems flag reset gave up after {attempts} conflicting attempt(s): {exc}",
                attempts=attempts,
                exhausted=True,
            ) from exc

        duration = time.perf_counter() - start
        log.info(
            "Problems flag reset",
            extra={"reset_count": reset_count, "attempts": attempts},
        )
        return ResetResult(
            reset_count=reset_count,
            attempts=attempts,
            duration_seconds=duration,
        )


__all__ = ["FlagResetter"]
