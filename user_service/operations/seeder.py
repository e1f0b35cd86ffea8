"""
Bulk seeding of synthetic users.

The index space `[0, total)` is split into fixed-size batches which a bounded
thread pool writes concurrently, one COPY transaction per batch. Workers never
share an index range, and at most `concurrency` batches are generated and in
flight at any time, which bounds memory to a handful of batches whatever the
requested total.

Partial failure policy: every batch commits on its own. When a batch fails,
no further batches are issued, the batches already in flight are allowed to
finish, and the run raises with the exact number of rows committed. Nothing
that was committed is rolled back.
"""

from __future__ import annotations

import random
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Dict, Optional, Tuple

from user_service.config import get_settings
from user_service.errors import (
    BatchWriteError,
    SeedCancelledError,
    StoreConnectionError,
    ValidationError,
)
from user_service.infrastructure.user_store import UserStore
from user_service.operations.abstract import SeedResult
from user_service.operations.generator import BatchRange, count_batches, generate_batch, plan_batches
from user_service.utils.logging import get_logger

log = get_logger(__name__)

# How often the dispatcher wakes up to check for cancellation while batches run.
_POLL_INTERVAL_SECONDS = 0.25


def validate_total(total: Any) -> int:
    """
    Resolve and check the requested number of users.

    None means the configured default. Booleans are rejected even though they
    are ints.
    """
    if total is None:
        return get_settings().seed_default_total
    if isinstance(total, bool) or not isinstance(total, int):
        raise ValidationError(f"total must be an integer, got {type(total).__name__}")
    if total < 0:
        raise ValidationError(f"total must be non-negative, got {total}")
    return total


class Seeder:
    """
    Insert `total` synthetic users in batches over a bounded worker pool.

    Parameters
    ----------
    store : UserStore
        Destination store. Its `max_connections` caps the worker count.
    batch_size : int, optional
        Users per batch (defaults to settings).
    concurrency : int, optional
        Batches written in parallel (defaults to settings).
    rng_seed : int, optional
        Seed for the master random generator. Each batch draws its own
        generator from the master in batch order, so a given seed produces the
        same rows regardless of worker scheduling.
    """

    name: str = "seed"
    description: str = "Batched COPY inserts of synthetic users over a bounded worker pool."

    def __init__(
        self,
        store: UserStore,
        batch_size: Optional[int] = None,
        concurrency: Optional[int] = None,
        rng_seed: Optional[int] = None,
        log_every_batches: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self._store = store
        self.batch_size = batch_size if batch_size is not None else settings.seed_batch_size
        if self.batch_size < 1:
            raise ValidationError(f"batch_size must be >= 1, got {self.batch_size}")

        requested = concurrency if concurrency is not None else settings.seed_concurrency
        if requested < 1:
            raise ValidationError(f"concurrency must be >= 1, got {requested}")
        self.concurrency = max(1, min(requested, store.max_connections))
        if self.concurrency < requested:
            log.warning(
                "Seed concurrency clamped to connection pool size",
                extra={"requested": requested, "concurrency": self.concurrency},
            )
        self.rng_seed = rng_seed if rng_seed is not None else settings.seed_random_seed
        self.log_every_batches = (
            log_every_batches if log_every_batches is not None else settings.seed_log_every_batches
        )
        if self.log_every_batches < 1:
            raise ValidationError(f"log_every_batches must be >= 1, got {self.log_every_batches}")

    def run(
        self,
        total: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> SeedResult:
        """
        Generate and persist `total` users.

        Parameters
        ----------
        total : int, optional
            Number of users to insert; defaults to 1,000,000 via settings.
        cancel_event : threading.Event, optional
            When set, no further batches are issued.
        timeout : float, optional
            Wall-clock budget in seconds, after which the run is cancelled.

        Returns
        -------
        SeedResult
            `inserted` equals `total`.

        Raises
        ------
        ValidationError
            `total` is not a non-negative integer. Nothing was written.
        BatchWriteError, StoreConnectionError
            A batch failed; `inserted` holds the rows committed before the abort.
        SeedCancelledError
            Cancelled or timed out; `inserted` holds the rows committed.
        """
        total = validate_total(total)
        deadline = time.monotonic() + timeout if timeout is not None else None
        master_rng = random.Random(self.rng_seed)
        batches = plan_batches(total, self.batch_size)
        expected_batches = count_batches(total, self.batch_size)

        log.info(
            "Seeding started",
            extra={
                "total": total,
                "batch_size": self.batch_size,
                "batches": expected_batches,
                "concurrency": self.concurrency,
            },
        )

        inserted = 0
        committed_batches = 0
        failure: Optional[Tuple[BatchRange, Exception]] = None
        stop_reason: Optional[str] = None
        start = time.perf_counter()

        with ThreadPoolExecutor(
            max_workers=self.concurrency, thread_name_prefix="seed-worker"
        ) as executor:
            in_flight: Dict[Future[int], BatchRange] = {}
            while True:
                if failure is None and stop_reason is None:
                    stop_reason = _stop_reason(cancel_event, deadline)
                while failure is None and stop_reason is None and len(in_flight) < self.concurrency:
                    batch = next(batches, None)
                    if batch is None:
                        break
                    batch_rng = random.Random(master_rng.getrandbits(64))
                    in_flight[executor.submit(self._write_batch, batch, batch_rng)] = batch

                if not in_flight:
                    break

                done, _ = wait(in_flight, timeout=_POLL_INTERVAL_SECONDS, return_when=FIRST_COMPLETED)
                for future in done:
                    batch = in_flight.pop(future)
                    try:
                        inserted += future.result()
                    except Exception as exc:  # noqa: BLE001 - first failure is re-raised below
                        if failure is None:
                            failure = (batch, exc)
                        log.error(
                            "Seed batch failed",
                            extra={"batch": batch.index, "start": batch.start, "stop": batch.stop},
                            exc_info=exc,
                        )
                        continue
                    committed_batches += 1
                    if committed_batches % self.log_every_batches == 0:
                        log.info(
                            "Seeding progress",
                            extra={
                                "inserted": inserted,
                                "total": total,
                                "batches_committed": committed_batches,
                                "batches": expected_batches,
                            },
                        )

        duration = time.perf_counter() - start

        if failure is not None:
            batch, exc = failure
            message = (
                f"Seeding aborted at batch {batch.index} [{batch.start}, {batch.stop}) "
                f"after committing {inserted} of {total} users: {exc}"
            )
            if isinstance(exc, StoreConnectionError):
                raise StoreConnectionError(message, inserted=inserted) from exc
            raise BatchWriteError(message, inserted=inserted, batch=(batch.start, batch.stop)) from exc

        if stop_reason is not None and inserted < total:
            raise SeedCancelledError(
                f"Seeding {stop_reason} after committing {inserted} of {total} users",
                inserted=inserted,
            )

        throughput = inserted / duration if duration > 0 else 0.0
        log.info(
            "Seeding finished",
            extra={"inserted": inserted, "duration_seconds": round(duration, 2)},
        )
        return SeedResult(
            inserted=inserted,
            batches=committed_batches,
            batch_size=self.batch_size,
            concurrency=self.concurrency,
            duration_seconds=duration,
            throughput_rows_per_sec=throughput,
        )

    def _write_batch(self, batch: BatchRange, rng: random.Random) -> int:
        users = generate_batch(batch, rng)
        written = self._store.insert_batch(users)
        log.debug(
            "Seed batch committed",
            extra={"batch": batch.index, "start": batch.start, "stop": batch.stop},
        )
        return written


def _stop_reason(cancel_event: Optional[threading.Event], deadline: Optional[float]) -> Optional[str]:
    if cancel_event is not None and cancel_event.is_set():
        return "cancelled"
    if deadline is not None and time.monotonic() >= deadline:
        return "timed out"
    return None


__all__ = ["Seeder", "validate_total"]
