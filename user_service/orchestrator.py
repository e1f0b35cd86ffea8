"""
Orchestrator for the seed and reset operations.

Builds each operation from settings, runs it under the profiler, logs its
start/outcome, and returns a plain result dict that the CLI reporter and the
HTTP layer share.

Usage:
    from user_service.orchestrator import reset_problems, seed_users

    seeded = seed_users(total=10_000)
    print(seeded["inserted"], seeded["throughput_rows_per_sec"])

    reset = reset_problems()
    print(reset["reset_count"])
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, Mapping, Optional

from user_service.config import get_settings
from user_service.infrastructure.db_factory import get_sync_pool
from user_service.infrastructure.user_store import PostgresUserStore, UserStore
from user_service.operations.abstract import Operation
from user_service.operations.flag_resetter import FlagResetter
from user_service.operations.seeder import Seeder, validate_total
from user_service.utils.logging import get_logger
from user_service.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def build_store() -> PostgresUserStore:
    """Store over the shared connection pool, sized from settings."""
    settings = get_settings()
    return PostgresUserStore(
        get_sync_pool(),
        statement_timeout_ms=settings.db_statement_timeout_ms,
    )


def _merge_result(result: Mapping[str, Any], stats: ProfileStats) -> Dict[str, Any]:
    """Merge an operation result with profiler stats, rounding floats for readability."""
    merged = dict(result)
    merged["duration_seconds"] = _round_float(stats.duration_seconds)
    if "throughput_rows_per_sec" in merged:
        merged["throughput_rows_per_sec"] = (
            _round_float(merged["inserted"] / stats.duration_seconds)
            if stats.duration_seconds
            else 0.0
        )
    merged["peak_rss_bytes"] = stats.peak_rss_bytes
    merged["cpu_percent"] = _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None
    merged["profile"] = {
        "label": stats.label,
        "start_ts": _round_float(stats.start_ts, 3),
        "end_ts": _round_float(stats.end_ts, 3),
        "duration_seconds": _round_float(stats.duration_seconds),
    }
    return merged


def _profiled_run(operation: Operation, run: Callable[[], Mapping[str, Any]]) -> Dict[str, Any]:
    label = operation.name
    tag = label.upper()
    log.info(
        f"[{tag} START]",
        extra={"operation": label, "description": operation.description},
    )
    with profile_block(label) as stats:
        try:
            result = run()
        except Exception:
            log.exception(f"[{tag} FAILED]", extra={"operation": label})
            raise
    merged = _merge_result(result, stats)
    log.info(
        f"[{tag} SUCCESS]",
        extra={"operation": label, "duration": merged["duration_seconds"]},
    )
    return merged


def seed_users(
    total: Optional[int] = None,
    *,
    store: Optional[UserStore] = None,
    batch_size: Optional[int] = None,
    concurrency: Optional[int] = None,
    rng_seed: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Seed `total` synthetic users (default from settings, 1,000,000).

    Parameters
    ----------
    total : int | None
        Users to insert.
    store : UserStore | None
        Store to write to. Defaults to the pooled PostgreSQL store.
    batch_size, concurrency, rng_seed : optional
        Overrides of the corresponding settings.
    cancel_event : threading.Event | None
        Set it to stop issuing batches.
    timeout : float | None
        Seconds before the run is cancelled. Defaults to SEED_TIMEOUT_SECONDS.

    Returns
    -------
    dict
        `SeedResult` fields plus profiler stats.
    """
    settings = get_settings()
    total = validate_total(total)
    seeder = Seeder(
        store if store is not None else build_store(),
        batch_size=batch_size,
        concurrency=concurrency,
        rng_seed=rng_seed,
    )
    effective_timeout = timeout if timeout is not None else settings.seed_timeout_seconds
    return _profiled_run(
        seeder,
        lambda: seeder.run(total, cancel_event=cancel_event, timeout=effective_timeout),
    )


def reset_problems(*, store: Optional[UserStore] = None) -> Dict[str, Any]:
    """
    Clear the problems flag on every flagged user.

    Returns
    -------
    dict
        `ResetResult` fields plus profiler stats.
    """
    resetter = FlagResetter(store if store is not None else build_store())
    return _profiled_run(resetter, resetter.run)


__all__ = ["build_store", "reset_problems", "seed_users"]
