"""
Result contracts for the seed and reset operations.

Operations return TypedDicts so the orchestrator, the reporter, and the HTTP
layer can enrich and serialize them without knowing the concrete operation.
"""

from __future__ import annotations

from typing import Optional, Protocol, TypedDict, runtime_checkable


class SeedResult(TypedDict, total=False):
    """
    Metrics returned by a completed seed run.
    """

    inserted: int
    batches: int
    batch_size: int
    concurrency: int
    duration_seconds: float
    throughput_rows_per_sec: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]


class ResetResult(TypedDict, total=False):
    """
    Outcome of a problems-flag reset.

    `reset_count` is the number of rows observed flagged, which equals the
    number of rows cleared.
    """

    reset_count: int
    attempts: int
    duration_seconds: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]


@runtime_checkable
class Operation(Protocol):
    """
    Common shape of the service operations.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier, used as the profiling label.
    description : str
        A human-friendly summary.
    """

    name: str
    description: str


__all__ = ["Operation", "ResetResult", "SeedResult"]
