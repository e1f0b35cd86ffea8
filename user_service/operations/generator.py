"""
Synthetic user generation.

Names and gender are derived from the record index; age and the problems
flag are drawn from an explicitly passed `random.Random`, so a fixed seed
reproduces a run exactly.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator, List

from user_service.domain.models import NewUser

MAX_AGE = 99
PROBLEMS_PROBABILITY = 0.5


@dataclass(frozen=True)
class BatchRange:
    """Half-open index range `[start, stop)` written as one batch."""

    index: int
    start: int
    stop: int

    def __len__(self) -> int:
        return self.stop - self.start


def plan_batches(total: int, batch_size: int) -> Iterator[BatchRange]:
    """
    Yield contiguous, non-overlapping ranges of at most `batch_size` records
    covering `[0, total)`.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    for n, start in enumerate(range(0, total, batch_size)):
        yield BatchRange(index=n, start=start, stop=min(start + batch_size, total))


def count_batches(total: int, batch_size: int) -> int:
    return -(-total // batch_size)


def generate_user(index: int, rng: random.Random) -> NewUser:
    return NewUser(
        first_name=f"FirstName{index}",
        last_name=f"LastName{index}",
        age=rng.randint(0, MAX_AGE),
        gender="Male" if index % 2 == 0 else "Female",
        has_problems=rng.random() < PROBLEMS_PROBABILITY,
    )


def generate_batch(batch: BatchRange, rng: random.Random) -> List[NewUser]:
    return [generate_user(i, rng) for i in range(batch.start, batch.stop)]


__all__ = [
    "BatchRange",
    "count_batches",
    "MAX_AGE",
    "PROBLEMS_PROBABILITY",
    "generate_batch",
    "generate_user",
    "plan_batches",
]
