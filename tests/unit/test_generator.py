from __future__ import annotations

import random

import pytest

from user_service.operations.generator import (
    MAX_AGE,
    BatchRange,
    count_batches,
    generate_batch,
    generate_user,
    plan_batches,
)

SAMPLE_SIZE = 2_000


def test_generate_user_derives_names_from_index() -> None:
    user = generate_user(42, random.Random(1))

    assert user.first_name == "FirstName42"
    assert user.last_name == "LastName42"


def test_generate_user_names_are_unpadded_decimal() -> None:
    rng = random.Random(1)

    assert generate_user(0, rng).first_name == "FirstName0"
    assert generate_user(1_000_000, rng).last_name == "LastName1000000"


def test_gender_is_male_iff_index_is_even() -> None:
    rng = random.Random(7)
    users = [generate_user(i, rng) for i in range(SAMPLE_SIZE)]

    for i, user in enumerate(users):
        assert (user.gender == "Male") == (i % 2 == 0)
        assert user.gender in ("Male", "Female")


def test_age_stays_within_zero_and_ninety_nine() -> None:
    rng = random.Random(3)
    ages = [generate_user(i, rng).age for i in range(SAMPLE_SIZE)]

    assert all(0 <= age <= MAX_AGE for age in ages)
    # Both ends of the range are reachable.
    assert 0 in ages
    assert MAX_AGE in ages


def test_problems_flag_is_roughly_half() -> None:
    rng = random.Random(11)
    flagged = sum(generate_user(i, rng).has_problems for i in range(SAMPLE_SIZE))

    assert 0.4 * SAMPLE_SIZE < flagged < 0.6 * SAMPLE_SIZE


def test_same_seed_reproduces_batch() -> None:
    batch = BatchRange(index=0, start=10, stop=30)

    first = generate_batch(batch, random.Random(99))
    second = generate_batch(batch, random.Random(99))

    assert first == second
    assert [u.first_name for u in first] == [f"FirstName{i}" for i in range(10, 30)]


def test_plan_batches_covers_range_without_overlap() -> None:
    batches = list(plan_batches(total=10, batch_size=3))

    assert [(b.start, b.stop) for b in batches] == [(0, 3), (3, 6), (6, 9), (9, 10)]
    assert [b.index for b in batches] == [0, 1, 2, 3]
    assert sum(len(b) for b in batches) == 10
    assert len(batches) == count_batches(10, 3)


def test_plan_batches_exact_multiple() -> None:
    batches = list(plan_batches(total=6, batch_size=3))

    assert [(b.start, b.stop) for b in batches] == [(0, 3), (3, 6)]
    assert count_batches(6, 3) == 2


def test_plan_batches_handles_zero_total() -> None:
    assert list(plan_batches(total=0, batch_size=1000)) == []
    assert count_batches(0, 1000) == 0


def test_plan_batches_rejects_non_positive_batch_size() -> None:
    with pytest.raises(ValueError):
        list(plan_batches(total=10, batch_size=0))
