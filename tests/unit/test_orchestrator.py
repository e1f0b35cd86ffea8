from __future__ import annotations

import pytest

from tests.unit.fake_store import FakeUserStore
from user_service import orchestrator
from user_service.errors import BatchWriteError, ValidationError
from user_service.operations import FlagResetter, Operation, Seeder
from user_service.orchestrator import _merge_result, reset_problems, seed_users
from user_service.utils.profiler import ProfileStats

EXPECTED_DURATION = 2.0
EXPECTED_THROUGHPUT = 50.0
EXPECTED_PEAK_RSS = 123
EXPECTED_CPU = 12.3


def test_merge_result_uses_profiler_timing() -> None:
    result = {
        "inserted": 100,
        "duration_seconds": 1.0,
        "throughput_rows_per_sec": 100.0,
    }
    stats = ProfileStats(
        label="seed",
        start_ts=1.0,
        end_ts=3.0,
        duration_seconds=2.0,
        peak_rss_bytes=123,
        cpu_percent=12.34,
    )

    merged = _merge_result(result, stats)

    assert merged["duration_seconds"] == EXPECTED_DURATION
    assert merged["throughput_rows_per_sec"] == EXPECTED_THROUGHPUT
    assert merged["peak_rss_bytes"] == EXPECTED_PEAK_RSS
    assert merged["cpu_percent"] == EXPECTED_CPU
    assert merged["profile"]["label"] == "seed"


def test_merge_result_leaves_reset_results_without_throughput() -> None:
    stats = ProfileStats(label="reset_problems", duration_seconds=0.5)

    merged = _merge_result({"reset_count": 3, "attempts": 1}, stats)

    assert merged["reset_count"] == 3
    assert "throughput_rows_per_sec" not in merged


def test_seed_users_runs_against_given_store() -> None:
    store = FakeUserStore()

    result = seed_users(25, store=store, batch_size=10, concurrency=2, rng_seed=5)

    assert result["inserted"] == 25
    assert result["batches"] == 3
    assert len(store.rows) == 25
    assert "profile" in result


def test_seed_users_validates_before_touching_the_pool(monkeypatch) -> None:
    def fail_build_store():
        raise AssertionError("store must not be built for invalid input")

    monkeypatch.setattr(orchestrator, "build_store", fail_build_store)

    with pytest.raises(ValidationError):
        seed_users(-5)


def test_seed_users_reraises_batch_failures(caplog) -> None:
    store = FakeUserStore(fail_at_call=2)

    with pytest.raises(BatchWriteError) as excinfo:
        seed_users(30, store=store, batch_size=10, concurrency=1)

    assert excinfo.value.inserted == 10
    assert any("[SEED FAILED]" in record.getMessage() for record in caplog.records)


def test_reset_problems_returns_reset_count() -> None:
    store = FakeUserStore()
    seed_users(40, store=store, batch_size=10, concurrency=1, rng_seed=9)
    flagged = store.flagged()

    result = reset_problems(store=store)

    assert result["reset_count"] == flagged
    assert store.flagged() == 0
    assert reset_problems(store=store)["reset_count"] == 0


def test_seed_users_rejects_zero_batch_size_without_writing() -> None:
    store = FakeUserStore()

    with pytest.raises(ValidationError):
        seed_users(10, store=store, batch_size=0)

    assert store.insert_calls == 0


def test_operations_share_the_profiled_contract() -> None:
    store = FakeUserStore()

    for operation in (Seeder(store, batch_size=10, concurrency=1), FlagResetter(store)):
        assert isinstance(operation, Operation)
        assert operation.description
