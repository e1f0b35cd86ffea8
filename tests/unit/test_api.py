from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from tests.unit.fake_store import FakeUserStore
from user_service.api import create_app
from user_service.errors import StoreConnectionError


@pytest.fixture
def store() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def client(store: FakeUserStore) -> Iterator[TestClient]:
    with TestClient(create_app(store=store)) as test_client:
        yield test_client


def test_healthz(client: TestClient) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_seed_inserts_requested_total(client: TestClient, store: FakeUserStore) -> None:
    response = client.post("/user/seed", params={"total": 10})

    assert response.status_code == 200
    assert response.json() == {"message": "Users seeded successfully", "inserted": 10}
    assert len(store.rows) == 10
    assert sum(1 for u in store.rows if u.gender == "Male") == 5


def test_seed_rejects_negative_total_with_client_error(
    client: TestClient, store: FakeUserStore
) -> None:
    response = client.post("/user/seed", params={"total": -1})

    assert response.status_code == 400
    assert response.json()["error"] == "validation"
    assert store.insert_calls == 0


def test_seed_failure_reports_committed_rows() -> None:
    store = FakeUserStore(fail_at_call=1, error=StoreConnectionError("insert batch: refused"))
    with TestClient(create_app(store=store)) as client:
        response = client.post("/user/seed", params={"total": 10})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "connection"
    assert body["inserted"] == 0


def test_reset_problems_reports_users_with_problems(
    client: TestClient, store: FakeUserStore
) -> None:
    client.post("/user/seed", params={"total": 50})
    flagged = store.flagged()

    response = client.post("/user/reset-problems")

    assert response.status_code == 200
    assert response.json() == {"message": "Problems flag reset", "usersWithProblems": flagged}
    assert store.flagged() == 0

    again = client.post("/user/reset-problems")
    assert again.json()["usersWithProblems"] == 0


def test_reset_problems_exhausted_conflicts_return_server_error(monkeypatch) -> None:
    monkeypatch.setenv("RESET_BACKOFF_MIN_SECONDS", "0")
    monkeypatch.setenv("RESET_BACKOFF_MAX_SECONDS", "0")
    from user_service.config import get_settings

    get_settings.cache_clear()
    try:
        store = FakeUserStore(conflicts=100)
        with TestClient(create_app(store=store)) as client:
            response = client.post("/user/reset-problems")
    finally:
        get_settings.cache_clear()

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "transaction_conflict"
    assert body["attempts"] == store.reset_calls
