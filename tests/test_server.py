from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from counter_store.errors import (
    ConstraintViolationError,
    StoreIOError,
    StoreUnavailableError,
)
from counter_store.server import create_app, status_for_store_error
from counter_store.store import INT64_MAX, INT64_MIN, StoredCounter


class _StubStore:
    """Records calls and replays a canned result or error."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def _reply(self, *args):
        self.calls.append(args)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def set(self, namespace, name, count):
        return self._reply("set", namespace, name, count)

    def get(self, namespace, name):
        return self._reply("get", namespace, name)


def test_orders_scenario(client):
    response = client.post("/api/orders/processed", json={"count": 42})
    assert response.status_code == 200, response.text
    assert response.json() == {"count": 42}

    response = client.get("/api/orders/processed")
    assert response.status_code == 200
    assert response.json() == {"count": 42}

    response = client.get("/api/orders/unknown")
    assert response.status_code == 404
    assert response.json() == {"error": "Counter not found"}


def test_post_replaces_previous_value(client):
    client.post("/api/orders/processed", json={"count": 5})
    client.post("/api/orders/processed", json={"count": 7})

    assert client.get("/api/orders/processed").json() == {"count": 7}


def test_namespaces_are_independent(client):
    client.post("/api/a/x", json={"count": 1})
    client.post("/api/b/x", json={"count": 2})

    assert client.get("/api/a/x").json() == {"count": 1}
    assert client.get("/api/b/x").json() == {"count": 2}


@pytest.mark.parametrize("count", [INT64_MIN, -7, 0, INT64_MAX])
def test_post_accepts_full_int64_range(client, count):
    response = client.post("/api/limits/edge", json={"count": count})

    assert response.status_code == 200
    assert client.get("/api/limits/edge").json() == {"count": count}


def test_extra_body_fields_are_ignored(client):
    response = client.post("/api/orders/processed", json={"count": 3, "note": "x"})

    assert response.status_code == 200
    assert response.json() == {"count": 3}


def test_percent_encoded_segments_are_decoded(client):
    client.post("/api/my%20ns/hits", json={"count": 9})

    assert client.get("/api/my ns/hits").json() == {"count": 9}


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"count": None},
        {"count": "42"},
        {"count": 4.2},
        {"count": True},
        {"count": INT64_MAX + 1},
        {"count": INT64_MIN - 1},
        {"value": 1},
        [42],
    ],
)
def test_invalid_bodies_are_rejected_before_the_store(body):
    store = _StubStore()
    client = TestClient(create_app(store))

    response = client.post("/api/orders/processed", json=body)

    assert response.status_code == 400, response.text
    assert response.json()["error"]
    assert store.calls == []


def test_malformed_json_is_rejected(client):
    response = client.post(
        "/api/orders/processed",
        content=b'{"count": ',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert set(response.json()) == {"error"}
    assert client.get("/api/orders/processed").status_code == 404


def test_overlong_segment_is_rejected(client):
    response = client.post(f"/api/{'n' * 256}/hits", json={"count": 1})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "error",
    [
        StoreUnavailableError("connection refused"),
        ConstraintViolationError("duplicate key value"),
        StoreIOError("disk I/O error"),
    ],
)
def test_store_failures_become_500_with_message(error):
    store = _StubStore(error)
    client = TestClient(create_app(store))

    post = client.post("/api/orders/processed", json={"count": 1})
    get = client.get("/api/orders/processed")

    assert post.status_code == 500
    assert post.json() == {"error": str(error)}
    assert get.status_code == 500
    assert get.json() == {"error": str(error)}


def test_each_request_makes_exactly_one_store_call():
    store = _StubStore(StoredCounter(namespace="orders", name="processed", count=4))
    client = TestClient(create_app(store))

    client.post("/api/orders/processed", json={"count": 4})
    client.get("/api/orders/processed")

    assert store.calls == [
        ("set", "orders", "processed", 4),
        ("get", "orders", "processed"),
    ]


def test_status_mapping_covers_every_store_error():
    for error_cls in (StoreUnavailableError, ConstraintViolationError, StoreIOError):
        assert status_for_store_error(error_cls("x")) == 500


def test_unknown_routes_use_framework_defaults(client):
    assert client.get("/api/orders").status_code == 404
    assert client.get("/api/orders/processed/extra").status_code == 404
    assert client.put("/api/orders/processed", json={"count": 1}).status_code == 405
