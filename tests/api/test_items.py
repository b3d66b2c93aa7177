from __future__ import annotations

import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from reqcache.api import items as items_api
from reqcache.core.errors import PreconditionFailed, StoreError
from reqcache.main import precondition_failed_handler
from reqcache.services import items_service
from reqcache.services.store_client import get_handle


def _create(client: TestClient, name: str = "lamp") -> dict:
    resp = client.post("/items", json={"name": name, "description": "desk"})
    assert resp.status_code == 201
    return resp.json()


# ---- create + write-through ----


def test_create_item_is_cached(client: TestClient) -> None:
    payload = _create(client)
    assert payload == {
        "item": {"id": 1, "name": "lamp", "description": "desk"},
        "cached": True,
    }


def test_create_item_sets_ttl_on_cached_entry(client: TestClient) -> None:
    _create(client)
    value, expires_at = get_handle("svc")._entries["svc-items-1"]
    assert json.loads(value)["name"] == "lamp"
    assert expires_at is not None


def test_create_item_rejects_blank_name(client: TestClient) -> None:
    resp = client.post("/items", json={"name": "   "})
    assert resp.status_code == 422
    assert resp.json()["detail"] == "name must be non-empty"


def test_create_item_survives_cache_write_failure(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def broken_write(context, path, serialized_value):
        raise StoreError("connect to 0.0.0.0:6379 failed", operation="write")

    monkeypatch.setattr(items_api, "write_through", broken_write)

    payload = _create(client)
    assert payload["cached"] is False

    # Still readable, just not from the cache
    resp = client.get("/items/1")
    assert resp.json()["fromCache"] is False


# ---- read gate in front of GET ----


def test_read_after_create_comes_from_cache(client: TestClient) -> None:
    _create(client)
    resp = client.get("/items/1")
    assert resp.status_code == 200
    body = resp.json()
    assert body["fromCache"] is True
    assert json.loads(body["data"]) == {"id": 1, "name": "lamp", "description": "desk"}


def test_read_miss_falls_back_to_item_store(client: TestClient) -> None:
    _create(client)
    get_handle("svc").clear()

    resp = client.get("/items/1")
    assert resp.status_code == 200
    assert resp.json()["fromCache"] is False
    assert json.loads(resp.json()["data"])["name"] == "lamp"


def test_cached_and_uncached_reads_share_data(client: TestClient) -> None:
    _create(client)
    cached = client.get("/items/1").json()
    get_handle("svc").clear()
    fresh = client.get("/items/1").json()
    assert cached["data"] == fresh["data"]


def test_read_unknown_item_returns_404(client: TestClient) -> None:
    resp = client.get("/items/42")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "item not found"


# ---- invalidate gate in front of DELETE ----


def test_delete_invalidates_cache_then_deletes(client: TestClient) -> None:
    _create(client)
    assert client.get("/items/1").json()["fromCache"] is True

    resp = client.delete("/items/1")
    assert resp.status_code == 200
    assert resp.json() == {"deleted": 1}
    assert "svc-items-1" not in get_handle("svc")._entries

    assert client.get("/items/1").status_code == 404


def test_delete_unknown_item_returns_404(client: TestClient) -> None:
    resp = client.delete("/items/42")
    assert resp.status_code == 404


# ---- missing cache context ----


def test_route_without_cache_context_returns_404() -> None:
    bare = FastAPI()
    bare.add_exception_handler(PreconditionFailed, precondition_failed_handler)
    bare.include_router(items_api.router)

    resp = TestClient(bare).post("/items", json={"name": "lamp"})
    assert resp.status_code == 404
    assert "no cache context" in resp.json()["error"]


def test_ids_not_reused_after_delete(client: TestClient) -> None:
    _create(client, "lamp")
    # Deleted behind the invalidate gate's back: the cached entry stays
    assert items_service.delete_item(1)

    payload = _create(client, "chair")
    assert payload["item"]["id"] == 2

    resp = client.get("/items/2")
    assert json.loads(resp.json()["data"])["name"] == "chair"
    assert client.get("/items/1").json()["fromCache"] is True
