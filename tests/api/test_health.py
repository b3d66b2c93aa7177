from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from reqcache.api.health import router as health_router
from reqcache.models.cache_context import RequestCacheContext
from tests.fakes import AttachContextMiddleware, FakeStoreHandle


def test_root_reports_alive(client: TestClient) -> None:
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"data": "I am alive"}


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    # Tests run against the in-memory store
    assert data["checks"]["cache"] == "ok"
    assert data["cache"]["namespace"] == "svc"
    assert data["cache"]["backend"] == "memory"


def _app_with_store(handle: FakeStoreHandle) -> TestClient:
    app = FastAPI()
    app.include_router(health_router)
    context = RequestCacheContext(namespace="svc", store=handle)
    app.add_middleware(AttachContextMiddleware, context=context)
    return TestClient(app)


def test_health_pings_the_store() -> None:
    handle = FakeStoreHandle()
    resp = _app_with_store(handle).get("/health")
    assert resp.json()["status"] == "ok"
    assert handle.command_names == ["ping"]
    assert handle.opened == handle.closed == 1


def test_health_degraded_when_store_unreachable() -> None:
    handle = FakeStoreHandle(fail_on=("connect",))
    resp = _app_with_store(handle).get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["checks"]["cache"] == "degraded"
    assert data["cache"]["target"] == "fake:1234"
