from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from reqcache import main
from reqcache.main import app
from reqcache.middleware.cache_context import CacheContextMiddleware
from reqcache.middleware.cache_gates import (
    CacheInvalidateMiddleware,
    CacheReadMiddleware,
)
from reqcache.middleware.metrics import MetricsMiddleware
from reqcache.middleware.request_context import RequestContextMiddleware
from tests.fakes import FakeStoreHandle


def test_middleware_order_outermost_first() -> None:
    assert [m.cls for m in app.user_middleware] == [
        RequestContextMiddleware,
        MetricsMiddleware,
        CacheContextMiddleware,
        CacheReadMiddleware,
        CacheInvalidateMiddleware,
    ]


def test_startup_check_reports_reachable_store(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="reqcache.main"):
        with TestClient(app) as client:
            assert client.get("/").status_code == 200
    assert any("cache store reachable" in r.getMessage() for r in caplog.records)


def test_startup_survives_unreachable_store(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    broken = FakeStoreHandle(fail_on=("connect",))
    monkeypatch.setattr(main, "get_handle", lambda namespace: broken)

    with caplog.at_level(logging.INFO, logger="reqcache.main"):
        with TestClient(app) as client:
            assert client.get("/").json() == {"data": "I am alive"}

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert any("cache store unreachable at fake:1234" in r.getMessage() for r in warnings)


def test_full_cache_flow() -> None:
    client = TestClient(app)

    created = client.post("/items", json={"name": "lamp"}).json()
    assert created["cached"] is True
    item_id = created["item"]["id"]

    assert client.get(f"/items/{item_id}").json()["fromCache"] is True
    assert client.delete(f"/items/{item_id}").json() == {"deleted": item_id}
    assert client.get(f"/items/{item_id}").status_code == 404
