from __future__ import annotations

import itertools
import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path so `import reqcache` / `import tests.fakes`
# work under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time: force the in-memory store before
# anything under reqcache is imported.
os.environ.setdefault("APP_ENV", "test")
os.environ["CACHE_BACKEND"] = "memory"
os.environ["CACHE_NAMESPACE"] = "svc"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from reqcache.db.memory import InMemoryStoreHandle  # noqa: E402
from reqcache.main import app  # noqa: E402
from reqcache.services import items_service  # noqa: E402
from reqcache.services.store_client import registered_handles  # noqa: E402


@pytest.fixture(autouse=True)
def reset_items() -> None:
    items_service._ITEMS.clear()
    items_service._ids = itertools.count(1)


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Empty every in-memory store between tests (handles stay registered)."""
    for handle in registered_handles():
        if isinstance(handle, InMemoryStoreHandle):
            handle.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)
