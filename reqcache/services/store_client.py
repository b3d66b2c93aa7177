"""Store client factory.

`create_handle()` builds a StoreHandle for a namespace and wires up the
lifecycle observers.  It never connects: an unreachable store only shows
up when an operation actually runs.

`get_handle()` is what middleware uses.  Without an explicit config it
returns the one handle registered for the namespace, creating it on
first use, so a namespace never ends up with more than one default
handle.  An explicit config always gets a fresh handle.
"""

from __future__ import annotations

import logging

from reqcache.core.config import SETTINGS
from reqcache.core.metrics import CACHE_STORE_EVENTS
from reqcache.db.memory import InMemoryStoreHandle
from reqcache.db.redis import RedisStoreHandle
from reqcache.db.store import StoreConfig, StoreHandle

logger = logging.getLogger(__name__)

# Process-wide default, derived from SETTINGS exactly once
DEFAULT_STORE_CONFIG = StoreConfig.from_settings(SETTINGS)

_HANDLES: dict[str, StoreHandle] = {}


def _attach_observers(handle: StoreHandle) -> None:
    namespace = handle.namespace
    target = handle.config.target

    def on_error(exc: BaseException) -> None:
        CACHE_STORE_EVENTS.labels(event="error").inc()
        logger.error("store error at %s for namespace=%s: %s", target, namespace, exc)

    def on_connect() -> None:
        CACHE_STORE_EVENTS.labels(event="connect").inc()
        logger.info("connected to store at %s for namespace=%s", target, namespace)

    def on_disconnect() -> None:
        CACHE_STORE_EVENTS.labels(event="disconnect").inc()
        logger.info("disconnected from store at %s for namespace=%s", target, namespace)

    handle.on("error", on_error)
    handle.on("connect", on_connect)
    handle.on("disconnect", on_disconnect)


def create_handle(namespace: str, config: StoreConfig | None = None) -> StoreHandle:
    config = config or DEFAULT_STORE_CONFIG
    handle: StoreHandle
    if config.backend == "memory":
        handle = InMemoryStoreHandle(namespace, config)
    else:
        handle = RedisStoreHandle(namespace, config)
    _attach_observers(handle)
    logger.debug("created %r", handle)
    return handle


def get_handle(namespace: str, config: StoreConfig | None = None) -> StoreHandle:
    if config is not None:
        return create_handle(namespace, config)
    handle = _HANDLES.get(namespace)
    if handle is None:
        handle = _HANDLES[namespace] = create_handle(namespace)
    return handle


def registered_handles() -> list[StoreHandle]:
    """Every shared handle get_handle() has built so far.

    Tests use it to empty the in-memory stores between cases.
    """
    return list(_HANDLES.values())
