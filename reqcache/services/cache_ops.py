"""Cache operations: read, write, delete.

Every operation is one full connect → act → disconnect cycle on the
handle.  Nothing is kept open between calls.

Argument problems raise InvalidArgument BEFORE any store call.  Store
problems are logged here and raised as StoreError; deciding whether a
failure matters is left to the caller:

  read    the read gate treats StoreError as a miss
  delete  the invalidate gate logs it and moves on
  write   write_through() hands it to the route

WRITE IS TWO COMMANDS
---------------------
`write` issues SET and then EXPIRE.  If the process dies (or EXPIRE
fails) between the two, the key stays without a TTL until something
deletes or overwrites it.  There is no compensating step.  If the key is
already gone when EXPIRE runs, `write` logs a warning and returns False.
"""

from __future__ import annotations

import logging

from reqcache.core.errors import InvalidArgument, StoreError
from reqcache.core.metrics import CACHE_OPERATIONS
from reqcache.db.store import StoreHandle
from reqcache.models.cache_context import LoggerSink

logger = logging.getLogger(__name__)


def _sink(log: LoggerSink | None) -> LoggerSink:
    return log if log is not None else logger


def _invalid(operation: str, message: str) -> InvalidArgument:
    CACHE_OPERATIONS.labels(operation=operation, result="invalid").inc()
    return InvalidArgument(message)


async def read(
    handle: StoreHandle | None, key: str, *, logger: LoggerSink | None = None
) -> str | None:
    """Return the cached value for *key*, or None when nothing is stored."""
    if handle is None or not key:
        raise _invalid("read", "read needs a store handle and a non-empty key")

    log = _sink(logger)
    try:
        async with handle.session() as conn:
            value = await conn.get(key)
    except StoreError as exc:
        CACHE_OPERATIONS.labels(operation="read", result="error").inc()
        log.warning("cache read failed for %s: %s", key, exc, extra={"cache_key": key})
        raise StoreError(str(exc), operation="read") from exc

    if value is None:
        CACHE_OPERATIONS.labels(operation="read", result="miss").inc()
        log.info("cache miss for %s", key, extra={"cache_key": key})
        return None

    CACHE_OPERATIONS.labels(operation="read", result="hit").inc()
    log.info("cache hit for %s", key, extra={"cache_key": key})
    return value


async def write(
    handle: StoreHandle | None,
    key: str,
    value: str,
    ttl_seconds: int,
    *,
    logger: LoggerSink | None = None,
) -> bool:
    """Store *value* under *key*, then set its expiry.

    Returns False when the key vanished between SET and EXPIRE.
    """
    if handle is None or not key or not value:
        raise _invalid("write", "write needs a store handle, a non-empty key and value")
    if ttl_seconds <= 0:
        raise _invalid("write", f"ttl_seconds must be positive (got {ttl_seconds})")

    log = _sink(logger)
    try:
        async with handle.session() as conn:
            await conn.set(key, value)
            expiring = await conn.expire(key, ttl_seconds)
    except StoreError as exc:
        CACHE_OPERATIONS.labels(operation="write", result="error").inc()
        log.error("cache write failed for %s: %s", key, exc, extra={"cache_key": key})
        raise StoreError(str(exc), operation="write") from exc

    if not expiring:
        # EXPIRE found no key: something deleted it right after the SET
        CACHE_OPERATIONS.labels(operation="write", result="lost").inc()
        log.warning(
            "unable to store %s: key gone before its ttl was set", key, extra={"cache_key": key}
        )
        return False

    CACHE_OPERATIONS.labels(operation="write", result="ok").inc()
    log.info("stored %s (ttl=%ds)", key, ttl_seconds, extra={"cache_key": key})
    return True


async def delete(
    handle: StoreHandle | None, key: str, *, logger: LoggerSink | None = None
) -> int:
    """Remove *key*; returns how many keys were removed (0 or 1)."""
    if handle is None or not key:
        raise _invalid("delete", "delete needs a store handle and a non-empty key")

    log = _sink(logger)
    try:
        async with handle.session() as conn:
            removed = await conn.delete(key)
    except StoreError as exc:
        CACHE_OPERATIONS.labels(operation="delete", result="error").inc()
        log.warning("cache delete failed for %s: %s", key, exc, extra={"cache_key": key})
        raise StoreError(str(exc), operation="delete") from exc

    CACHE_OPERATIONS.labels(operation="delete", result="ok").inc()
    if removed:
        log.info("removed %s from cache", key, extra={"cache_key": key})
    else:
        log.info("nothing cached under %s", key, extra={"cache_key": key})
    return int(removed)
