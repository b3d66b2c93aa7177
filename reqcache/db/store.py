"""Store handle contract shared by the Redis and in-memory backends.

A StoreHandle is a capability, not a connection.  It knows WHERE the
store lives (StoreConfig) and hands out one dedicated connection per
cache operation:

    async with handle.session() as conn:   # connect
        await conn.get(key)                # act
                                           # disconnect (always)

Nothing is pooled or reused between operations, so a handle can be
shared by every request flowing through one middleware instance without
any locking: concurrent requests each get their own connection.

LIFECYCLE EVENTS
----------------
Handles publish three events to subscribers registered with `on()`:

    "connect"     a session opened its connection
    "disconnect"  a session closed its connection
    "error"       a transport failure happened (listener gets the exception)

The factory in services/store_client.py subscribes loggers and metrics
to these; tests subscribe recorders.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from reqcache.core.config import CacheBackend, Settings
from reqcache.core.errors import StoreError

EVENTS = ("connect", "disconnect", "error")

Listener = Callable[..., None]


@dataclass(frozen=True)
class StoreConfig:
    host: str = "0.0.0.0"
    port: int = 6379
    password: str | None = None
    connect_timeout_ms: int = 5000
    default_ttl_seconds: int = 30
    backend: CacheBackend = "redis"

    @property
    def target(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_settings(cls, settings: Settings) -> StoreConfig:
        return cls(
            host=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password,
            connect_timeout_ms=settings.redis_timeout_ms,
            default_ttl_seconds=settings.cache_ttl_seconds,
            backend=settings.cache_backend,
        )


@runtime_checkable
class StoreConnection(Protocol):
    """The commands a cache operation may issue during one session."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> Any: ...

    async def expire(self, key: str, seconds: int) -> Any: ...

    async def delete(self, key: str) -> int: ...

    async def ping(self) -> Any: ...


class StoreHandle:
    """Base handle: event subscription plus the connect/disconnect protocol.

    Subclasses implement `_open()` / `_close()` and list the exception
    types their transport raises in `_transport_errors`; those are
    published as "error" events and re-raised as StoreError.
    """

    _transport_errors: tuple[type[BaseException], ...] = ()

    def __init__(self, namespace: str, config: StoreConfig) -> None:
        self.namespace = namespace
        self.config = config
        self._listeners: dict[str, list[Listener]] = {event: [] for event in EVENTS}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(namespace={self.namespace!r}, "
            f"target={self.config.target!r})"
        )

    # -- events -------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> None:
        if event not in self._listeners:
            raise ValueError(f"unknown store event {event!r} (expected one of {EVENTS})")
        self._listeners[event].append(listener)

    def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            listener(*args)

    # -- connection lifecycle -----------------------------------------------

    async def _open(self) -> StoreConnection:
        raise NotImplementedError

    async def _close(self, conn: StoreConnection) -> None:
        raise NotImplementedError

    async def connect(self) -> StoreConnection:
        try:
            conn = await self._open()
        except self._transport_errors as exc:
            self._emit("error", exc)
            raise StoreError(f"connect to {self.config.target} failed: {exc}") from exc
        self._emit("connect")
        return conn

    async def disconnect(self, conn: StoreConnection) -> None:
        try:
            await self._close(conn)
        except self._transport_errors as exc:
            self._emit("error", exc)
            raise StoreError(
                f"disconnect from {self.config.target} failed: {exc}"
            ) from exc
        self._emit("disconnect")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[StoreConnection]:
        """One connect → act → disconnect cycle.

        The disconnect runs on every exit path, including exceptions
        raised by the caller and task cancellation.
        """
        conn = await self.connect()
        try:
            yield conn
        except self._transport_errors as exc:
            self._emit("error", exc)
            raise StoreError(str(exc)) from exc
        finally:
            await self.disconnect(conn)
