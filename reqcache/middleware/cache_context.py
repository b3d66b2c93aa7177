"""Cache context middleware: attaches the store handle to each request.

Every later stage (the read/invalidate gates, route handlers) needs the
same three things: the namespace, the store handle and a logger.  This
middleware builds that bundle once per middleware instance and puts it
on ``request.state.cache`` for every request it sees.

It is idempotent: if an earlier middleware already attached a context,
that one is kept.  It never ends a request on its own.

Starlette keeps ``request.state`` in the ASGI scope, so what is set here
is visible to inner middleware and to the route.

Log records emitted below this layer carry the namespace as
``cache_namespace``.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import HTTPConnection, Request
from starlette.responses import Response
from starlette.types import ASGIApp

from reqcache.core.errors import PreconditionFailed
from reqcache.core.logging import cache_namespace_var
from reqcache.db.store import StoreConfig
from reqcache.models.cache_context import LoggerSink, RequestCacheContext
from reqcache.services.store_client import get_handle

STATE_ATTR = "cache"


def attached_context(conn: HTTPConnection) -> RequestCacheContext | None:
    return getattr(conn.state, STATE_ATTR, None)


def require_cache_context(conn: HTTPConnection) -> RequestCacheContext:
    """Return the attached context or fail fast.

    A missing context means CacheContextMiddleware is not installed
    outside the stage asking for it.
    """
    context = attached_context(conn)
    if context is None:
        raise PreconditionFailed(
            "no cache context on request; install CacheContextMiddleware "
            "outside the cache gates"
        )
    return context


class CacheContextMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        namespace: str,
        config: StoreConfig | None = None,
        logger: LoggerSink | None = None,
    ) -> None:
        super().__init__(app)
        store = get_handle(namespace, config)
        self._context = RequestCacheContext(
            namespace=namespace,
            store=store,
            logger=logger,
            ttl_seconds=store.config.default_ttl_seconds,
        )

    @property
    def context(self) -> RequestCacheContext:
        return self._context

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        context = attached_context(request)
        if context is None:
            context = self._context
            setattr(request.state, STATE_ATTR, context)
        token = cache_namespace_var.set(context.namespace)
        try:
            return await call_next(request)
        finally:
            cache_namespace_var.reset(token)
