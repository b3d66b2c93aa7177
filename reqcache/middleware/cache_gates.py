"""Cache gates: read and invalidate middleware.

Both gates sit INSIDE CacheContextMiddleware and act only on requests
whose method matches and whose path starts with one of the configured
prefixes.  Everything else passes straight through.

READ GATE (GET)
  derive key → read
    value    → 200 {"fromCache": true, "data": value}; the route never runs
    None     → call the route
    failure  → call the route (a broken cache looks like a miss)

INVALIDATE GATE (DELETE)
  derive key → delete → call the route, whatever happened

Neither gate ever turns a cache failure into a client-visible error.
The one exception is a missing cache context: that is a wiring bug, so
the gate logs it and answers 404 {"error": ...} without calling the
route.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from reqcache.core.errors import InvalidArgument, PreconditionFailed, StoreError
from reqcache.middleware.cache_context import require_cache_context
from reqcache.models.cache_context import RequestCacheContext
from reqcache.services import cache_ops
from reqcache.services.cache_keys import derive_key

logger = logging.getLogger(__name__)


class _CacheGate(BaseHTTPMiddleware):
    method: str = ""

    def __init__(self, app: ASGIApp, prefixes: Iterable[str] = ("/",)) -> None:
        super().__init__(app)
        self.prefixes = tuple(prefixes)

    def applies_to(self, request: Request) -> bool:
        return request.method == self.method and request.url.path.startswith(
            self.prefixes
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self.applies_to(request):
            return await call_next(request)

        try:
            context = require_cache_context(request)
        except PreconditionFailed as exc:
            logger.error("%s %s rejected: %s", request.method, request.url.path, exc)
            return JSONResponse({"error": str(exc)}, status_code=404)

        return await self.gate(context, request, call_next)

    async def gate(
        self,
        context: RequestCacheContext,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        raise NotImplementedError


class CacheReadMiddleware(_CacheGate):
    method = "GET"

    async def gate(
        self,
        context: RequestCacheContext,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            key = derive_key(context.namespace, request.url.path)
            value = await cache_ops.read(context.store, key, logger=context.logger)
        except (StoreError, InvalidArgument) as exc:
            # Degrade to a miss
            logger.warning("cache read skipped for %s: %s", request.url.path, exc)
            value = None

        if value is not None:
            request.state.cache_hit = True
            return JSONResponse({"fromCache": True, "data": value}, status_code=200)
        return await call_next(request)


class CacheInvalidateMiddleware(_CacheGate):
    method = "DELETE"

    async def gate(
        self,
        context: RequestCacheContext,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            key = derive_key(context.namespace, request.url.path)
            await cache_ops.delete(context.store, key, logger=context.logger)
        except (StoreError, InvalidArgument) as exc:
            logger.warning("cache invalidation skipped for %s: %s", request.url.path, exc)
        return await call_next(request)
