"""Request context middleware: request IDs and one summary log line.

Cache hits, misses and store errors from concurrent requests interleave
in the log.  Each request gets an ID (X-Request-ID, or a fresh UUID4)
held in ``request_id_var``; the log handler's LogContextFilter copies it
onto every record emitted while the request is in flight.

The summary line also says whether the read gate answered from cache
(``request.state.cache_hit``), so hit ratios can be read off the access
log without a metrics backend.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from reqcache.core.logging import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _resolve_request_id(request: Request) -> str:
    return request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Outermost layer: tag the request, time it, log one line for it."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = _resolve_request_id(request)
        token = request_id_var.set(req_id)
        try:
            start = time.monotonic()
            response = await call_next(request)
            duration_ms = round((time.monotonic() - start) * 1000, 1)

            cache_hit = bool(getattr(request.state, "cache_hit", False))
            logger.info(
                "%s %s → %d (%.1fms%s)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                ", from cache" if cache_hit else "",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "cache_hit": cache_hit,
                },
            )
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = req_id
        return response
