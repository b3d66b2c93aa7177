from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reqcache.api.health import router as health_router
from reqcache.api.items import PREFIX as ITEMS_PREFIX
from reqcache.api.items import router as items_router
from reqcache.api.metrics_endpoint import router as metrics_router
from reqcache.core.config import SETTINGS
from reqcache.core.errors import PreconditionFailed, StoreError
from reqcache.core.logging import setup_logging
from reqcache.middleware.cache_context import CacheContextMiddleware
from reqcache.middleware.cache_gates import (
    CacheInvalidateMiddleware,
    CacheReadMiddleware,
)
from reqcache.middleware.metrics import MetricsMiddleware
from reqcache.middleware.request_context import RequestContextMiddleware
from reqcache.services.store_client import get_handle

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup check only: cache operations open their own connections,
    # so there is nothing to keep open or release at shutdown.
    handle = get_handle(SETTINGS.cache_namespace)
    try:
        async with handle.session() as conn:
            await conn.ping()
        logger.info("cache store reachable at %s", handle.config.target)
    except StoreError:
        logger.warning(
            "cache store unreachable at %s; cache reads will degrade to misses",
            handle.config.target,
        )
    yield


app = FastAPI(
    title="request-cache-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)


@app.exception_handler(PreconditionFailed)
async def precondition_failed_handler(
    request: Request, exc: PreconditionFailed
) -> JSONResponse:
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=404)


# Middleware execution order: last-added runs first (outermost layer).
# RequestContext → Metrics → CacheContext → CacheRead → CacheInvalidate → route
# The gates need the context attached by CacheContextMiddleware.
gated = (f"{ITEMS_PREFIX}/",)
app.add_middleware(CacheInvalidateMiddleware, prefixes=gated)
app.add_middleware(CacheReadMiddleware, prefixes=gated)
app.add_middleware(CacheContextMiddleware, namespace=SETTINGS.cache_namespace)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(items_router)

logger.info(
    "request-cache-service started  env=%s log_level=%s port=%d namespace=%s "
    "backend=%s store=%s ttl=%ds",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.cache_namespace,
    SETTINGS.cache_backend,
    SETTINGS.redis_target,
    SETTINGS.cache_ttl_seconds,
)
