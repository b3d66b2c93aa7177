"""Liveness and health endpoints.

  GET /        "is the process up?"  Always 200 when it can answer.
  GET /health  also tries one PING against the cache store.  A store
               that cannot be reached makes the status "degraded" but
               the response is still 200: the service keeps working
               without its cache, it is just slower.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from reqcache.api.dependencies import get_cache_context
from reqcache.core.errors import StoreError
from reqcache.models.cache_context import RequestCacheContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/")
async def alive() -> dict:
    return {"data": "I am alive"}


@router.get("/health")
async def health(
    context: Annotated[RequestCacheContext, Depends(get_cache_context)],
) -> dict:
    overall = "ok"
    try:
        async with context.store.session() as conn:
            await conn.ping()
        cache_status = "ok"
    except StoreError as exc:
        logger.warning("cache store unreachable: %s", exc)
        cache_status = "degraded"
        overall = "degraded"

    return {
        "status": overall,
        "checks": {"cache": cache_status},
        "cache": {
            "namespace": context.namespace,
            "backend": context.store.config.backend,
            "target": context.store.config.target,
        },
    }
