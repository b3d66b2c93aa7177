from __future__ import annotations

from fastapi import Request

from reqcache.middleware.cache_context import require_cache_context
from reqcache.models.cache_context import RequestCacheContext


def get_cache_context(request: Request) -> RequestCacheContext:
    """FastAPI dependency: the context CacheContextMiddleware attached.

    Raises PreconditionFailed (mapped to 404 in main.py) when the
    middleware is missing.
    """
    return require_cache_context(request)
