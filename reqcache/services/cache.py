"""Write-through helper for route handlers.

The request-cache flow splits the cache work between middleware and
routes:

  GET     CacheReadMiddleware answers from the cache or falls through
  DELETE  CacheInvalidateMiddleware drops the entry, then falls through
  POST    the route saves the data, then calls write_through()

The route calls it only after the mutation succeeded, with the path the
new resource lives under.

Unlike the two gates, write_through() does NOT hide store failures:
StoreError is handed back for the route to report.
"""

from __future__ import annotations

from reqcache.models.cache_context import RequestCacheContext
from reqcache.services import cache_ops
from reqcache.services.cache_keys import derive_key
from reqcache.services.store_client import DEFAULT_STORE_CONFIG


async def write_through(
    context: RequestCacheContext, path: str, serialized_value: str
) -> bool:
    """Cache *serialized_value* under the key for *path*.

    Raises:
        InvalidArgument: empty path or value
        StoreError: the store could not be reached or rejected a command
    """
    key = derive_key(context.namespace, path)
    ttl = context.ttl_seconds or DEFAULT_STORE_CONFIG.default_ttl_seconds
    return await cache_ops.write(
        context.store, key, serialized_value, ttl, logger=context.logger
    )
