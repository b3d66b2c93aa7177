from __future__ import annotations

import logging
from dataclasses import dataclass

from reqcache.db.store import StoreHandle

# Plain loggers only: a LoggerAdapter before Python 3.13 replaces the
# per-call extra, which carries cache_key.
LoggerSink = logging.Logger


@dataclass(frozen=True, slots=True)
class RequestCacheContext:
    """What the cache gates and routes need for one request.

    Attached to ``request.state.cache`` by CacheContextMiddleware and
    only read afterwards.
    """

    namespace: str
    store: StoreHandle
    logger: LoggerSink | None = None
    ttl_seconds: int | None = None
