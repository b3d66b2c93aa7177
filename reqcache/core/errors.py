"""Error taxonomy for the cache layer.

Three failure kinds, each with its own propagation rule:

  InvalidArgument     empty/absent key, value, namespace or handle.
                      A programming or configuration mistake.  Raised before
                      any store call is made and never retried.

  StoreError          transport or store-side failure during a
                      connect / act / disconnect cycle.  Read and delete
                      paths turn it into a miss or a no-op; the write path
                      hands it back to the route.

  PreconditionFailed  a cache gate ran without a RequestCacheContext on the
                      request, i.e. the middleware chain is mis-ordered.
                      Fatal for that request and never retried.
"""

from __future__ import annotations


class CacheError(Exception):
    """Base class for every cache-layer failure."""


class InvalidArgument(CacheError, ValueError):
    pass


class StoreError(CacheError):
    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


class PreconditionFailed(CacheError, RuntimeError):
    pass
