from __future__ import annotations

from reqcache.core.errors import InvalidArgument


def derive_key(namespace: str, path: str) -> str:
    """Build the cache key for a request path: ``namespace + path`` with
    every ``/`` turned into ``-``.

    ``derive_key("svc", "/test/100") == "svc-test-100"``

    No escaping is applied, so ``/a-b`` and ``/a/b`` map to the same key.
    Resource paths that contain dashes should keep that in mind.
    """
    if not namespace or not path:
        raise InvalidArgument(
            f"namespace and path must be non-empty (got {namespace!r}, {path!r})"
        )
    return f"{namespace}{path.replace('/', '-')}"
