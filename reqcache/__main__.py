"""Run the API server.

RUN:  python -m reqcache

Equivalent to ``uvicorn reqcache.main:app --host 0.0.0.0 --port $PORT``.
Logging is configured by reqcache.main, so uvicorn's own log config is
disabled.
"""

from __future__ import annotations

import uvicorn

from reqcache.core.config import SETTINGS

if __name__ == "__main__":
    uvicorn.run(
        "reqcache.main:app",
        host="0.0.0.0",
        port=SETTINGS.port,
        log_config=None,
        reload=SETTINGS.is_dev,
    )
