"""Logging configuration for the request-cache service.

Two output formats, picked by LOG_JSON:

  _ContainerFormatter  single-line text for a terminal or `docker logs`.
  _JsonFormatter       JSON lines for a log aggregator.

Cache code logs through plain `logging.getLogger(__name__)` loggers, or
through the logger a caller attached to the request context.  Either way
the records end up on the root handler installed here, whose
LogContextFilter stamps request_id and cache_namespace onto each one.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar

# Per-request log context; set by the middleware, read by LogContextFilter
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
cache_namespace_var: ContextVar[str | None] = ContextVar("cache_namespace", default=None)


class LogContextFilter(logging.Filter):
    """Copy the per-request ContextVars onto each LogRecord.

    Installed on the handler, not on the root logger: logger filters only
    see records logged on that exact logger, not propagated ones.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        if getattr(record, "cache_namespace", None) is None:
            record.cache_namespace = cache_namespace_var.get()  # type: ignore[attr-defined]
        return True


class _ContainerFormatter(logging.Formatter):
    """Single-line formatter tuned for container stdout.

    WARNING and above get a [filename:lineno] suffix.
    """

    _BASE_FMT = "%(asctime)s %(levelname)-8s %(name)s  %(message)s"
    _LOC_SUFFIX = "  [%(filename)s:%(lineno)d]"

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        base = super().formatTime(record, datefmt)
        ms = int(record.msecs)
        # Milliseconds go before the +HHMM offset
        return f"{base[:-5]}.{ms:03d}{base[-5:]}"

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.WARNING:
            self._style._fmt = self._BASE_FMT + self._LOC_SUFFIX
        else:
            self._style._fmt = self._BASE_FMT
        return super().format(record)


class _JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Request fields come from RequestContextMiddleware; cache fields come
    from the cache operations (`extra={"cache_key": ...}`).
    """

    _CONTEXT_FIELDS = (
        "request_id",
        "method",
        "path",
        "status_code",
        "duration_ms",
        "cache_namespace",
        "cache_key",
        "cache_hit",
    )

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S%z")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Configure the root logger.

    Args:
        level_name: debug/info/warning/error (unknown names fall back to info)
        json_format: emit JSON lines instead of the text format
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(LogContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx", "redis"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
