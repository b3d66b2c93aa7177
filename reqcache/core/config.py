from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]
CacheBackend = Literal["redis", "memory"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")


def _getenv(name: str, default: str) -> str:
    # Centralize env access so every variable is stripped the same way
    return os.environ.get(name, default).strip()


def _getenv_int(name: str, default: str) -> int:
    raw = _getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


def _getenv_bool(name: str, default: str) -> bool:
    raw = _getenv(name, default).lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    cache_namespace: str
    cache_backend: CacheBackend
    redis_host: str
    redis_port: int
    redis_password: str | None
    redis_timeout_ms: int
    cache_ttl_seconds: int

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def redis_target(self) -> str:
        return f"{self.redis_host}:{self.redis_port}"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    backend_raw = _getenv("CACHE_BACKEND", "redis").lower()
    namespace = _getenv("CACHE_NAMESPACE", "svc")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if backend_raw not in ("redis", "memory"):
        raise ValueError(f"CACHE_BACKEND must be redis|memory (got {backend_raw!r})")

    if not namespace:
        raise ValueError("CACHE_NAMESPACE must be non-empty")

    ttl = _getenv_int("REDIS_TTL", "30")
    if ttl <= 0:
        raise ValueError(f"REDIS_TTL must be a positive integer (got {ttl})")

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getenv_bool("LOG_JSON", "false"),
        port=_getenv_int("PORT", "8000"),
        cache_namespace=namespace,
        cache_backend=backend_raw,
        redis_host=_getenv("REDIS_HOST", "0.0.0.0"),
        redis_port=_getenv_int("REDIS_PORT", "6379"),
        redis_password=_getenv("REDIS_PASSWORD", "") or None,
        redis_timeout_ms=_getenv_int("REDIS_TIMEOUT", "5000"),
        cache_ttl_seconds=ttl,
    )


# Loaded once at import; nothing mutates it afterwards
SETTINGS = load_settings()
