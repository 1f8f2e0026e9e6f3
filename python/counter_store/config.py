"""Environment-driven configuration for the counter store service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from .errors import ConfigError


def _read_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)
        return parsed if parsed > 0 else default
    except ValueError:
        return default


def _read_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)
        return parsed if parsed > 0 else default
    except ValueError:
        return default


def _require(name: str) -> str:
    value = (os.environ.get(name) or "").strip()
    if not value:
        raise ConfigError(f"{name} must be set")
    return value


@dataclass(frozen=True)
class ServiceSettings:
    """Typed container for service configuration."""

    database_url: str
    port: int
    host: str = "127.0.0.1"
    # Upper bound on concurrent database connections; extra requests queue.
    pool_size: int = 5
    pool_timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        """Build settings from DATABASE_URL, PORT and COUNTER_STORE_* variables."""

        database_url = _require("DATABASE_URL")

        raw_port = _require("PORT")
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ConfigError(f"PORT must be an integer, got {raw_port!r}") from exc
        if not 0 < port < 65536:
            raise ConfigError(f"PORT out of range: {port}")

        host = os.environ.get("COUNTER_STORE_HOST", cls.host).strip() or cls.host
        pool_size = _read_int(os.environ.get("COUNTER_STORE_POOL_SIZE"), cls.pool_size)
        pool_timeout = _read_float(
            os.environ.get("COUNTER_STORE_POOL_TIMEOUT"), cls.pool_timeout
        )
        log_level = os.environ.get("COUNTER_STORE_LOG_LEVEL", cls.log_level).upper()

        return cls(
            database_url=database_url,
            port=port,
            host=host,
            pool_size=pool_size,
            pool_timeout=pool_timeout,
            log_level=log_level,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a dict suitable for logging (database URL redacted)."""

        return {
            "database_url_set": bool(self.database_url),
            "host": self.host,
            "port": self.port,
            "pool_size": self.pool_size,
            "pool_timeout": self.pool_timeout,
            "log_level": self.log_level,
        }
