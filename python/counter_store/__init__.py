"""Namespaced integer counters over HTTP, backed by a relational database."""

from .config import ServiceSettings
from .database import create_store_engine, normalize_database_url
from .errors import (
    ConfigError,
    ConstraintViolationError,
    StoreError,
    StoreIOError,
    StoreUnavailableError,
)
from .server import create_app
from .store import CounterStore, StoredCounter

__all__ = [
    # Configuration
    "ServiceSettings",
    # Storage
    "CounterStore",
    "StoredCounter",
    "create_store_engine",
    "normalize_database_url",
    # Errors
    "ConfigError",
    "StoreError",
    "StoreUnavailableError",
    "ConstraintViolationError",
    "StoreIOError",
    # HTTP
    "create_app",
]
