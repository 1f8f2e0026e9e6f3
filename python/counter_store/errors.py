"""Exception hierarchy for the counter store service."""

from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when the process environment/configuration is invalid."""


class StoreError(RuntimeError):
    """Base error for counter store failures.

    The message is the underlying persistence-layer message so that it can be
    surfaced verbatim in the ``error`` field of an HTTP response.
    """


class StoreUnavailableError(StoreError):
    """Raised when the database cannot be reached or the pool is exhausted."""


class ConstraintViolationError(StoreError):
    """Raised when a write would break the (namespace, name) uniqueness."""


class StoreIOError(StoreError):
    """Raised for any other persistence-layer failure."""
