"""Engine and connection pool construction for the counter store."""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from .config import ServiceSettings
from .logger import get_logger

logger = get_logger(__name__)


def normalize_database_url(url: str) -> str:
    """Point PostgreSQL URLs at the psycopg (v3) driver.

    ``postgres://`` and bare ``postgresql://`` URLs would otherwise make
    SQLAlchemy fall back to psycopg2.
    """
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql+psycopg2://"):
        return url.replace("postgresql+psycopg2://", "postgresql+psycopg://", 1)
    return url


def create_store_engine(
    database_url: str,
    *,
    pool_size: int = ServiceSettings.pool_size,
    pool_timeout: float = ServiceSettings.pool_timeout,
    **engine_kwargs: Any,
) -> Engine:
    """Create the pooled SQLAlchemy engine shared by every request.

    The pool never grows past ``pool_size`` (``max_overflow=0``); requests
    beyond that wait up to ``pool_timeout`` seconds for a free connection.
    """
    url = make_url(normalize_database_url(database_url))

    if url.get_backend_name() == "sqlite":
        connect_args = engine_kwargs.setdefault("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise each checkout sees an empty database
            engine_kwargs.setdefault("poolclass", StaticPool)
            logger.info("Creating in-memory SQLite engine")
            return create_engine(url, **engine_kwargs)

    engine_kwargs.setdefault("pool_size", pool_size)
    engine_kwargs.setdefault("max_overflow", 0)
    engine_kwargs.setdefault("pool_timeout", pool_timeout)

    logger.info(
        "Creating SQLAlchemy engine for %s (pool_size=%s, pool_timeout=%ss)",
        url.render_as_string(hide_password=True),
        engine_kwargs["pool_size"],
        engine_kwargs["pool_timeout"],
    )
    return create_engine(url, pool_pre_ping=True, **engine_kwargs)
