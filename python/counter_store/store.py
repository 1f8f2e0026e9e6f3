"""Durable, concurrency-safe persistence of counters.

Writes go through a single backend-native upsert statement so that
concurrent writers to the same key can never observe each other's
half-applied state or violate the (namespace, counter_name) primary key.
The last write to commit wins.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Generator

from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.sql.dml import Insert

from .errors import (
    ConfigError,
    ConstraintViolationError,
    StoreError,
    StoreIOError,
    StoreUnavailableError,
)
from .logger import get_logger
from .models import Base, Counter

logger = get_logger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class StoredCounter:
    """A counter record as committed to the database."""

    namespace: str
    name: str
    count: int


def _on_conflict_upsert(insert_fn: Callable[..., Insert]) -> Callable[[str, str, int], Insert]:
    def build(namespace: str, name: str, count: int) -> Insert:
        stmt = insert_fn(Counter).values(
            namespace=namespace, counter_name=name, count=count
        )
        return stmt.on_conflict_do_update(
            index_elements=[Counter.namespace, Counter.counter_name],
            set_={"count": stmt.excluded.count},
        )

    return build


def _mysql_upsert(namespace: str, name: str, count: int) -> Insert:
    stmt = mysql_insert(Counter).values(
        namespace=namespace, counter_name=name, count=count
    )
    return stmt.on_duplicate_key_update(count=stmt.inserted.count)


_UPSERT_BUILDERS: Dict[str, Callable[[str, str, int], Insert]] = {
    "postgresql": _on_conflict_upsert(pg_insert),
    "sqlite": _on_conflict_upsert(sqlite_insert),
    "mysql": _mysql_upsert,
    "mariadb": _mysql_upsert,
}


def _check_key(namespace: str, name: str) -> None:
    for label, value in (("namespace", namespace), ("name", name)):
        if not isinstance(value, str) or not value:
            raise ValueError(f"{label} must be a non-empty string")


def _check_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValueError("count must be an integer")
    if not INT64_MIN <= count <= INT64_MAX:
        raise ValueError("count must fit in a signed 64-bit integer")


def _error_class_for(exc: SQLAlchemyError) -> type[StoreError]:
    if isinstance(exc, IntegrityError):
        return ConstraintViolationError
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)):
        return StoreUnavailableError
    return StoreIOError


class CounterStore:
    """Reads and writes counters through a pooled SQLAlchemy engine."""

    def __init__(self, engine: Engine):
        dialect = engine.dialect.name
        try:
            self._build_upsert = _UPSERT_BUILDERS[dialect]
        except KeyError:
            raise ConfigError(
                f"Unsupported database backend '{dialect}'. "
                f"Supported: {', '.join(sorted(_UPSERT_BUILDERS))}"
            ) from None

        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )

    @contextmanager
    def _session(self) -> Generator[Session, None, None]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def _translate_errors(
        self, operation: str, namespace: str | None = None, name: str | None = None
    ) -> Generator[None, None, None]:
        try:
            yield
        except SQLAlchemyError as exc:
            error_cls = _error_class_for(exc)
            logger.error(
                "Counter store %s failed (%s) for namespace=%s name=%s: %s",
                operation,
                error_cls.__name__,
                namespace,
                name,
                exc,
            )
            raise error_cls(str(exc)) from exc

    def initialize(self) -> None:
        """Create the counters table if it does not exist yet.

        Existing tables and rows are left untouched, so this is safe to call
        on every process start.
        """
        with self._translate_errors("initialize"):
            Base.metadata.create_all(self._engine, checkfirst=True)
        logger.info("Counter schema ready on %s backend", self._engine.dialect.name)

    def set(self, namespace: str, name: str, count: int) -> StoredCounter:
        """Insert or replace the counter's value in one atomic statement."""

        _check_key(namespace, name)
        _check_count(count)

        stmt = self._build_upsert(namespace, name, count)
        with self._translate_errors("set", namespace, name):
            with self._session() as session:
                session.execute(stmt)

        logger.debug("Set counter %s/%s = %s", namespace, name, count)
        return StoredCounter(namespace=namespace, name=name, count=count)

    def get(self, namespace: str, name: str) -> StoredCounter | None:
        """Return the stored counter, or None if it was never written."""

        _check_key(namespace, name)

        with self._translate_errors("get", namespace, name):
            with self._session() as session:
                row = session.get(Counter, (namespace, name))
                if row is None:
                    return None
                # Tables created by older deployments allow NULL counts
                count = row.count if row.count is not None else 0
                return StoredCounter(
                    namespace=row.namespace, name=row.counter_name, count=count
                )

    def dispose(self) -> None:
        """Release every pooled connection (used on shutdown)."""

        self._engine.dispose()
        logger.info("Disposed counter store engine")
