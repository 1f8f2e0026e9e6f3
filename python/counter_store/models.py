"""Database models for the counter store."""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Counter(Base):
    """One integer value per (namespace, counter_name) pair."""

    __tablename__ = "counters"

    namespace: Mapped[str] = mapped_column(String(255), primary_key=True)
    counter_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Counter(namespace={self.namespace}, "
            f"counter_name={self.counter_name}, count={self.count})>"
        )
