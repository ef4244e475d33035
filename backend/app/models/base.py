"""SQLAlchemy declarative base and shared mixins."""
from datetime import datetime, timezone
from sqlalchemy import String, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class TimestampMixin:
    """Adds uploaded_at and updated_at columns.

    Set client-side so ordering keeps sub-second precision on every backend.
    """
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class OwnerMixin:
    """Adds owner_id column. Immutable once the row exists."""
    owner_id: Mapped[str] = mapped_column(String(100), nullable=False, default="default")
