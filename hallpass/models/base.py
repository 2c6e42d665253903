"""Base model utilities and mixins."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column


def new_internal_id() -> str:
    """Opaque surrogate key for roster records."""
    return uuid4().hex


class IDMixin:
    """Mixin providing an auto-increment integer primary key.

    SQLite only auto-increments ``INTEGER PRIMARY KEY`` columns, hence the variant.
    """

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )


class SurrogateIDMixin:
    """Mixin providing an opaque string primary key generated once."""

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_internal_id,
    )


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamps.

    Values are school-local wall-clock times set by the services, never by the database.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
