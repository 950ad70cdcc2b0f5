"""
Base model classes and mixins.

- TimestampMixin: created_at, updated_at
- SoftDeleteMixin: deleted_at (soft-deleted rows are invisible to the engine)
- UUIDMixin: UUID primary key
"""

from datetime import datetime
from typing import Optional
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    # All datetimes are timezone-aware
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """
    Mixin for created_at and updated_at timestamps (UTC).

    Usage:
        class MyModel(Base, TimestampMixin):
            __tablename__ = "my_table"
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class SoftDeleteMixin:
    """
    Mixin for soft delete functionality.

    Records are marked as deleted instead of being removed. The decision
    engine treats a soft-deleted subject, resource or action as missing.
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    @property
    def is_deleted(self) -> bool:
        """Check if record is soft deleted."""
        return self.deleted_at is not None


class UUIDMixin:
    """Mixin for UUID v4 primary key."""

    id: Mapped[PyUUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )


class StandardMixin(UUIDMixin, TimestampMixin):
    """UUID primary key + timestamps."""
    pass
