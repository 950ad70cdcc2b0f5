"""
User (subject) model and its attribute assignments.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .attribute import Attribute
from .base import Base, SoftDeleteMixin, StandardMixin


class User(Base, StandardMixin, SoftDeleteMixin):
    """Subject whose attributes feed access decisions."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    attributes: Mapped[list["UserAttribute"]] = relationship(
        "UserAttribute",
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class UserAttribute(Base, StandardMixin):
    """
    Attribute value assigned to a user.

    The optional validity window makes temporary grants possible; only
    assignments whose window contains the evaluation time are collected.

    Examples:
        UserAttribute(user=user, attribute=department, value="Finance")
        UserAttribute(user=user, attribute=clearance, value="3",
                      valid_to=datetime(2025, 12, 31, tzinfo=timezone.utc))
    """

    __tablename__ = "user_attributes"

    user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("attributes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # Validity period (open-ended when null)
    valid_from: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    valid_to: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="attributes")
    attribute: Mapped[Attribute] = relationship(Attribute, lazy="selectin")

    def __repr__(self) -> str:
        return f"<UserAttribute user={self.user_id} attribute={self.attribute_id}>"
