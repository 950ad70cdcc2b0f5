"""
Resource model and its attribute assignments.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .attribute import Attribute
from .base import Base, SoftDeleteMixin, StandardMixin


class Resource(Base, StandardMixin, SoftDeleteMixin):
    """Protected resource (document, record, endpoint...)."""

    __tablename__ = "resources"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    attributes: Mapped[list["ResourceAttribute"]] = relationship(
        "ResourceAttribute",
        back_populates="resource",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Resource {self.name}>"


class ResourceAttribute(Base, StandardMixin):
    """Attribute value assigned to a resource."""

    __tablename__ = "resource_attributes"

    resource_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("resources.id", ondelete="CASCADE"),
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

    resource: Mapped["Resource"] = relationship("Resource", back_populates="attributes")
    attribute: Mapped[Attribute] = relationship(Attribute, lazy="selectin")

    def __repr__(self) -> str:
        return f"<ResourceAttribute resource={self.resource_id} attribute={self.attribute_id}>"
