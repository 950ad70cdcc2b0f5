"""
Attribute definitions.

An attribute is a globally unique key plus a declared type. Assignments
store raw strings; the declared type decides how they are coerced when
an evaluation context is built.
"""

from enum import Enum

from sqlalchemy import Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin, StandardMixin


class AttributeType(str, Enum):
    """Declared type of an attribute."""

    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATETIME = "DateTime"


class Attribute(Base, StandardMixin, SoftDeleteMixin):
    """Attribute definition (e.g. key="department", type=String)."""

    __tablename__ = "attributes"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    type: Mapped[AttributeType] = mapped_column(
        SAEnum(AttributeType, native_enum=False, length=20),
        nullable=False,
        default=AttributeType.STRING,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Attribute {self.key}:{self.type.value}>"
