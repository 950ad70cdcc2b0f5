"""Action model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SoftDeleteMixin, StandardMixin


class Action(Base, StandardMixin, SoftDeleteMixin):
    """Operation a subject can request on a resource (e.g. code="approve")."""

    __tablename__ = "actions"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Action {self.code}>"
