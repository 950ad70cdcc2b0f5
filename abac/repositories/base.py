"""
Base repository with common read operations.

The decision engine only reads; writes belong to the management layer.
"""

from typing import Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from abac.models.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Base repository providing common lookups.

    Usage:
        class ActionRepository(BaseRepository[Action]):
            model = Action

        repo = ActionRepository(db)
        action = await repo.get_by_id(action_id)
    """

    model: Type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    def _base_query(self) -> Select:
        """Base query - override to add default filters (e.g., soft delete)."""
        return select(self.model)

    async def get_by_id(self, id: UUID | str) -> ModelT | None:
        """Get entity by ID."""
        if isinstance(id, str):
            id = UUID(id)
        stmt = self._base_query().where(self.model.id == id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()


class SoftDeleteRepository(BaseRepository[ModelT]):
    """Repository that filters out soft-deleted entities."""

    def _base_query(self) -> Select:
        """Exclude soft-deleted entities by default."""
        return select(self.model).where(self.model.deleted_at.is_(None))
