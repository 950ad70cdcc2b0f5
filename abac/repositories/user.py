"""User repository."""

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select

from abac.models import User, UserAttribute

from .base import BaseRepository


class UserRepository(BaseRepository[User]):
    """
    Users and their attribute assignments.

    get_by_id returns soft-deleted users too; callers decide what a
    deleted subject means.
    """

    model = User

    async def get_active_attributes(
        self,
        user_id: UUID,
        as_of: datetime,
    ) -> Sequence[UserAttribute]:
        """Assignments whose [valid_from, valid_to] window contains as_of."""
        stmt = (
            select(UserAttribute)
            .where(UserAttribute.user_id == user_id)
            .where(or_(UserAttribute.valid_from.is_(None), UserAttribute.valid_from <= as_of))
            .where(or_(UserAttribute.valid_to.is_(None), UserAttribute.valid_to >= as_of))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
