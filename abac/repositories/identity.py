"""SQL-backed identity/resource source."""

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from abac.core.access.interfaces import IdentitySource
from abac.models import Action, Resource, User, UserAttribute

from .action import ActionRepository
from .resource import ResourceRepository
from .user import UserRepository


class SqlIdentitySource(IdentitySource):
    """
    Composes the user, resource and action repositories over one session.

    Usage:
        identities = SqlIdentitySource(db)
        user = await identities.get_user_by_id(user_id)
    """

    def __init__(self, db: AsyncSession):
        self.users = UserRepository(db)
        self.resources = ResourceRepository(db)
        self.actions = ActionRepository(db)

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        return await self.users.get_by_id(user_id)

    async def get_active_user_attributes(
        self,
        user_id: UUID,
        as_of: datetime,
    ) -> Sequence[UserAttribute]:
        return await self.users.get_active_attributes(user_id, as_of)

    async def get_resource_with_attributes(self, resource_id: UUID) -> Resource | None:
        return await self.resources.get_with_attributes(resource_id)

    async def get_action_by_id(self, action_id: UUID) -> Action | None:
        return await self.actions.get_by_id(action_id)
