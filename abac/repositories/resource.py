"""Resource repository."""

from uuid import UUID

from abac.models import Resource

from .base import BaseRepository


class ResourceRepository(BaseRepository[Resource]):
    model = Resource

    async def get_with_attributes(self, resource_id: UUID) -> Resource | None:
        """Resource with its attribute assignments (eager-loaded)."""
        stmt = (
            self._base_query()
            .where(Resource.id == resource_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
