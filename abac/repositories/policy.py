"""Policy repository."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import Select

from abac.core.access.interfaces import PolicySource
from abac.models import Policy, PolicyAction

from .base import SoftDeleteRepository


class PolicyRepository(SoftDeleteRepository[Policy], PolicySource):
    """
    Active policies with conditions and action links loaded.

    Results are ordered by priority (highest first), then name, which is
    the retrieval order the evaluator uses to break priority ties.
    """

    model = Policy

    def _active_query(self) -> Select:
        return (
            self._base_query()
            .where(Policy.is_active.is_(True))
            .order_by(Policy.priority.desc(), Policy.name)
            .execution_options(populate_existing=True)
        )

    async def get_active_policies(self) -> Sequence[Policy]:
        result = await self.db.execute(self._active_query())
        return list(result.scalars().all())

    async def get_active_policies_for_action(self, action_id: UUID) -> Sequence[Policy]:
        stmt = self._active_query().where(
            Policy.action_links.any(PolicyAction.action_id == action_id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
