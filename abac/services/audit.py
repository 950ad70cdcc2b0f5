"""Access log service - audit sink for access decisions."""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from abac.core.access.interfaces import AuditSink
from abac.models.access_log import AccessLog


class AccessLogService(AuditSink):
    """Persists one AccessLog row per access decision."""

    def __init__(self, db: AsyncSession, logger=None):
        self.db = db
        self.logger = logger or structlog.get_logger(__name__)

    async def log_access_evaluation(
        self,
        *,
        user_id: UUID,
        resource_id: Optional[UUID] = None,
        action_id: Optional[UUID] = None,
        result: str,
        reason: Optional[str] = None,
        policy_id: Optional[UUID] = None,
        context: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AccessLog:
        """
        Create an access log entry.

        Args:
            user_id: Subject of the request
            resource_id: Resource the subject asked for
            action_id: Requested action
            result: "Permit" or "Deny" (blank is stored as "Error")
            reason: Human-readable explanation of the decision
            policy_id: Decisive policy, if any
            context: Serialized request context
            ip_address: Caller address from the environment
        """
        entry = AccessLog(
            user_id=user_id,
            resource_id=resource_id,
            action_id=action_id,
            policy_id=policy_id,
            result=(result or "").strip() or "Error",
            reason=reason,
            context=context,
            ip_address=ip_address,
        )

        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)

        self.logger.info(
            "Access log created",
            result=entry.result,
            user_id=str(user_id),
            policy_id=str(policy_id) if policy_id else None,
        )

        return entry

    async def list_for_user(self, user_id: UUID, limit: int = 50) -> list[AccessLog]:
        """Most recent access logs of a user."""
        stmt = (
            select(AccessLog)
            .where(AccessLog.user_id == user_id)
            .order_by(AccessLog.created_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
