"""
Wiring of the SQL-backed access control engine.

Usage:
    async with session_factory() as db:
        service = build_access_control_service(db)
        result = await service.check_access(user_id, resource_id, action_id)
"""

from sqlalchemy.ext.asyncio import AsyncSession

from abac.core.access import AccessControlService, AttributeCollector, PolicyEvaluator
from abac.core.config import Settings, get_settings
from abac.repositories import PolicyRepository, SqlIdentitySource

from .audit import AccessLogService


def build_access_control_service(
    db: AsyncSession,
    settings: Settings | None = None,
) -> AccessControlService:
    """Build an AccessControlService whose collaborators share one session."""
    settings = settings or get_settings()
    evaluation = settings.evaluation

    identities = SqlIdentitySource(db)
    audit = AccessLogService(db) if evaluation.audit_enabled else None

    return AccessControlService(
        identities=identities,
        collector=AttributeCollector(identities, settings=evaluation),
        evaluator=PolicyEvaluator(
            policies=PolicyRepository(db),
            audit=audit,
            settings=evaluation,
        ),
    )
