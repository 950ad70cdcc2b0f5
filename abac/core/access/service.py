"""
Access control facade.

Orchestrates one access request:

    resolve action -> collect subject/resource/environment -> build action
    attributes -> evaluate policies -> AuthorizationResult

Usage:
    service = build_access_control_service(db)

    result = await service.check_access(user_id, resource_id, action_id, {"ip": "10.0.0.1"})
    if result.allowed:
        ...

    # Or without exceptions
    outcome = await service.try_check_access(user_id, resource_id, action_id)
"""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

import structlog

from abac.core.cancellation import CancellationToken, checkpoint
from abac.core.exceptions import AccessControlError, NotFoundError
from abac.models import Action
from abac.schemas.access import AppliedPolicy, AuthorizationDecision, AuthorizationResult

from .collector import AttributeCollector
from .context import AttributeMap, EvaluationContext
from .interfaces import AccessCheckOutcome, IdentitySource, PolicyEvaluation
from .policy import PolicyEvaluator

PERMIT_REASON = "Access permitted by applicable policy"
DENY_REASON = "Access denied: no applicable policy permits the operation"


def build_action_attributes(action: Action) -> AttributeMap:
    """Action attributes under both their short and qualified keys."""
    return AttributeMap({
        "actionId": action.id,
        "id": action.id,
        "actionCode": action.code,
        "code": action.code,
        "name": action.name,
    })


def to_authorization_result(evaluation: PolicyEvaluation) -> AuthorizationResult:
    """Map an evaluation onto the caller-facing result."""
    applied = [AppliedPolicy.from_policy(evaluation.decisive)] if evaluation.decisive else []
    return AuthorizationResult(
        decision=AuthorizationDecision.PERMIT if evaluation.allowed else AuthorizationDecision.DENY,
        reason=PERMIT_REASON if evaluation.allowed else DENY_REASON,
        applied_policies=applied,
    )


class AccessControlService:
    """
    Entry point of the decision engine.

    Stateless between calls; safe to share across concurrent requests as
    long as its collaborators are.
    """

    def __init__(
        self,
        identities: IdentitySource,
        collector: AttributeCollector,
        evaluator: PolicyEvaluator,
        logger: Any | None = None,
    ):
        self.identities = identities
        self.collector = collector
        self.evaluator = evaluator
        self.logger = logger or structlog.get_logger(__name__)

    async def check_access(
        self,
        user_id: UUID,
        resource_id: UUID,
        action_id: UUID,
        context: Mapping[str, Any] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> AuthorizationResult:
        """
        Decide whether a user may perform an action on a resource.

        Raises:
            NotFoundError: action, user or resource missing or soft-deleted
            EvaluationCancelledError: the token was cancelled mid-evaluation
        """
        with structlog.contextvars.bound_contextvars(
            user_id=str(user_id),
            resource_id=str(resource_id),
            action_id=str(action_id),
        ):
            checkpoint(cancellation)

            action = await self.identities.get_action_by_id(action_id)
            if action is None or action.is_deleted:
                raise NotFoundError("Action", action_id)

            subject = await self.collector.collect_subject(user_id, cancellation)
            resource = await self.collector.collect_resource(resource_id, cancellation)
            environment = await self.collector.collect_environment(context, cancellation)

            evaluation_context = EvaluationContext(
                subject=subject,
                resource=resource,
                action=build_action_attributes(action),
                environment=environment,
            )

            evaluation = await self.evaluator.evaluate(evaluation_context, cancellation)
            result = to_authorization_result(evaluation)

            self.logger.info(
                "Access check completed",
                decision=result.decision.value,
                action_code=action.code,
            )
            return result

    async def try_check_access(
        self,
        user_id: UUID,
        resource_id: UUID,
        action_id: UUID,
        context: Mapping[str, Any] | None = None,
        cancellation: CancellationToken | None = None,
    ) -> AccessCheckOutcome:
        """Like check_access, but returns NotFound/cancellation as an outcome value."""
        try:
            result = await self.check_access(user_id, resource_id, action_id, context, cancellation)
        except AccessControlError as exc:
            self.logger.info("Access check aborted", error=type(exc).__name__, message=str(exc))
            return AccessCheckOutcome.failure(exc)
        return AccessCheckOutcome.success(result)
