"""
Policy evaluator.

Linear pipeline over one request:

1. Candidate retrieval: policies linked to the action id, else policies
   whose action links match the action code, else every active policy.
2. Applicability: a candidate applies only if it has at least one
   condition and ALL of them hold (short-circuit on the first False).
3. Combining strategy from the environment (``combiningStrategy`` or the
   legacy ``policyCombiningStrategy``), defaulting to DenyOverrides.
4. Decision:
   - DenyOverrides: Permit iff some applicable policy permits and none denies
   - PermitOverrides: Permit iff some applicable policy permits
5. Decisive policy: highest priority applicable policy whose effect
   matches the decision (first in retrieval order on ties).
6. Audit: best effort; failures are logged and never change the decision.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any
from uuid import UUID

import structlog

from abac.core.cancellation import CancellationToken, checkpoint
from abac.core.config import EvaluationSettings
from abac.models.policy import Policy, PolicyEffect

from .coercion import to_text
from .conditions import ConditionEvaluator
from .context import AttributeMap, EvaluationContext
from .interfaces import AuditSink, PolicyEvaluation, PolicySource

STRATEGY_KEYS = ("combiningStrategy", "policyCombiningStrategy")

NO_CANDIDATES_REASON = "No active candidate policies for the requested action."


class CombiningStrategy(str, Enum):
    """Rule resolving simultaneously applicable policies."""

    DENY_OVERRIDES = "DenyOverrides"
    PERMIT_OVERRIDES = "PermitOverrides"

    @classmethod
    def parse(cls, value: "str | CombiningStrategy | None") -> "CombiningStrategy | None":
        """Case-insensitive lookup; None for unknown strategies."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        lowered = value.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return None


def combine(applicable: Sequence[Policy], strategy: CombiningStrategy) -> bool:
    """Combine the effects of applicable policies into a decision."""
    has_permit = any(policy.effect == PolicyEffect.PERMIT for policy in applicable)
    if strategy == CombiningStrategy.PERMIT_OVERRIDES:
        return has_permit
    has_deny = any(policy.effect == PolicyEffect.DENY for policy in applicable)
    return has_permit and not has_deny


def select_decisive(applicable: Sequence[Policy], allowed: bool) -> Policy | None:
    """
    Highest-priority applicable policy of the winning effect group.

    Under both strategies the winning group is Permit when the decision is
    Permit and Deny otherwise. max() keeps the first of equal priorities,
    so ties fall back to retrieval order.
    """
    wanted = PolicyEffect.PERMIT if allowed else PolicyEffect.DENY
    group = [policy for policy in applicable if policy.effect == wanted]
    return max(group, key=lambda policy: policy.priority, default=None)


def _uuid_from(attributes: AttributeMap, *keys: str) -> UUID | None:
    for key in keys:
        value = attributes.get(key)
        if value is None:
            continue
        if isinstance(value, UUID):
            return value
        try:
            return UUID(to_text(value))
        except ValueError:
            continue
    return None


class PolicyEvaluator:
    """
    Evaluates the current policy set against an EvaluationContext.

    Stateless between calls; every evaluation re-reads the policy source.

    Usage:
        evaluator = PolicyEvaluator(policies=PolicyRepository(db), audit=AccessLogService(db))
        evaluation = await evaluator.evaluate(context)
        evaluation.allowed, evaluation.decisive
    """

    def __init__(
        self,
        policies: PolicySource,
        conditions: ConditionEvaluator | None = None,
        audit: AuditSink | None = None,
        settings: EvaluationSettings | None = None,
        logger: Any | None = None,
    ):
        self.policies = policies
        self.logger = logger or structlog.get_logger(__name__)
        self.conditions = conditions or ConditionEvaluator(logger=self.logger)
        self.audit = audit
        self.settings = settings or EvaluationSettings()

    async def evaluate(
        self,
        context: EvaluationContext,
        cancellation: CancellationToken | None = None,
    ) -> PolicyEvaluation:
        """
        Run the evaluation pipeline.

        Raises:
            EvaluationCancelledError: if the token is cancelled before retrieval
                or before any candidate is tested
        """
        checkpoint(cancellation)

        strategy = self.resolve_strategy(context)
        candidates = await self._get_candidates(context)

        self.logger.info("Candidate policies retrieved", count=len(candidates))

        if not candidates:
            evaluation = PolicyEvaluation(
                allowed=False,
                strategy=strategy,
                candidate_count=0,
                reason=NO_CANDIDATES_REASON,
            )
            await self._audit(context, evaluation)
            return evaluation

        applicable: list[Policy] = []
        for policy in candidates:
            checkpoint(cancellation)
            if self.is_applicable(policy, context, cancellation):
                applicable.append(policy)

        allowed = combine(applicable, strategy)
        decisive = select_decisive(applicable, allowed)

        evaluation = PolicyEvaluation(
            allowed=allowed,
            strategy=strategy,
            candidate_count=len(candidates),
            applicable=applicable,
            decisive=decisive,
        )
        evaluation.reason = self._build_reason(evaluation)

        self.logger.info(
            "Access decision reached",
            decision=evaluation.decision_text,
            strategy=strategy.value,
            applicable=len(applicable),
            decisive_policy_id=str(decisive.id) if decisive else None,
        )

        await self._audit(context, evaluation)
        return evaluation

    def is_applicable(
        self,
        policy: Policy,
        context: EvaluationContext,
        cancellation: CancellationToken | None = None,
    ) -> bool:
        """A policy applies only if it has conditions and all of them hold."""
        if not policy.conditions:
            return False
        return all(
            self.conditions.evaluate(condition, context, cancellation)
            for condition in policy.conditions
        )

    def resolve_strategy(self, context: EvaluationContext) -> CombiningStrategy:
        """Strategy named in the environment, else the configured default."""
        default = CombiningStrategy(self.settings.default_combining_strategy)
        for key in STRATEGY_KEYS:
            if key in context.environment:
                parsed = CombiningStrategy.parse(to_text(context.environment[key]))
                return parsed or default
        return default

    async def _get_candidates(self, context: EvaluationContext) -> list[Policy]:
        action_id = _uuid_from(context.action, "actionId", "id")
        if action_id is not None:
            return list(await self.policies.get_active_policies_for_action(action_id))

        active = list(await self.policies.get_active_policies())

        action_code = None
        for key in ("code", "actionCode"):
            if key in context.action:
                action_code = to_text(context.action[key])
                break

        if not action_code or not action_code.strip():
            return active

        wanted = action_code.casefold()
        return [
            policy
            for policy in active
            if any(
                link.action is not None
                and link.action.code is not None
                and link.action.code.casefold() == wanted
                for link in policy.action_links
            )
        ]

    @staticmethod
    def _build_reason(evaluation: PolicyEvaluation) -> str:
        reason = (
            f"Decision {evaluation.decision_text} under {evaluation.strategy.value}; "
            f"applicable policies: {len(evaluation.applicable)}"
        )
        if evaluation.decisive is not None:
            reason += f"; decisive policy: {evaluation.decisive.name} ({evaluation.decisive.id})"
        return reason + "."

    async def _audit(self, context: EvaluationContext, evaluation: PolicyEvaluation) -> None:
        """Emit the audit record; the decision is final by now."""
        if self.audit is None or not self.settings.audit_enabled:
            return

        try:
            user_id = _uuid_from(context.subject, "userId", "id")
            if user_id is None:
                return

            ip_address = context.environment.get("ipAddress")

            await self.audit.log_access_evaluation(
                user_id=user_id,
                resource_id=_uuid_from(context.resource, "resourceId", "id"),
                action_id=_uuid_from(context.action, "actionId", "id"),
                result=evaluation.decision_text,
                reason=evaluation.reason,
                policy_id=evaluation.decisive.id if evaluation.decisive else None,
                context=None,
                ip_address=to_text(ip_address) if ip_address is not None else None,
            )
        except Exception:
            self.logger.warning("Failed to record access evaluation audit", exc_info=True)
