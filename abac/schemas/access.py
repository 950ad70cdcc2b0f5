"""Access decision schemas."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from abac.models.policy import Policy, PolicyEffect


class AuthorizationDecision(str, Enum):
    """Final decision returned to callers."""

    PERMIT = "Permit"
    DENY = "Deny"


class AppliedPolicy(BaseModel):
    """Summary of a policy that drove a decision."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    policy_id: UUID
    policy_name: str
    effect: PolicyEffect
    priority: int

    @classmethod
    def from_policy(cls, policy: Policy) -> "AppliedPolicy":
        return cls(
            policy_id=policy.id,
            policy_name=policy.name,
            effect=policy.effect,
            priority=policy.priority,
        )


class AuthorizationResult(BaseModel):
    """
    Caller-facing result of an access check.

    Serialized with camelCase keys:
        {"decision": "Permit", "reason": "...", "appliedPolicies": [...]}
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    decision: AuthorizationDecision = AuthorizationDecision.DENY
    reason: str = ""
    applied_policies: list[AppliedPolicy] = Field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return self.decision == AuthorizationDecision.PERMIT
