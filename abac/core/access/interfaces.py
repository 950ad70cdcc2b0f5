"""
Access control interfaces - collaborator contracts and evaluation results.

The decision engine depends ONLY on these abstractions. The SQL-backed
implementations live in abac.repositories and abac.services; tests use
in-memory fakes.

Collaborators:
- PolicySource: active policies (with conditions and action links)
- IdentitySource: users, user attribute assignments, resources, actions
- AuditSink: receives one record per decision
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from abac.core.exceptions import AccessControlError
from abac.models import Action, Policy, Resource, User, UserAttribute

if TYPE_CHECKING:
    from abac.schemas.access import AuthorizationResult

    from .policy import CombiningStrategy


# ============================================================
# COLLABORATORS
# ============================================================

class PolicySource(ABC):
    """Read access to the current policy set."""

    @abstractmethod
    async def get_active_policies_for_action(self, action_id: UUID) -> Sequence[Policy]:
        """Active policies linked to an action, highest priority first."""
        pass

    @abstractmethod
    async def get_active_policies(self) -> Sequence[Policy]:
        """All active policies, highest priority first."""
        pass


class IdentitySource(ABC):
    """Read access to subjects, resources and actions."""

    @abstractmethod
    async def get_user_by_id(self, user_id: UUID) -> User | None:
        pass

    @abstractmethod
    async def get_active_user_attributes(
        self,
        user_id: UUID,
        as_of: datetime,
    ) -> Sequence[UserAttribute]:
        """Assignments whose validity window contains as_of."""
        pass

    @abstractmethod
    async def get_resource_with_attributes(self, resource_id: UUID) -> Resource | None:
        pass

    @abstractmethod
    async def get_action_by_id(self, action_id: UUID) -> Action | None:
        pass


class AuditSink(ABC):
    """Destination for access decision records."""

    @abstractmethod
    async def log_access_evaluation(
        self,
        *,
        user_id: UUID,
        resource_id: UUID | None = None,
        action_id: UUID | None = None,
        result: str,
        reason: str | None = None,
        policy_id: UUID | None = None,
        context: str | None = None,
        ip_address: str | None = None,
    ) -> Any:
        pass


# ============================================================
# RESULTS
# ============================================================

@dataclass
class PolicyEvaluation:
    """
    Outcome of the policy evaluation pipeline.

    Attributes:
        allowed: Final boolean decision
        strategy: Combining strategy that produced it
        candidate_count: Policies retrieved for the action
        applicable: Candidates whose conditions all held (retrieval order)
        decisive: Highest-priority applicable policy of the winning effect
        reason: Human-readable explanation (also sent to the audit sink)
    """
    allowed: bool
    strategy: "CombiningStrategy"
    candidate_count: int
    applicable: list[Policy] = field(default_factory=list)
    decisive: Policy | None = None
    reason: str = ""

    @property
    def decision_text(self) -> str:
        return "Permit" if self.allowed else "Deny"


@dataclass
class AccessCheckOutcome:
    """
    Result-or-error value returned by AccessControlService.try_check_access.

    Exactly one of result/error is set.

    Usage:
        outcome = await service.try_check_access(user_id, resource_id, action_id)
        if outcome.ok:
            outcome.result.decision
        elif isinstance(outcome.error, NotFoundError):
            ...
    """
    result: "AuthorizationResult | None" = None
    error: AccessControlError | None = None

    @classmethod
    def success(cls, result: "AuthorizationResult") -> "AccessCheckOutcome":
        return cls(result=result)

    @classmethod
    def failure(cls, error: AccessControlError) -> "AccessCheckOutcome":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> "AuthorizationResult":
        """Return the result or raise the stored error."""
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise ValueError("AccessCheckOutcome carries neither a result nor an error")
        return self.result
