"""
Policy models - Policies, Conditions, and Action links.

A policy asserts an effect (Permit or Deny) when ALL of its conditions
hold. A policy without conditions never applies.

Usage:
    policy = Policy(
        name="Finance approvers",
        effect=PolicyEffect.PERMIT,
        priority=100,
        conditions=[
            PolicyCondition(
                attribute_source="Subject",
                attribute_key="department",
                operator=OperatorType.EQUALS,
                expected_value="finance",
            ),
        ],
        action_links=[PolicyAction(action=approve)],
    )
"""

from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, Enum as SAEnum, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .action import Action
from .base import Base, SoftDeleteMixin, StandardMixin


class PolicyEffect(str, Enum):
    """Outcome a policy asserts when its conditions hold."""

    PERMIT = "Permit"
    DENY = "Deny"


class OperatorType(str, Enum):
    """Comparison operator of a condition."""

    EQUALS = "Equals"
    NOT_EQUALS = "NotEquals"
    GREATER_THAN = "GreaterThan"
    LESS_THAN = "LessThan"
    CONTAINS = "Contains"
    IN = "In"
    NOT_IN = "NotIn"

    @classmethod
    def parse(cls, value: "str | OperatorType | None") -> "OperatorType | None":
        """Case-insensitive lookup; None for unknown operators."""
        if isinstance(value, cls):
            return value
        if not value:
            return None
        lowered = value.lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return None


class Policy(Base, StandardMixin, SoftDeleteMixin):
    """
    Access policy.

    Priority only breaks ties inside the winning effect group; it never
    overrides the combining strategy.
    """

    __tablename__ = "policies"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    effect: Mapped[PolicyEffect] = mapped_column(
        SAEnum(PolicyEffect, native_enum=False, length=10),
        nullable=False,
    )
    # Higher = more authoritative
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    conditions: Mapped[list["PolicyCondition"]] = relationship(
        "PolicyCondition",
        back_populates="policy",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
    action_links: Mapped[list["PolicyAction"]] = relationship(
        "PolicyAction",
        back_populates="policy",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Policy {self.name} {self.effect.value} p={self.priority}>"


class PolicyCondition(Base, StandardMixin):
    """
    Single condition of a policy.

    attribute_source and operator are stored as text and parsed
    case-insensitively at evaluation time; unknown values make the
    condition unmatchable. Operands for In/NotIn are comma separated.
    """

    __tablename__ = "policy_conditions"

    policy_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("policies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Subject | Resource | Environment | Action
    attribute_source: Mapped[str] = mapped_column(String(20), nullable=False)
    attribute_key: Mapped[str] = mapped_column(String(100), nullable=False)
    operator: Mapped[str] = mapped_column(String(20), nullable=False)
    expected_value: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    policy: Mapped["Policy"] = relationship("Policy", back_populates="conditions")

    def __repr__(self) -> str:
        return (
            f"<PolicyCondition {self.attribute_source}.{self.attribute_key} "
            f"{self.operator} {self.expected_value!r}>"
        )


class PolicyAction(Base, StandardMixin):
    """Link between a policy and an action it governs."""

    __tablename__ = "policy_actions"
    __table_args__ = (
        UniqueConstraint("policy_id", "action_id", name="uq_policy_action"),
    )

    policy_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("policies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("actions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    policy: Mapped["Policy"] = relationship("Policy", back_populates="action_links")
    action: Mapped[Action] = relationship(Action, lazy="selectin")

    def __repr__(self) -> str:
        return f"<PolicyAction policy={self.policy_id} action={self.action_id}>"
