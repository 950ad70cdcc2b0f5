"""
Attribute-based access control engine.

Usage:
    from abac.core.access import AccessControlService, EvaluationContext, PolicyEvaluator
"""

from .coercion import AttributeValue, coerce_raw_value, normalize_value
from .collector import AttributeCollector
from .conditions import ConditionEvaluator
from .context import AttributeMap, AttributeSource, EvaluationContext
from .interfaces import (
    AccessCheckOutcome,
    AuditSink,
    IdentitySource,
    PolicyEvaluation,
    PolicySource,
)
from .policy import CombiningStrategy, PolicyEvaluator
from .service import AccessControlService

__all__ = [
    "AccessCheckOutcome",
    "AccessControlService",
    "AttributeCollector",
    "AttributeMap",
    "AttributeSource",
    "AttributeValue",
    "AuditSink",
    "CombiningStrategy",
    "ConditionEvaluator",
    "EvaluationContext",
    "IdentitySource",
    "PolicyEvaluation",
    "PolicyEvaluator",
    "PolicySource",
    "coerce_raw_value",
    "normalize_value",
]
