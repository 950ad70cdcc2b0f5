"""
Database models.

Import all models here so Base.metadata knows every table.
"""

from .base import Base, SoftDeleteMixin, StandardMixin, TimestampMixin, UUIDMixin
from .attribute import Attribute, AttributeType
from .user import User, UserAttribute
from .resource import Resource, ResourceAttribute
from .action import Action
from .policy import OperatorType, Policy, PolicyAction, PolicyCondition, PolicyEffect
from .access_log import AccessLog

__all__ = [
    "Base",
    "SoftDeleteMixin",
    "StandardMixin",
    "TimestampMixin",
    "UUIDMixin",
    "Attribute",
    "AttributeType",
    "User",
    "UserAttribute",
    "Resource",
    "ResourceAttribute",
    "Action",
    "OperatorType",
    "Policy",
    "PolicyAction",
    "PolicyCondition",
    "PolicyEffect",
    "AccessLog",
]
