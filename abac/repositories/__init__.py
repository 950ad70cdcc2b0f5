"""Data access repositories."""

from .base import BaseRepository, SoftDeleteRepository
from .action import ActionRepository
from .identity import SqlIdentitySource
from .policy import PolicyRepository
from .resource import ResourceRepository
from .user import UserRepository

__all__ = [
    "BaseRepository",
    "SoftDeleteRepository",
    "ActionRepository",
    "PolicyRepository",
    "ResourceRepository",
    "SqlIdentitySource",
    "UserRepository",
]
