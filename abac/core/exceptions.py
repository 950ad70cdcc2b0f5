"""
Access control errors.

Only two conditions abort an evaluation: a missing (or soft-deleted)
subject/resource/action, and cooperative cancellation. Everything else
(unknown attribute source, missing key, failed coercion, unsupported
operator) resolves to a false condition and never surfaces as an error.
"""

from typing import Any


class AccessControlError(Exception):
    """Base class for failures that prevent a Permit/Deny decision."""


class NotFoundError(AccessControlError):
    """A subject, resource or action does not exist or is soft-deleted."""

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' was not found")


class EvaluationCancelledError(AccessControlError):
    """The caller cancelled the evaluation before a decision was reached."""

    def __init__(self, message: str = "Access evaluation was cancelled"):
        super().__init__(message)
