"""
Cooperative cancellation for access evaluations.

Usage:
    token = CancellationToken()
    task = asyncio.create_task(service.check_access(..., cancellation=token))
    token.cancel()  # next checkpoint raises EvaluationCancelledError
"""

from .exceptions import EvaluationCancelledError


class CancellationToken:
    """Flag checked at evaluation checkpoints."""

    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise EvaluationCancelledError()


def checkpoint(token: CancellationToken | None) -> None:
    """Raise if an optional token has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()
