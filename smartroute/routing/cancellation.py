"""Cooperative cancellation for in-flight quote requests."""

from __future__ import annotations

from smartroute.exceptions import QuoteCancelledError


class CancellationToken:
    """Advisory stop signal shared by every task of one quote request.

    Remote calls already in flight are allowed to finish; the token is
    checked before each new call and before a result is published.
    """

    __slots__ = ("_cancelled", "reason")

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "superseded") -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self) -> None:
        """Stop the current request if it has been cancelled.

        Raises:
            QuoteCancelledError: If cancel() has been called
        """
        if self._cancelled:
            raise QuoteCancelledError(self.reason or "cancelled")


__all__ = ["CancellationToken"]
