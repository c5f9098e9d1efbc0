"""Error classes for quoting and routing.

Failures inside a single candidate (one fee tier, one path) are swallowed by
the engine and never reach the caller; only the classes below cross module
boundaries.
"""


class SmartRouteError(Exception):
    """Base error for smartroute operations."""

    pass


class InvalidInputError(SmartRouteError, ValueError):
    """Request rejected before any remote call.

    Raised for same-asset swaps, non-positive amounts, no enabled protocol,
    malformed paths and out-of-range ticks.
    """

    pass


class NoLiquidityError(SmartRouteError):
    """A protocol/fee-tier combination has no pool or quotes zero output."""

    pass


class RemoteQueryError(SmartRouteError):
    """The chain-query collaborator failed or timed out."""

    def __init__(self, protocol: str, reason: str) -> None:
        super().__init__(f"{protocol} query failed: {reason}")
        self.protocol = protocol
        self.reason = reason


class QuoteCancelledError(SmartRouteError):
    """The request was superseded by a newer one; its result is discarded."""

    pass


__all__ = [
    "SmartRouteError",
    "InvalidInputError",
    "NoLiquidityError",
    "RemoteQueryError",
    "QuoteCancelledError",
]
