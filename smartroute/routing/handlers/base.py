"""Base class and protocol for per-protocol quote handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol as TypingProtocol
from typing import TypeVar

import structlog

from smartroute.exceptions import NoLiquidityError, QuoteCancelledError
from smartroute.routing.cancellation import CancellationToken
from smartroute.routing.types import Hop, Protocol, Quote, Route, SwapRequest

logger = structlog.get_logger()

T = TypeVar("T")


class QuoteHandler(TypingProtocol):
    """Protocol for per-AMM quote handlers.

    A handler explores every candidate route its protocol offers for one
    request and returns the best one, or None when no candidate produced a
    positive output. Failures of individual candidates never escape.
    """

    protocol: Protocol

    async def quote(
        self, request: SwapRequest, cancel: CancellationToken | None = None
    ) -> Quote | None:
        """Best quote for the request on this protocol.

        Raises:
            QuoteCancelledError: If the request is cancelled mid-flight
        """
        ...


class BaseHandler:
    """Shared handler utilities."""

    protocol: Protocol

    async def _try_candidate(
        self,
        call: Callable[[], Awaitable[T]],
        cancel: CancellationToken | None,
        **log_context: object,
    ) -> T | None:
        """Run one remote call, turning any failure into "no candidate".

        NoLiquidityError marks a candidate as excluded; any other error is a
        failed remote query. Cancellation is checked before the call and is
        the only error that propagates.
        """
        if cancel is not None:
            cancel.raise_if_cancelled()
        try:
            return await call()
        except QuoteCancelledError:
            raise
        except NoLiquidityError as e:
            logger.debug(
                "quote_candidate_excluded",
                protocol=self.protocol.value,
                reason=str(e),
                **log_context,
            )
            return None
        except Exception as e:
            logger.debug(
                "quote_candidate_failed",
                protocol=self.protocol.value,
                error=str(e),
                **log_context,
            )
            return None

    def _build_route(
        self,
        request: SwapRequest,
        tokens: Sequence[str],
        fees: Sequence[int | None] | None = None,
    ) -> Route:
        """Route over the pool-facing token path, shown with the caller's endpoints."""
        display = request.display_tokens(list(tokens))
        hop_fees = list(fees) if fees is not None else [None] * (len(display) - 1)
        return Route(
            tuple(
                Hop(display[i], display[i + 1], self.protocol, hop_fees[i])
                for i in range(len(display) - 1)
            )
        )


__all__ = ["QuoteHandler", "BaseHandler"]
