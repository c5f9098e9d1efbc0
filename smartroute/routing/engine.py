"""Smart routing: quote both AMM variants and pick the best.

Per request the engine validates input, maps the native asset to its
wrapped form, then runs the V2 and V3 handlers concurrently. A protocol
that fails or times out is logged and treated as "no quote"; it never
disturbs the other one. The larger output wins (V3 on a tie) and the other
quote is kept as the execution-time fallback.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import structlog

from smartroute.config import DEFAULT_ROUTING_CONFIG, RoutingConfig
from smartroute.constants import NATIVE_TOKEN_ADDRESS
from smartroute.exceptions import InvalidInputError, QuoteCancelledError, RemoteQueryError
from smartroute.models.types import normalize_address
from smartroute.routing.cancellation import CancellationToken
from smartroute.routing.handlers import QuoteHandler
from smartroute.routing.types import Protocol, Quote, SmartQuoteResult, SwapRequest

logger = structlog.get_logger()


def to_erc20_address(address: str, wrapped_token_address: str) -> str:
    """Replace the native (zero) address with the wrapped asset address."""
    if normalize_address(address) == NATIVE_TOKEN_ADDRESS:
        return wrapped_token_address
    return address


def select_best(v2_quote: Quote | None, v3_quote: Quote | None) -> tuple[Quote, tuple[Quote, ...]] | None:
    """Pick the best quote and the alternatives to keep.

    V2 must be strictly better to win; an equal output goes to V3.

    Returns:
        (best, alternatives), or None when neither protocol quoted
    """
    if v2_quote is not None and v3_quote is not None:
        if v2_quote.output_amount > v3_quote.output_amount:
            return v2_quote, (v3_quote,)
        return v3_quote, (v2_quote,)
    if v2_quote is not None:
        return v2_quote, ()
    if v3_quote is not None:
        return v3_quote, ()
    return None


class QuoteEngine:
    """Queries every enabled protocol and aggregates the results.

    Args:
        v2_handler: Handler for the constant-product AMM
        v3_handler: Handler for the concentrated-liquidity AMM
        config: Intermediate asset and per-protocol timeout
        clock: Wall-clock source for result timestamps
    """

    def __init__(
        self,
        v2_handler: QuoteHandler,
        v3_handler: QuoteHandler,
        config: RoutingConfig = DEFAULT_ROUTING_CONFIG,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.v2_handler = v2_handler
        self.v3_handler = v3_handler
        self.config = config
        self.clock = clock

    def build_request(self, input_asset: str, output_asset: str, amount_in: int) -> SwapRequest:
        """Validate a swap and resolve the addresses sent to the pools.

        Raises:
            InvalidInputError: For a non-positive amount or a same-asset swap
        """
        if amount_in <= 0:
            raise InvalidInputError(f"Amount in must be positive, got {amount_in}")

        wrapped = self.config.wrapped_token_address
        token_in = to_erc20_address(input_asset, wrapped)
        token_out = to_erc20_address(output_asset, wrapped)
        if normalize_address(token_in) == normalize_address(token_out):
            raise InvalidInputError(f"Cannot swap {input_asset} for itself")

        return SwapRequest(
            input_asset=input_asset,
            output_asset=output_asset,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            intermediate=wrapped,
        )

    async def _run_protocol(
        self,
        protocol: Protocol,
        call: Callable[[], Awaitable[Quote | None]],
    ) -> Quote | None:
        timeout = self.config.protocol_timeout_seconds
        try:
            if timeout is None:
                return await call()
            return await asyncio.wait_for(call(), timeout=timeout)
        except QuoteCancelledError:
            raise
        except TimeoutError as e:
            raise RemoteQueryError(protocol.value, f"timed out after {timeout}s") from e
        except Exception as e:
            raise RemoteQueryError(protocol.value, str(e)) from e

    async def quote(
        self,
        input_asset: str,
        output_asset: str,
        amount_in: int,
        v2_enabled: bool = True,
        v3_enabled: bool = True,
        cancel: CancellationToken | None = None,
    ) -> SmartQuoteResult | None:
        """Best quote across the enabled protocols.

        Args:
            input_asset: Token sold; the zero address means the native asset
            output_asset: Token bought; the zero address means the native asset
            amount_in: Raw input amount
            v2_enabled: Query the constant-product AMM
            v3_enabled: Query the concentrated-liquidity AMM
            cancel: Token checked before every remote call

        Returns:
            SmartQuoteResult, or None when no protocol produced a route

        Raises:
            InvalidInputError: Before any remote call, for invalid input
            QuoteCancelledError: If cancel fires while the request is in flight
        """
        if not v2_enabled and not v3_enabled:
            raise InvalidInputError("At least one protocol must be enabled")
        request = self.build_request(input_asset, output_asset, amount_in)

        if cancel is not None:
            cancel.raise_if_cancelled()

        async def disabled() -> Quote | None:
            return None

        tasks = [
            self._run_protocol(Protocol.V2, lambda: self.v2_handler.quote(request, cancel))
            if v2_enabled
            else disabled(),
            self._run_protocol(Protocol.V3, lambda: self.v3_handler.quote(request, cancel))
            if v3_enabled
            else disabled(),
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        quotes: list[Quote | None] = []
        for protocol, outcome in zip((Protocol.V2, Protocol.V3), outcomes):
            if isinstance(outcome, QuoteCancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning(
                    "protocol_query_failed",
                    protocol=protocol.value,
                    error=str(outcome),
                )
                quotes.append(None)
            else:
                quotes.append(outcome)

        if cancel is not None:
            cancel.raise_if_cancelled()

        v2_quote, v3_quote = quotes
        selection = select_best(v2_quote, v3_quote)
        if selection is None:
            logger.info(
                "no_route_found",
                token_in=request.token_in,
                token_out=request.token_out,
                amount_in=amount_in,
            )
            return None

        best, alternatives = selection
        logger.info(
            "smart_route_selected",
            protocol=best.protocol.value,
            output_amount=best.output_amount,
            hops=len(best.route.hops),
            price_impact=best.price_impact,
            alternatives=len(alternatives),
        )
        return SmartQuoteResult(
            best_quote=best,
            v2_quote=v2_quote,
            v3_quote=v3_quote,
            alternative_quotes=alternatives,
            timestamp=self.clock(),
        )


__all__ = ["to_erc20_address", "select_best", "QuoteEngine"]
