"""UniswapV2 quote handler."""

from __future__ import annotations

import asyncio

import structlog

from smartroute.amm.uniswap_v2 import UniswapV2Quoter
from smartroute.exceptions import NoLiquidityError
from smartroute.routing.cancellation import CancellationToken
from smartroute.routing.handlers.base import BaseHandler
from smartroute.routing.price_impact import probe_price_impact
from smartroute.routing.types import Protocol, Quote, SwapRequest

logger = structlog.get_logger()


class UniswapV2Handler(BaseHandler):
    """Quotes a swap through the V2 router.

    Two paths are tried independently: the direct pair, and a hop through
    the intermediate asset when neither endpoint already is it. The larger
    positive output wins; on a tie the direct path is kept.
    """

    protocol = Protocol.V2

    def __init__(self, quoter: UniswapV2Quoter) -> None:
        self.quoter = quoter

    async def _quote_path(
        self, path: list[str], amount_in: int, cancel: CancellationToken | None
    ) -> int | None:
        async def call() -> int:
            amounts = await self.quoter.get_amounts_out(amount_in, path)
            if not amounts or amounts[-1] <= 0:
                raise NoLiquidityError(f"No V2 liquidity along {path}")
            return amounts[-1]

        return await self._try_candidate(call, cancel, path=path, amount_in=amount_in)

    async def quote(
        self, request: SwapRequest, cancel: CancellationToken | None = None
    ) -> Quote | None:
        paths = [[request.token_in, request.token_out]]
        if request.hop_possible:
            paths.append([request.token_in, request.intermediate, request.token_out])

        outputs = await asyncio.gather(
            *(self._quote_path(path, request.amount_in, cancel) for path in paths)
        )

        best_path: list[str] | None = None
        best_output = 0
        for path, output in zip(paths, outputs):
            if output is not None and output > best_output:
                best_path, best_output = path, output

        if best_path is None:
            logger.debug("v2_no_route", token_in=request.token_in, token_out=request.token_out)
            return None

        chosen = best_path
        price_impact = await probe_price_impact(
            request.amount_in,
            best_output,
            lambda half: self._quote_path(chosen, half, cancel),
            protocol=self.protocol.value,
        )

        return Quote(
            protocol=self.protocol,
            output_amount=best_output,
            route=self._build_route(request, best_path),
            price_impact=price_impact,
        )


__all__ = ["UniswapV2Handler"]
