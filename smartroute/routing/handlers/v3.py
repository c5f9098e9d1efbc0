"""UniswapV3 quote handler."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from smartroute.amm.uniswap_v3 import UniswapV3Quoter, V3QuoteResult, encode_path
from smartroute.amm.uniswap_v3.constants import QUOTER_V2_ADDRESS, V3_FEE_TIERS
from smartroute.chain import ChainReader
from smartroute.exceptions import NoLiquidityError, QuoteCancelledError
from smartroute.routing.cancellation import CancellationToken
from smartroute.routing.handlers.base import BaseHandler
from smartroute.routing.price_impact import probe_price_impact
from smartroute.routing.types import Protocol, Quote, SwapRequest

logger = structlog.get_logger()


@dataclass(frozen=True)
class _Candidate:
    """One fee-tier combination to probe."""

    tokens: tuple[str, ...]
    fees: tuple[int, ...]

    @property
    def is_multihop(self) -> bool:
        return len(self.fees) > 1


class UniswapV3Handler(BaseHandler):
    """Quotes a swap through the V3 QuoterV2.

    Candidates, in enumeration order: a single-hop quote for every fee tier,
    then, when neither endpoint is the intermediate asset, every
    (fee1, fee2) pair routed through it as an encoded path. All candidates
    are probed concurrently, bounded by max_concurrent_calls. The first
    candidate with the strictly largest positive output wins.
    """

    protocol = Protocol.V3

    def __init__(
        self,
        quoter: UniswapV3Quoter,
        chain: ChainReader | None = None,
        quoter_address: str = QUOTER_V2_ADDRESS,
        fee_tiers: Sequence[int] = V3_FEE_TIERS,
        max_concurrent_calls: int = 8,
    ) -> None:
        """Initialize the V3 handler.

        Args:
            quoter: QuoterV2 client
            chain: Used to check the quoter is deployed; None skips the check
            quoter_address: Address checked for code
            fee_tiers: Fee tiers to probe
            max_concurrent_calls: Upper bound on in-flight quoter calls
        """
        self.quoter = quoter
        self.chain = chain
        self.quoter_address = quoter_address
        self.fee_tiers = tuple(fee_tiers)
        self.max_concurrent_calls = max_concurrent_calls

    async def _quoter_deployed(self) -> bool:
        """False only when the node positively reports no code at the quoter.

        A failing lookup is not conclusive; quoting proceeds and the quoter
        calls themselves will fail if the contract is really absent.
        """
        if self.chain is None:
            return True
        try:
            code = await self.chain.get_code(self.quoter_address)
        except QuoteCancelledError:
            raise
        except Exception as e:
            logger.warning(
                "v3_quoter_code_check_failed", quoter=self.quoter_address, error=str(e)
            )
            return True

        if not code:
            logger.warning("v3_quoter_not_deployed", quoter=self.quoter_address)
            return False
        return True

    def _candidates(self, request: SwapRequest) -> list[_Candidate]:
        candidates = [
            _Candidate((request.token_in, request.token_out), (fee,)) for fee in self.fee_tiers
        ]
        if request.hop_possible:
            tokens = (request.token_in, request.intermediate, request.token_out)
            candidates.extend(
                _Candidate(tokens, (fee1, fee2))
                for fee1, fee2 in itertools.product(self.fee_tiers, repeat=2)
            )
        return candidates

    async def _quote_candidate(
        self,
        candidate: _Candidate,
        amount_in: int,
        cancel: CancellationToken | None,
    ) -> V3QuoteResult | None:
        async def call() -> V3QuoteResult:
            if candidate.is_multihop:
                path = encode_path(candidate.tokens, candidate.fees)
                result = await self.quoter.quote_exact_input(path, amount_in)
            else:
                result = await self.quoter.quote_exact_input_single(
                    candidate.tokens[0], candidate.tokens[1], candidate.fees[0], amount_in
                )
            if result is None or result.amount_out <= 0:
                raise NoLiquidityError(f"No V3 liquidity for fees {candidate.fees}")
            return result

        return await self._try_candidate(call, cancel, fees=candidate.fees, amount_in=amount_in)

    async def quote(
        self, request: SwapRequest, cancel: CancellationToken | None = None
    ) -> Quote | None:
        if cancel is not None:
            cancel.raise_if_cancelled()
        if not await self._quoter_deployed():
            return None

        candidates = self._candidates(request)
        semaphore = asyncio.Semaphore(self.max_concurrent_calls)

        async def bounded(candidate: _Candidate) -> V3QuoteResult | None:
            async with semaphore:
                return await self._quote_candidate(candidate, request.amount_in, cancel)

        results = await asyncio.gather(
            *(bounded(c) for c in candidates), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

        best: tuple[_Candidate, V3QuoteResult] | None = None
        for candidate, result in zip(candidates, results):
            if result is None:
                continue
            if best is None or result.amount_out > best[1].amount_out:
                best = (candidate, result)

        if best is None:
            logger.debug("v3_no_route", token_in=request.token_in, token_out=request.token_out)
            return None

        chosen, chosen_result = best

        async def quote_half(half: int) -> int | None:
            half_result = await self._quote_candidate(chosen, half, cancel)
            return None if half_result is None else half_result.amount_out

        price_impact = await probe_price_impact(
            request.amount_in,
            chosen_result.amount_out,
            quote_half,
            protocol=self.protocol.value,
            fees=chosen.fees,
        )

        return Quote(
            protocol=self.protocol,
            output_amount=chosen_result.amount_out,
            route=self._build_route(request, chosen.tokens, chosen.fees),
            price_impact=price_impact,
            gas_estimate=chosen_result.gas_estimate,
        )


__all__ = ["UniswapV3Handler"]
