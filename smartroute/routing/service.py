"""Caller-facing quote service.

Sits in front of the engine and handles what belongs to a stream of
requests rather than to a single one: parsing the typed amount, debouncing
bursts, superseding stale requests, and caching results per block.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable

import structlog

from smartroute.amm.uniswap_v2 import Web3UniswapV2Quoter
from smartroute.amm.uniswap_v3 import Web3UniswapV3Quoter
from smartroute.chain import ChainReader, Web3ChainReader, make_async_web3
from smartroute.config import DEFAULT_ROUTING_CONFIG, RoutingConfig
from smartroute.exceptions import InvalidInputError
from smartroute.math.decimal_utils import parse_amount
from smartroute.routing.cache import CacheKey, QuoteCache, run_periodic_cleanup
from smartroute.routing.cancellation import CancellationToken
from smartroute.routing.engine import QuoteEngine
from smartroute.routing.handlers import UniswapV2Handler, UniswapV3Handler
from smartroute.routing.types import SmartQuoteResult

logger = structlog.get_logger()

# Caller key used when the service fronts a single interactive user
DEFAULT_CALLER = "default"


class QuoteService:
    """Debounced, cancellable, cached access to the quote engine.

    Each caller has at most one live quote() call. A new call from the same
    caller cancels that caller's previous request: the older awaiter gets
    QuoteCancelledError, and its result is neither cached nor published to
    latest_result. Requests from different callers run side by side and
    share only the cache.

    Args:
        engine: Engine doing the actual quoting
        cache: Result cache; a fresh one is created when omitted
        chain: Source of the block number cache entries are stamped with
        config: Debounce window and cache sweep interval
        sleep: Awaitable sleep, injectable for tests
    """

    def __init__(
        self,
        engine: QuoteEngine,
        cache: QuoteCache | None = None,
        chain: ChainReader | None = None,
        config: RoutingConfig = DEFAULT_ROUTING_CONFIG,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self.engine = engine
        self.cache = cache if cache is not None else QuoteCache(config.cache_ttl_seconds)
        self.chain = chain
        self.config = config
        self._sleep = sleep
        self._live: dict[Hashable, CancellationToken] = {}
        self._sweep_task: asyncio.Task[None] | None = None
        self.latest_result: SmartQuoteResult | None = None

    def _supersede(self, caller: Hashable) -> CancellationToken:
        previous = self._live.get(caller)
        if previous is not None:
            previous.cancel()
        token = CancellationToken()
        self._live[caller] = token
        return token

    def _release(self, caller: Hashable, token: CancellationToken) -> None:
        if self._live.get(caller) is token:
            del self._live[caller]

    async def _block_number(self) -> int | None:
        if self.chain is None:
            return None
        try:
            return await self.chain.get_block_number()
        except Exception as e:
            logger.warning("block_number_unavailable", error=str(e))
            return None

    def _publish(self, cancel: CancellationToken, result: SmartQuoteResult | None) -> None:
        cancel.raise_if_cancelled()
        self.latest_result = result

    async def quote(
        self,
        input_asset: str,
        output_asset: str,
        amount_in: str,
        decimals_in: int,
        v2_enabled: bool = True,
        v3_enabled: bool = True,
        caller: Hashable = DEFAULT_CALLER,
    ) -> SmartQuoteResult | None:
        """Quote an exact-input swap typed by a user.

        Args:
            input_asset: Token sold; the zero address means the native asset
            output_asset: Token bought
            amount_in: Amount in whole-token units, as typed ("1.5")
            decimals_in: Decimals of the input token
            v2_enabled: Query the constant-product AMM
            v3_enabled: Query the concentrated-liquidity AMM
            caller: Identifies whose earlier request this one supersedes

        Returns:
            SmartQuoteResult, or None for a zero amount or when no route exists

        Raises:
            InvalidInputError: For a malformed amount, same-asset swap or no
                enabled protocol
            QuoteCancelledError: If a newer quote() call from the same caller
                superseded this one
        """
        cancel = self._supersede(caller)
        try:
            return await self._quote(
                cancel, input_asset, output_asset, amount_in, decimals_in, v2_enabled, v3_enabled
            )
        finally:
            self._release(caller, cancel)

    async def _quote(
        self,
        cancel: CancellationToken,
        input_asset: str,
        output_asset: str,
        amount_in: str,
        decimals_in: int,
        v2_enabled: bool,
        v3_enabled: bool,
    ) -> SmartQuoteResult | None:
        raw_amount = parse_amount(amount_in, decimals_in)
        if raw_amount <= 0:
            self._publish(cancel, None)
            return None
        if not v2_enabled and not v3_enabled:
            raise InvalidInputError("At least one protocol must be enabled")
        self.engine.build_request(input_asset, output_asset, raw_amount)

        if self.config.debounce_seconds > 0:
            await self._sleep(self.config.debounce_seconds)
        cancel.raise_if_cancelled()

        key = CacheKey(input_asset, output_asset, amount_in, v2_enabled, v3_enabled)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("quote_cache_hit", input_asset=input_asset, output_asset=output_asset)
            self._publish(cancel, cached)
            return cached

        result = await self.engine.quote(
            input_asset,
            output_asset,
            raw_amount,
            v2_enabled=v2_enabled,
            v3_enabled=v3_enabled,
            cancel=cancel,
        )
        cancel.raise_if_cancelled()

        if result is not None:
            block_number = await self._block_number()
            cancel.raise_if_cancelled()
            self.cache.set(key, result, block_number)

        self._publish(cancel, result)
        return result

    def notify_new_block(self, block_number: int) -> int:
        """Forward a newly observed block to the cache.

        Returns:
            Number of cache entries evicted
        """
        return self.cache.on_new_block(block_number)

    def start(self) -> None:
        """Start the periodic cache sweep on the running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(
                run_periodic_cleanup(self.cache, self.config.cache_sweep_interval_seconds)
            )

    async def stop(self) -> None:
        """Stop the cache sweep and cancel every in-flight request."""
        for token in self._live.values():
            token.cancel("service stopped")
        self._live.clear()
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None


def create_service(config: RoutingConfig | None = None) -> QuoteService:
    """Wire a QuoteService to a JSON-RPC node using Web3 collaborators."""
    config = config if config is not None else RoutingConfig.from_env()
    w3 = make_async_web3(config.rpc_url)
    chain = Web3ChainReader(w3)

    engine = QuoteEngine(
        v2_handler=UniswapV2Handler(Web3UniswapV2Quoter(w3, config.v2_router_address)),
        v3_handler=UniswapV3Handler(
            Web3UniswapV3Quoter(w3, config.v3_quoter_address),
            chain=chain,
            quoter_address=config.v3_quoter_address,
            fee_tiers=config.fee_tiers,
            max_concurrent_calls=config.max_concurrent_calls,
        ),
        config=config,
    )
    return QuoteService(engine, chain=chain, config=config)


__all__ = ["DEFAULT_CALLER", "QuoteService", "create_service"]
