"""UniswapV2 constant-product pools and router quoters.

UniswapV2 uses the constant product formula: x * y = k
With a 0.3% fee on input amounts.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import structlog
from web3 import AsyncWeb3

from smartroute.models.types import normalize_address
from smartroute.safe_int import S

logger = structlog.get_logger()

# UniswapV2 Router02 address on mainnet
V2_ROUTER_ADDRESS = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = 9970,
) -> int:
    """Calculate output amount using constant product formula.

    Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee)

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: Fee multiplier (default 9970 for 0.3% fee, 9975 for 0.25%)

    Returns:
        Output token amount
    """
    if amount_in <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0

    amount_in_with_fee = S(amount_in) * S(fee_multiplier)
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) * S(10000) + amount_in_with_fee

    return (numerator // denominator).value


@dataclass
class UniswapV2Pool:
    """Represents a UniswapV2 liquidity pool."""

    address: str
    token0: str
    token1: str
    reserve0: int
    reserve1: int
    # Fee in basis points (30 = 0.3%)
    fee_bps: int = 30

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for AMM math (10000 - fee_bps)."""
        return 10000 - self.fee_bps

    def has_tokens(self, token_a: str, token_b: str) -> bool:
        pair = {normalize_address(self.token0), normalize_address(self.token1)}
        return {normalize_address(token_a), normalize_address(token_b)} == pair

    def get_reserves(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == normalize_address(self.token0):
            return self.reserve0, self.reserve1
        elif token_in_norm == normalize_address(self.token1):
            return self.reserve1, self.reserve0
        else:
            raise ValueError(f"Token {token_in} not in pool")

    def get_amount_out(self, token_in: str, amount_in: int) -> int:
        reserve_in, reserve_out = self.get_reserves(token_in)
        return get_amount_out(amount_in, reserve_in, reserve_out, self.fee_multiplier)


class UniswapV2Quoter(Protocol):
    """Protocol for UniswapV2 router quoters.

    This allows swapping between real RPC-based quoter and mock quoter for testing.
    """

    async def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int] | None:
        """Quote a swap along a token path, as Router02.getAmountsOut does.

        Args:
            amount_in: Input amount of path[0]
            path: Token addresses, at least two

        Returns:
            Amounts after each hop (the first entry is amount_in), or None if
            a pair is missing or the call fails
        """
        ...


class MockUniswapV2Quoter:
    """Mock router quoter for testing without RPC calls.

    Each hop is priced by a configured pool (constant product), else by a
    configured linear rate, else by default_rate. A hop with none of these
    fails the whole path, like a missing pair on the router.
    """

    def __init__(
        self,
        pools: Sequence[UniswapV2Pool] | None = None,
        rates: dict[tuple[str, str], tuple[int, int]] | None = None,
        default_rate: tuple[int, int] | None = None,
    ):
        """Initialize mock quoter.

        Args:
            pools: Pools with reserves, priced with the constant product formula
            rates: Mapping of (token_in, token_out) -> (numerator, denominator)
            default_rate: If set, (numerator, denominator) for any other hop
        """
        self.pools = list(pools or [])
        self.rates = {
            (normalize_address(t_in), normalize_address(t_out)): rate
            for (t_in, t_out), rate in (rates or {}).items()
        }
        self.default_rate = default_rate
        self.calls: list[tuple[int, tuple[str, ...]]] = []  # (amount_in, path)

    def _quote_hop(self, token_in: str, token_out: str, amount_in: int) -> int | None:
        for pool in self.pools:
            if pool.has_tokens(token_in, token_out):
                return pool.get_amount_out(token_in, amount_in)

        rate = self.rates.get((normalize_address(token_in), normalize_address(token_out)))
        if rate is None:
            rate = self.default_rate
        if rate is None:
            return None

        num, denom = rate
        return amount_in * num // denom

    async def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int] | None:
        self.calls.append((amount_in, tuple(path)))

        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            hop_out = self._quote_hop(token_in, token_out, amounts[-1])
            if hop_out is None:
                return None
            amounts.append(hop_out)
        return amounts


# Router02 ABI - minimal, just the functions we need
V2_ROUTER_ABI = [
    {
        "name": "getAmountsOut",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "amountIn", "type": "uint256"},
            {"name": "path", "type": "address[]"},
        ],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
    },
]


class Web3UniswapV2Quoter:
    """Real quoter that calls Router02.getAmountsOut via RPC."""

    def __init__(self, w3: AsyncWeb3, router_address: str = V2_ROUTER_ADDRESS):
        """Initialize quoter.

        Args:
            w3: Async web3 connection
            router_address: Router02 contract address
        """
        self.w3 = w3
        self.router = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(router_address),
            abi=V2_ROUTER_ABI,
        )

    async def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> list[int] | None:
        """Quote a path via RPC call."""
        try:
            amounts = await self.router.functions.getAmountsOut(
                amount_in,
                [AsyncWeb3.to_checksum_address(token) for token in path],
            ).call()
            return [int(amount) for amount in amounts]
        except Exception as e:
            logger.debug(
                "v2_get_amounts_out_failed",
                path=list(path),
                amount_in=amount_in,
                error=str(e),
            )
            return None


__all__ = [
    "V2_ROUTER_ADDRESS",
    "V2_ROUTER_ABI",
    "get_amount_out",
    "UniswapV2Pool",
    "UniswapV2Quoter",
    "MockUniswapV2Quoter",
    "Web3UniswapV2Quoter",
]
