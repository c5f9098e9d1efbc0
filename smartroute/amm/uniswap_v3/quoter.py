"""UniswapV3 quoter implementations for swap simulation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import structlog
from web3 import AsyncWeb3

from smartroute.models.types import normalize_address

from .constants import QUOTER_V2_ADDRESS
from .path import decode_path

logger = structlog.get_logger()


@dataclass(frozen=True)
class V3QuoteResult:
    """Output of a QuoterV2 call."""

    amount_out: int
    gas_estimate: int | None = None


class UniswapV3Quoter(Protocol):
    """Protocol for UniswapV3 quoter implementations.

    This allows swapping between real RPC-based quoter and mock quoter for testing.
    """

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> V3QuoteResult | None:
        """Get output amount for exact input through a single pool.

        Args:
            token_in: Input token address
            token_out: Output token address
            fee: Pool fee tier (e.g., 3000)
            amount_in: Input amount

        Returns:
            Quote result, or None if the pool is missing or the call fails
        """
        ...

    async def quote_exact_input(self, path: bytes, amount_in: int) -> V3QuoteResult | None:
        """Get output amount for exact input along an encoded multi-hop path.

        Args:
            path: Packed path from encode_path
            amount_in: Input amount

        Returns:
            Quote result, or None if any hop is missing or the call fails
        """
        ...


@dataclass
class QuoteKey:
    """Key for looking up quotes in MockUniswapV3Quoter."""

    token_in: str
    token_out: str
    fee: int
    amount: int

    def __hash__(self) -> int:
        return hash(
            (
                normalize_address(self.token_in),
                normalize_address(self.token_out),
                self.fee,
                self.amount,
            )
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuoteKey):
            return False
        return (
            normalize_address(self.token_in) == normalize_address(other.token_in)
            and normalize_address(self.token_out) == normalize_address(other.token_out)
            and self.fee == other.fee
            and self.amount == other.amount
        )


class MockUniswapV3Quoter:
    """Mock quoter for testing without RPC calls.

    Configure with expected quotes, and track calls for assertions. Multi-hop
    paths are quoted by chaining the single-hop lookups hop by hop, so one
    configuration serves both call styles.
    """

    def __init__(
        self,
        quotes: dict[QuoteKey, int] | None = None,
        rates: dict[tuple[str, str, int], tuple[int, int]] | None = None,
        default_rate: tuple[int, int] | None = None,
        gas_estimate: int = 100_000,
    ):
        """Initialize mock quoter.

        Args:
            quotes: Mapping of QuoteKey -> amount out for specific quotes
            rates: Mapping of (token_in, token_out, fee) -> (numerator, denominator),
                   a linear price for that pool
            default_rate: If set, (numerator, denominator) for any unconfigured pool.
                          amount_out = amount_in * num // denom
            gas_estimate: Gas reported per hop
        """
        self.quotes = quotes or {}
        self.rates = {
            (normalize_address(t_in), normalize_address(t_out), fee): rate
            for (t_in, t_out, fee), rate in (rates or {}).items()
        }
        self.default_rate = default_rate
        self.gas_estimate = gas_estimate
        self.calls: list[tuple[str, Any, int]] = []  # (method, target, amount)

    def _quote_hop(self, token_in: str, token_out: str, fee: int, amount_in: int) -> int | None:
        key = QuoteKey(token_in, token_out, fee, amount_in)
        if key in self.quotes:
            return self.quotes[key]

        rate = self.rates.get((normalize_address(token_in), normalize_address(token_out), fee))
        if rate is None:
            rate = self.default_rate
        if rate is None:
            return None

        num, denom = rate
        # Floor division for output amount (conservative for receiver)
        return amount_in * num // denom

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> V3QuoteResult | None:
        self.calls.append(("exact_input_single", (token_in, token_out, fee), amount_in))

        amount_out = self._quote_hop(token_in, token_out, fee, amount_in)
        if amount_out is None:
            return None
        return V3QuoteResult(amount_out, self.gas_estimate)

    async def quote_exact_input(self, path: bytes, amount_in: int) -> V3QuoteResult | None:
        self.calls.append(("exact_input", path, amount_in))

        tokens, fees = decode_path(path)
        amount = amount_in
        for i, fee in enumerate(fees):
            hop_out = self._quote_hop(tokens[i], tokens[i + 1], fee, amount)
            if hop_out is None:
                return None
            amount = hop_out
        return V3QuoteResult(amount, self.gas_estimate * len(fees))


# QuoterV2 ABI - minimal, just the functions we need
QUOTER_V2_ABI = [
    {
        "name": "quoteExactInputSingle",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "tokenIn", "type": "address"},
                    {"name": "tokenOut", "type": "address"},
                    {"name": "amountIn", "type": "uint256"},
                    {"name": "fee", "type": "uint24"},
                    {"name": "sqrtPriceLimitX96", "type": "uint160"},
                ],
            }
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96After", "type": "uint160"},
            {"name": "initializedTicksCrossed", "type": "uint32"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
    {
        "name": "quoteExactInput",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "path", "type": "bytes"},
            {"name": "amountIn", "type": "uint256"},
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96AfterList", "type": "uint160[]"},
            {"name": "initializedTicksCrossedList", "type": "uint32[]"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
]


class Web3UniswapV3Quoter:
    """Real quoter that calls the QuoterV2 contract via RPC.

    QuoterV2 functions are non-view (they revert internally to return data),
    so they are executed with eth_call rather than sent as transactions.
    """

    def __init__(self, w3: AsyncWeb3, quoter_address: str = QUOTER_V2_ADDRESS):
        """Initialize quoter.

        Args:
            w3: Async web3 connection
            quoter_address: QuoterV2 contract address
        """
        self.w3 = w3
        self.quoter_address = quoter_address
        self.quoter = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(quoter_address),
            abi=QUOTER_V2_ABI,
        )

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> V3QuoteResult | None:
        """Get output amount for exact input via RPC call."""
        try:
            result = await self.quoter.functions.quoteExactInputSingle(
                (
                    AsyncWeb3.to_checksum_address(token_in),
                    AsyncWeb3.to_checksum_address(token_out),
                    amount_in,
                    fee,
                    0,  # sqrtPriceLimitX96 = 0 means no limit
                )
            ).call()

            # Result is (amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate)
            return V3QuoteResult(int(result[0]), int(result[3]))
        except Exception as e:
            logger.debug(
                "v3_quote_exact_input_single_failed",
                token_in=token_in,
                token_out=token_out,
                fee=fee,
                amount_in=amount_in,
                error=str(e),
            )
            return None

    async def quote_exact_input(self, path: bytes, amount_in: int) -> V3QuoteResult | None:
        """Get output amount for an encoded path via RPC call."""
        try:
            result = await self.quoter.functions.quoteExactInput(path, amount_in).call()

            # Result is (amountOut, sqrtPriceX96AfterList, initializedTicksCrossedList, gasEstimate)
            return V3QuoteResult(int(result[0]), int(result[3]))
        except Exception as e:
            logger.debug(
                "v3_quote_exact_input_failed",
                path="0x" + path.hex(),
                amount_in=amount_in,
                error=str(e),
            )
            return None


__all__ = [
    "V3QuoteResult",
    "UniswapV3Quoter",
    "QuoteKey",
    "MockUniswapV3Quoter",
    "Web3UniswapV3Quoter",
    "QUOTER_V2_ABI",
]
