"""Type definitions for routing module."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from smartroute.exceptions import InvalidInputError
from smartroute.models.types import normalize_address

# Results older than this should be re-quoted before execution
MAX_QUOTE_AGE_SECONDS = 30.0


class Protocol(str, Enum):
    """AMM variant a quote was obtained from."""

    V2 = "V2"
    V3 = "V3"


@dataclass(frozen=True)
class SwapRequest:
    """A validated exact-input swap to quote.

    input_asset/output_asset are what the caller asked for and are what
    routes display; token_in/token_out are the ERC20 addresses actually sent
    to the pools (the native asset replaced by its wrapped form).
    """

    input_asset: str
    output_asset: str
    token_in: str
    token_out: str
    amount_in: int
    intermediate: str

    @property
    def hop_possible(self) -> bool:
        """Whether a two-hop route through the intermediate asset makes sense."""
        hub = normalize_address(self.intermediate)
        return hub not in (normalize_address(self.token_in), normalize_address(self.token_out))

    def display_tokens(self, tokens: list[str]) -> list[str]:
        """Pool-facing token path with the caller's endpoints restored."""
        return [self.input_asset, *tokens[1:-1], self.output_asset]


@dataclass(frozen=True)
class Hop:
    """One leg of a route."""

    input_asset: str
    output_asset: str
    protocol: Protocol
    # V3 fee tier; None for V2 hops
    fee: int | None = None


@dataclass(frozen=True)
class Route:
    """Ordered hops where each hop's output is the next hop's input."""

    hops: tuple[Hop, ...]

    def __post_init__(self) -> None:
        if not self.hops:
            raise InvalidInputError("Route needs at least one hop")
        for prev, nxt in zip(self.hops, self.hops[1:]):
            if normalize_address(prev.output_asset) != normalize_address(nxt.input_asset):
                raise InvalidInputError(
                    f"Route is not contiguous: {prev.output_asset} -> {nxt.input_asset}"
                )

    @property
    def tokens(self) -> list[str]:
        """Assets visited, from input to output."""
        return [self.hops[0].input_asset] + [hop.output_asset for hop in self.hops]

    @property
    def is_multihop(self) -> bool:
        return len(self.hops) > 1


@dataclass(frozen=True)
class Quote:
    """A quoted swap along one route.

    Attributes:
        protocol: AMM variant of every hop
        output_amount: Raw output amount for the requested input
        route: Hops taken
        price_impact: Half-amount probe estimate, in percent
        gas_estimate: Quoter-reported gas, when the protocol provides it
    """

    protocol: Protocol
    output_amount: int
    route: Route
    price_impact: float
    gas_estimate: int | None = None

    def min_amount_out(self, slippage_percent: float) -> int:
        """Output floor for execution at the given slippage tolerance."""
        slippage_bps = math.floor(slippage_percent * 100)
        return self.output_amount * (10000 - slippage_bps) // 10000


@dataclass(frozen=True)
class SmartQuoteResult:
    """Best quote across protocols plus what to fall back on.

    Attributes:
        best_quote: Largest output among the protocols that answered
        v2_quote: The V2 quote, if V2 answered
        v3_quote: The V3 quote, if V3 answered
        alternative_quotes: Quotes to retry with if executing best_quote fails
        timestamp: Wall-clock capture time in seconds
    """

    best_quote: Quote
    v2_quote: Quote | None = None
    v3_quote: Quote | None = None
    alternative_quotes: tuple[Quote, ...] = field(default_factory=tuple)
    timestamp: float = 0.0

    def is_stale(self, now: float, max_age_seconds: float = MAX_QUOTE_AGE_SECONDS) -> bool:
        """Whether the quote is too old to execute against."""
        return now - self.timestamp > max_age_seconds

    def fallback_quote(self) -> Quote | None:
        """First alternative from a different protocol than the best quote."""
        for quote in self.alternative_quotes:
            if quote.protocol != self.best_quote.protocol:
                return quote
        return None


__all__ = [
    "MAX_QUOTE_AGE_SECONDS",
    "Protocol",
    "SwapRequest",
    "Hop",
    "Route",
    "Quote",
    "SmartQuoteResult",
]
