"""Pydantic models for the quoting HTTP API.

Raw token amounts and X96/X128 fixed-point values are carried as decimal
strings; ticks are plain JSON integers.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from smartroute.constants import MAX_TICK, MIN_TICK
from smartroute.models.types import Address, DecimalAmount, Uint256
from smartroute.positions import Position, PositionView
from smartroute.routing.types import Hop, Quote, SmartQuoteResult


class QuoteRequest(BaseModel):
    """Exact-input swap to quote, with the amount as the user typed it."""

    input_asset: Address = Field(alias="inputAsset", description="Token sold; zero address for native")
    output_asset: Address = Field(alias="outputAsset", description="Token bought; zero address for native")
    amount_in: DecimalAmount = Field(alias="amountIn")
    decimals_in: int = Field(alias="decimalsIn", ge=0, le=77)
    v2_enabled: bool = Field(default=True, alias="v2Enabled")
    v3_enabled: bool = Field(default=True, alias="v3Enabled")
    client_id: str | None = Field(
        default=None,
        alias="clientId",
        max_length=128,
        description="Requests with the same id supersede each other; omitted means never superseded",
    )

    model_config = {"populate_by_name": True}


class HopModel(BaseModel):
    input_asset: Address = Field(alias="inputAsset")
    output_asset: Address = Field(alias="outputAsset")
    protocol: str
    fee: int | None = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_hop(cls, hop: Hop) -> HopModel:
        return cls(
            input_asset=hop.input_asset,
            output_asset=hop.output_asset,
            protocol=hop.protocol.value,
            fee=hop.fee,
        )


class QuoteModel(BaseModel):
    protocol: str
    output_amount: Uint256 = Field(alias="outputAmount")
    route: list[HopModel]
    price_impact: float = Field(alias="priceImpact", description="Estimated impact in percent")
    gas_estimate: Uint256 | None = Field(default=None, alias="gasEstimate")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: Quote) -> QuoteModel:
        return cls(
            protocol=quote.protocol.value,
            output_amount=str(quote.output_amount),
            route=[HopModel.from_hop(hop) for hop in quote.route.hops],
            price_impact=quote.price_impact,
            gas_estimate=None if quote.gas_estimate is None else str(quote.gas_estimate),
        )


class QuoteResponse(BaseModel):
    """Best quote plus the per-protocol quotes it was chosen from."""

    best_quote: QuoteModel = Field(alias="bestQuote")
    v2_quote: QuoteModel | None = Field(default=None, alias="v2Quote")
    v3_quote: QuoteModel | None = Field(default=None, alias="v3Quote")
    alternative_quotes: list[QuoteModel] = Field(default_factory=list, alias="alternativeQuotes")
    timestamp: float

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: SmartQuoteResult) -> QuoteResponse:
        return cls(
            best_quote=QuoteModel.from_quote(result.best_quote),
            v2_quote=None if result.v2_quote is None else QuoteModel.from_quote(result.v2_quote),
            v3_quote=None if result.v3_quote is None else QuoteModel.from_quote(result.v3_quote),
            alternative_quotes=[QuoteModel.from_quote(q) for q in result.alternative_quotes],
            timestamp=result.timestamp,
        )


class BlockNotification(BaseModel):
    block_number: int = Field(alias="blockNumber", ge=0)

    model_config = {"populate_by_name": True}


class BlockNotificationResponse(BaseModel):
    evicted: int


class _TickRangeModel(BaseModel):
    tick_lower: int = Field(alias="tickLower", ge=MIN_TICK, le=MAX_TICK)
    tick_upper: int = Field(alias="tickUpper", ge=MIN_TICK, le=MAX_TICK)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_order(self) -> _TickRangeModel:
        if self.tick_lower >= self.tick_upper:
            raise ValueError(f"tickLower ({self.tick_lower}) must be below tickUpper ({self.tick_upper})")
        return self


class PositionAmountsRequest(_TickRangeModel):
    """Liquidity and price to convert into token amounts."""

    liquidity: Uint256
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")


class PositionAmountsResponse(BaseModel):
    amount0: Uint256
    amount1: Uint256


class PositionFeesRequest(_TickRangeModel):
    """Fee growth counters of one token for an uncollected-fee computation.

    Call once per token of the pair.
    """

    liquidity: Uint256
    current_tick: int = Field(alias="currentTick", ge=MIN_TICK, le=MAX_TICK)
    fee_growth_global_x128: Uint256 = Field(alias="feeGrowthGlobalX128")
    fee_growth_outside_lower_x128: Uint256 = Field(alias="feeGrowthOutsideLowerX128")
    fee_growth_outside_upper_x128: Uint256 = Field(alias="feeGrowthOutsideUpperX128")
    fee_growth_inside_last_x128: Uint256 = Field(alias="feeGrowthInsideLastX128")
    tokens_owed: Uint256 = Field(default="0", alias="tokensOwed")


class PositionFeesResponse(BaseModel):
    unclaimed_fees: Uint256 = Field(alias="unclaimedFees")

    model_config = {"populate_by_name": True}


class OwnerPositionsResponse(BaseModel):
    """Position NFT ids held by one owner."""

    owner: Address
    token_ids: list[int] = Field(alias="tokenIds")

    model_config = {"populate_by_name": True}


class PositionResponse(BaseModel):
    """On-chain position with its current value."""

    token_id: int = Field(alias="tokenId")
    token0: Address
    token1: Address
    fee: int
    tick_lower: int = Field(alias="tickLower")
    tick_upper: int = Field(alias="tickUpper")
    liquidity: Uint256
    amount0: Uint256
    amount1: Uint256
    unclaimed_fees0: Uint256 = Field(alias="unclaimedFees0")
    unclaimed_fees1: Uint256 = Field(alias="unclaimedFees1")
    in_range: bool = Field(alias="inRange")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_view(cls, position: Position, view: PositionView) -> PositionResponse:
        return cls(
            token_id=position.token_id,
            token0=position.token0,
            token1=position.token1,
            fee=position.fee,
            tick_lower=position.tick_lower,
            tick_upper=position.tick_upper,
            liquidity=str(position.liquidity),
            amount0=str(view.amount0),
            amount1=str(view.amount1),
            unclaimed_fees0=str(view.unclaimed_fees0),
            unclaimed_fees1=str(view.unclaimed_fees1),
            in_range=view.in_range,
        )


__all__ = [
    "QuoteRequest",
    "HopModel",
    "QuoteModel",
    "QuoteResponse",
    "BlockNotification",
    "BlockNotificationResponse",
    "PositionAmountsRequest",
    "PositionAmountsResponse",
    "PositionFeesRequest",
    "PositionFeesResponse",
    "OwnerPositionsResponse",
    "PositionResponse",
]
