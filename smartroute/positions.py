"""Concentrated-liquidity position view: current amounts and uncollected fees.

A position NFT records its range, liquidity and the fee growth checkpoint
taken at its last update. Combining that with the pool's current price and
fee growth counters gives what the position would return if closed now.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog
from web3 import AsyncWeb3

from smartroute.amm.uniswap_v3.constants import (
    NONFUNGIBLE_POSITION_MANAGER_ADDRESS,
    V3_FACTORY_ADDRESS,
)
from smartroute.constants import NATIVE_TOKEN_ADDRESS, Q96
from smartroute.math.fee_math import compute_unclaimed_fees
from smartroute.math.liquidity_math import compute_position_amounts
from smartroute.math.tick_math import TickRange, is_position_in_range, sort_tokens
from smartroute.models.types import normalize_address

logger = structlog.get_logger()


@dataclass(frozen=True)
class Position:
    """State of a position NFT as stored by the position manager."""

    token_id: int
    token0: str
    token1: str
    fee: int
    tick_lower: int
    tick_upper: int
    liquidity: int
    fee_growth_inside0_last_x128: int = 0
    fee_growth_inside1_last_x128: int = 0
    tokens_owed0: int = 0
    tokens_owed1: int = 0

    @property
    def tick_range(self) -> TickRange:
        return TickRange(self.tick_lower, self.tick_upper)


@dataclass(frozen=True)
class PoolSnapshot:
    """Pool state needed to value a position.

    fee_growth_outside values are read from the position's two boundary
    ticks.
    """

    sqrt_price_x96: int
    tick: int
    fee_growth_global0_x128: int
    fee_growth_global1_x128: int
    lower_fee_growth_outside0_x128: int = 0
    lower_fee_growth_outside1_x128: int = 0
    upper_fee_growth_outside0_x128: int = 0
    upper_fee_growth_outside1_x128: int = 0


@dataclass(frozen=True)
class PositionView:
    amount0: int
    amount1: int
    unclaimed_fees0: int
    unclaimed_fees1: int
    in_range: bool


def compute_position_view(position: Position, snapshot: PoolSnapshot | None) -> PositionView:
    """Current amounts and uncollected fees of a position.

    Without a pool snapshot only the already-checkpointed tokens owed are
    known. An uninitialised pool (sqrt price 0) is valued at a 1:1 price.
    Fees beyond the checkpoint accrue only while liquidity is non-zero.
    """
    if snapshot is None:
        return PositionView(0, 0, position.tokens_owed0, position.tokens_owed1, False)

    sqrt_price = snapshot.sqrt_price_x96 or Q96
    amount0, amount1 = compute_position_amounts(
        position.liquidity, sqrt_price, position.tick_range
    )

    fees0, fees1 = position.tokens_owed0, position.tokens_owed1
    if position.liquidity > 0:
        fees0 = compute_unclaimed_fees(
            position.liquidity,
            snapshot.fee_growth_global0_x128,
            snapshot.lower_fee_growth_outside0_x128,
            snapshot.upper_fee_growth_outside0_x128,
            snapshot.tick,
            position.tick_lower,
            position.tick_upper,
            position.fee_growth_inside0_last_x128,
            position.tokens_owed0,
        )
        fees1 = compute_unclaimed_fees(
            position.liquidity,
            snapshot.fee_growth_global1_x128,
            snapshot.lower_fee_growth_outside1_x128,
            snapshot.upper_fee_growth_outside1_x128,
            snapshot.tick,
            position.tick_lower,
            position.tick_upper,
            position.fee_growth_inside1_last_x128,
            position.tokens_owed1,
        )

    return PositionView(
        amount0=amount0,
        amount1=amount1,
        unclaimed_fees0=fees0,
        unclaimed_fees1=fees1,
        in_range=is_position_in_range(snapshot.tick, position.tick_lower, position.tick_upper),
    )


# Minimal ABIs - just the functions we need
POSITION_MANAGER_ABI = [
    {
        "name": "positions",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [
            {"name": "nonce", "type": "uint96"},
            {"name": "operator", "type": "address"},
            {"name": "token0", "type": "address"},
            {"name": "token1", "type": "address"},
            {"name": "fee", "type": "uint24"},
            {"name": "tickLower", "type": "int24"},
            {"name": "tickUpper", "type": "int24"},
            {"name": "liquidity", "type": "uint128"},
            {"name": "feeGrowthInside0LastX128", "type": "uint256"},
            {"name": "feeGrowthInside1LastX128", "type": "uint256"},
            {"name": "tokensOwed0", "type": "uint128"},
            {"name": "tokensOwed1", "type": "uint128"},
        ],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "tokenOfOwnerByIndex",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "index", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

V3_FACTORY_ABI = [
    {
        "name": "getPool",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
            {"name": "fee", "type": "uint24"},
        ],
        "outputs": [{"name": "pool", "type": "address"}],
    },
]

V3_POOL_ABI = [
    {
        "name": "slot0",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "sqrtPriceX96", "type": "uint160"},
            {"name": "tick", "type": "int24"},
            {"name": "observationIndex", "type": "uint16"},
            {"name": "observationCardinality", "type": "uint16"},
            {"name": "observationCardinalityNext", "type": "uint16"},
            {"name": "feeProtocol", "type": "uint8"},
            {"name": "unlocked", "type": "bool"},
        ],
    },
    {
        "name": "feeGrowthGlobal0X128",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "feeGrowthGlobal1X128",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "ticks",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "tick", "type": "int24"}],
        "outputs": [
            {"name": "liquidityGross", "type": "uint128"},
            {"name": "liquidityNet", "type": "int128"},
            {"name": "feeGrowthOutside0X128", "type": "uint256"},
            {"name": "feeGrowthOutside1X128", "type": "uint256"},
            {"name": "tickCumulativeOutside", "type": "int56"},
            {"name": "secondsPerLiquidityOutsideX128", "type": "uint160"},
            {"name": "secondsOutside", "type": "uint32"},
            {"name": "initialized", "type": "bool"},
        ],
    },
]


class Web3PositionReader:
    """Reads positions and pool state through an AsyncWeb3 connection."""

    def __init__(
        self,
        w3: AsyncWeb3,
        position_manager_address: str = NONFUNGIBLE_POSITION_MANAGER_ADDRESS,
        factory_address: str = V3_FACTORY_ADDRESS,
    ):
        self.w3 = w3
        self.position_manager = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(position_manager_address),
            abi=POSITION_MANAGER_ABI,
        )
        self.factory = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(factory_address),
            abi=V3_FACTORY_ABI,
        )

    async def position_ids(self, owner: str) -> list[int]:
        """Token ids of every position NFT held by owner."""
        owner_checksum = AsyncWeb3.to_checksum_address(owner)
        balance = await self.position_manager.functions.balanceOf(owner_checksum).call()
        return [
            int(await self.position_manager.functions.tokenOfOwnerByIndex(owner_checksum, i).call())
            for i in range(int(balance))
        ]

    async def read_position(self, token_id: int) -> Position:
        raw = await self.position_manager.functions.positions(token_id).call()
        return Position(
            token_id=token_id,
            token0=normalize_address(raw[2]),
            token1=normalize_address(raw[3]),
            fee=int(raw[4]),
            tick_lower=int(raw[5]),
            tick_upper=int(raw[6]),
            liquidity=int(raw[7]),
            fee_growth_inside0_last_x128=int(raw[8]),
            fee_growth_inside1_last_x128=int(raw[9]),
            tokens_owed0=int(raw[10]),
            tokens_owed1=int(raw[11]),
        )

    async def read_pool_snapshot(self, position: Position) -> PoolSnapshot | None:
        """Pool state for the position's pair and fee, or None if no pool exists."""
        token_a, token_b = sort_tokens(position.token0, position.token1)
        pool_address = await self.factory.functions.getPool(
            AsyncWeb3.to_checksum_address(token_a),
            AsyncWeb3.to_checksum_address(token_b),
            position.fee,
        ).call()
        if not pool_address or normalize_address(pool_address) == NATIVE_TOKEN_ADDRESS:
            logger.warning(
                "v3_pool_not_found",
                token0=position.token0,
                token1=position.token1,
                fee=position.fee,
            )
            return None

        pool = self.w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(pool_address), abi=V3_POOL_ABI
        )
        slot0, global0, global1, lower, upper = await asyncio.gather(
            pool.functions.slot0().call(),
            pool.functions.feeGrowthGlobal0X128().call(),
            pool.functions.feeGrowthGlobal1X128().call(),
            pool.functions.ticks(position.tick_lower).call(),
            pool.functions.ticks(position.tick_upper).call(),
        )
        return PoolSnapshot(
            sqrt_price_x96=int(slot0[0]),
            tick=int(slot0[1]),
            fee_growth_global0_x128=int(global0),
            fee_growth_global1_x128=int(global1),
            lower_fee_growth_outside0_x128=int(lower[2]),
            lower_fee_growth_outside1_x128=int(lower[3]),
            upper_fee_growth_outside0_x128=int(upper[2]),
            upper_fee_growth_outside1_x128=int(upper[3]),
        )

    async def position_view(self, token_id: int) -> tuple[Position, PositionView]:
        position = await self.read_position(token_id)
        snapshot = await self.read_pool_snapshot(position)
        return position, compute_position_view(position, snapshot)


__all__ = [
    "Position",
    "PoolSnapshot",
    "PositionView",
    "compute_position_view",
    "POSITION_MANAGER_ABI",
    "V3_FACTORY_ABI",
    "V3_POOL_ABI",
    "Web3PositionReader",
]
