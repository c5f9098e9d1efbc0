"""Tests for position valuation and on-chain position reads."""

import asyncio

from smartroute.constants import Q96, Q128
from smartroute.math.liquidity_math import get_tokens_from_liquidity
from smartroute.math.tick_math import tick_to_sqrt_price_x96
from smartroute.positions import (
    PoolSnapshot,
    Position,
    PositionView,
    Web3PositionReader,
    compute_position_view,
)
from tests.helpers import USDC, WETH


def make_position(liquidity: int = 10**18, tokens_owed0: int = 3, tokens_owed1: int = 4) -> Position:
    return Position(
        token_id=1,
        token0=USDC,
        token1=WETH,
        fee=3000,
        tick_lower=-600,
        tick_upper=600,
        liquidity=liquidity,
        fee_growth_inside0_last_x128=0,
        fee_growth_inside1_last_x128=0,
        tokens_owed0=tokens_owed0,
        tokens_owed1=tokens_owed1,
    )


def make_snapshot(sqrt_price_x96: int = Q96, tick: int = 0) -> PoolSnapshot:
    return PoolSnapshot(
        sqrt_price_x96=sqrt_price_x96,
        tick=tick,
        fee_growth_global0_x128=10 * Q128 // 10**18,
        fee_growth_global1_x128=20 * Q128 // 10**18,
    )


class TestComputePositionView:
    def test_in_range_amounts_and_fees(self):
        position = make_position()

        view = compute_position_view(position, make_snapshot())

        assert (view.amount0, view.amount1) == get_tokens_from_liquidity(10**18, Q96, -600, 600)
        assert view.in_range
        # Growth inside equals global (outside counters zero); L * growth / Q128 floors
        assert view.unclaimed_fees0 == 3 + 10**18 * (10 * Q128 // 10**18) // Q128
        assert view.unclaimed_fees1 == 4 + 10**18 * (20 * Q128 // 10**18) // Q128
        assert 12 <= view.unclaimed_fees0 <= 13

    def test_zero_liquidity_reports_owed_only(self):
        view = compute_position_view(make_position(liquidity=0), make_snapshot())
        assert view == PositionView(0, 0, 3, 4, True)

    def test_uninitialised_price_treated_as_one(self):
        position = make_position()
        view = compute_position_view(position, make_snapshot(sqrt_price_x96=0))
        assert (view.amount0, view.amount1) == get_tokens_from_liquidity(10**18, Q96, -600, 600)

    def test_out_of_range(self):
        snapshot = make_snapshot(sqrt_price_x96=tick_to_sqrt_price_x96(1200), tick=1200)
        view = compute_position_view(make_position(), snapshot)

        assert not view.in_range
        assert view.amount0 == 0
        assert view.amount1 > 0

    def test_missing_pool(self):
        view = compute_position_view(make_position(), None)
        assert view == PositionView(0, 0, 3, 4, False)

    def test_tick_range(self):
        tick_range = make_position().tick_range
        assert (tick_range.lower, tick_range.upper) == (-600, 600)


class FakeCall:
    def __init__(self, value):
        self.value = value

    async def call(self):
        return self.value


class FakePositionManagerFunctions:
    """positions/balanceOf/tokenOfOwnerByIndex answered from memory."""

    def __init__(self, owned: list[int]):
        self.owned = owned

    def balanceOf(self, owner):
        return FakeCall(len(self.owned))

    def tokenOfOwnerByIndex(self, owner, index):
        return FakeCall(self.owned[index])

    def positions(self, token_id):
        return FakeCall(
            (0, "0x" + "00" * 20, USDC, WETH, 500, -60, 60, 10**12, 5, 6, 7, 8)
        )


class FakeContract:
    def __init__(self, functions):
        self.functions = functions


class FakeEth:
    def __init__(self, functions):
        self.functions = functions

    def contract(self, address, abi):
        return FakeContract(self.functions)


class FakeWeb3:
    def __init__(self, owned: list[int]):
        self.eth = FakeEth(FakePositionManagerFunctions(owned))


class TestWeb3PositionReader:
    def test_position_ids(self):
        reader = Web3PositionReader(FakeWeb3(owned=[11, 12]))

        assert asyncio.run(reader.position_ids(WETH)) == [11, 12]

    def test_position_ids_empty(self):
        reader = Web3PositionReader(FakeWeb3(owned=[]))

        assert asyncio.run(reader.position_ids(WETH)) == []

    def test_read_position(self):
        reader = Web3PositionReader(FakeWeb3(owned=[]))

        position = asyncio.run(reader.read_position(9))

        assert position == Position(
            token_id=9,
            token0=USDC,
            token1=WETH,
            fee=500,
            tick_lower=-60,
            tick_upper=60,
            liquidity=10**12,
            fee_growth_inside0_last_x128=5,
            fee_growth_inside1_last_x128=6,
            tokens_owed0=7,
            tokens_owed1=8,
        )
