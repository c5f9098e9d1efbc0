"""Tests for cross-protocol quote selection."""

import asyncio
from dataclasses import replace

import pytest

from smartroute.amm.uniswap_v2 import MockUniswapV2Quoter, UniswapV2Pool
from smartroute.amm.uniswap_v3 import MockUniswapV3Quoter
from smartroute.exceptions import InvalidInputError, QuoteCancelledError
from smartroute.routing.cancellation import CancellationToken
from smartroute.routing.engine import QuoteEngine, select_best, to_erc20_address
from smartroute.routing.handlers import UniswapV3Handler
from smartroute.routing.types import Protocol
from tests.helpers import DAI, ETH, ONE_USDC, TEST_CONFIG, USDC, WETH, make_engine, make_quote


class RaisingHandler:
    protocol = Protocol.V2

    def __init__(self):
        self.calls = 0

    async def quote(self, request, cancel=None):
        self.calls += 1
        raise ConnectionError("rpc down")


class SlowHandler:
    protocol = Protocol.V2

    async def quote(self, request, cancel=None):
        await asyncio.sleep(5)
        return make_quote(Protocol.V2, output_amount=10**30)


def run_quote(engine, input_asset=WETH, output_asset=USDC, amount_in=100, **kwargs):
    return asyncio.run(engine.quote(input_asset, output_asset, amount_in, **kwargs))


class TestSelectBest:
    def test_larger_output_wins(self):
        v2 = make_quote(Protocol.V2, output_amount=100)
        v3 = make_quote(Protocol.V3, output_amount=120)
        assert select_best(v2, v3) == (v3, (v2,))

    def test_v2_must_be_strictly_better(self):
        v2 = make_quote(Protocol.V2, output_amount=100)
        v3 = make_quote(Protocol.V3, output_amount=100)
        assert select_best(v2, v3) == (v3, (v2,))

    def test_v2_wins_when_larger(self):
        v2 = make_quote(Protocol.V2, output_amount=101)
        v3 = make_quote(Protocol.V3, output_amount=100)
        assert select_best(v2, v3) == (v2, (v3,))

    def test_single_protocol(self):
        v2 = make_quote(Protocol.V2)
        assert select_best(v2, None) == (v2, ())
        assert select_best(None, v2) == (v2, ())

    def test_nothing(self):
        assert select_best(None, None) is None


class TestToErc20Address:
    def test_native_is_wrapped(self):
        assert to_erc20_address(ETH, WETH) == WETH

    def test_erc20_unchanged(self):
        assert to_erc20_address(USDC, WETH) == USDC


class TestQuoteEngine:
    def test_v3_beats_v2(self):
        """V3 = 120 against V2 = 100: V3 is best, V2 is the alternative."""
        engine = make_engine(
            v2_quoter=MockUniswapV2Quoter(default_rate=(1, 1)),
            v3_quoter=MockUniswapV3Quoter(default_rate=(6, 5)),
        )

        result = run_quote(engine)

        assert result.best_quote.protocol == Protocol.V3
        assert result.best_quote.output_amount == 120
        assert result.v2_quote.output_amount == 100
        assert result.alternative_quotes == (result.v2_quote,)
        assert result.fallback_quote() == result.v2_quote

    def test_tie_goes_to_v3(self):
        engine = make_engine(
            v2_quoter=MockUniswapV2Quoter(default_rate=(1, 1)),
            v3_quoter=MockUniswapV3Quoter(default_rate=(1, 1)),
        )
        assert run_quote(engine).best_quote.protocol == Protocol.V3

    def test_v2_beats_v3(self):
        engine = make_engine(
            v2_quoter=MockUniswapV2Quoter(default_rate=(2, 1)),
            v3_quoter=MockUniswapV3Quoter(default_rate=(1, 1)),
        )
        result = run_quote(engine)
        assert result.best_quote.protocol == Protocol.V2
        assert result.alternative_quotes == (result.v3_quote,)

    def test_v3_without_pools_leaves_v2_alone(self, engine, v3_quoter):
        result = run_quote(engine)

        assert result.best_quote.protocol == Protocol.V2
        assert result.v3_quote is None
        assert result.alternative_quotes == ()
        # WETH is the intermediate, so only the single-hop tiers were tried
        assert len(v3_quoter.calls) == 5

    def test_no_route(self):
        assert run_quote(make_engine()) is None

    def test_timestamp_from_clock(self):
        engine = make_engine(v2_quoter=MockUniswapV2Quoter(default_rate=(1, 1)), clock=lambda: 42.0)
        assert run_quote(engine).timestamp == 42.0

    def test_failing_protocol_is_isolated(self):
        v3_quoter = MockUniswapV3Quoter(default_rate=(1, 1))
        engine = QuoteEngine(RaisingHandler(), UniswapV3Handler(v3_quoter), config=TEST_CONFIG)

        result = run_quote(engine)

        assert result.best_quote.protocol == Protocol.V3
        assert result.v2_quote is None
        assert result.alternative_quotes == ()

    def test_timed_out_protocol_is_isolated(self):
        config = replace(TEST_CONFIG, protocol_timeout_seconds=0.05)
        v3_quoter = MockUniswapV3Quoter(default_rate=(1, 1))
        engine = QuoteEngine(SlowHandler(), UniswapV3Handler(v3_quoter), config=config)

        result = run_quote(engine)

        assert result.best_quote.protocol == Protocol.V3
        assert result.v2_quote is None

    def test_disabled_protocol_not_queried(self):
        v2_handler = RaisingHandler()
        engine = QuoteEngine(
            v2_handler,
            UniswapV3Handler(MockUniswapV3Quoter(default_rate=(1, 1))),
            config=TEST_CONFIG,
        )

        result = run_quote(engine, v2_enabled=False)

        assert v2_handler.calls == 0
        assert result.v2_quote is None

    def test_v3_disabled(self):
        v3_quoter = MockUniswapV3Quoter(default_rate=(9, 1))
        engine = make_engine(v2_quoter=MockUniswapV2Quoter(default_rate=(1, 1)), v3_quoter=v3_quoter)

        result = run_quote(engine, v3_enabled=False)

        assert result.best_quote.protocol == Protocol.V2
        assert v3_quoter.calls == []

    def test_native_input_is_wrapped(self):
        v3_quoter = MockUniswapV3Quoter(default_rate=(1, 1))
        engine = make_engine(v3_quoter=v3_quoter)

        result = run_quote(engine, input_asset=ETH)

        assert all(call[1][0] == WETH for call in v3_quoter.calls)
        assert result.best_quote.route.tokens == [ETH, USDC]

    def test_cancelled_before_start(self):
        cancel = CancellationToken()
        cancel.cancel()
        engine = make_engine(v2_quoter=MockUniswapV2Quoter(default_rate=(1, 1)))

        with pytest.raises(QuoteCancelledError):
            run_quote(engine, cancel=cancel)

    def test_decimal_mismatch_scenario(self):
        """1000 of an 18-decimal token into a 1:1 pool of a 6-decimal token."""
        pool = UniswapV2Pool(
            address="0x" + "ab" * 20,
            token0=DAI,
            token1=USDC,
            reserve0=10**24,
            reserve1=10**12,
        )
        engine = make_engine(v2_quoter=MockUniswapV2Quoter(pools=[pool]))

        result = run_quote(engine, DAI, USDC, 1000 * 10**18, v3_enabled=False)

        output = result.best_quote.output_amount
        assert abs(output - 1000 * ONE_USDC) / (1000 * ONE_USDC) < 0.005
        assert result.best_quote.price_impact < 0.1


class TestQuoteEngineValidation:
    def test_both_disabled(self):
        with pytest.raises(InvalidInputError):
            run_quote(make_engine(), v2_enabled=False, v3_enabled=False)

    @pytest.mark.parametrize("amount", [0, -1])
    def test_non_positive_amount(self, amount):
        with pytest.raises(InvalidInputError):
            run_quote(make_engine(), amount_in=amount)

    def test_same_asset(self):
        with pytest.raises(InvalidInputError):
            run_quote(make_engine(), USDC, USDC)

    def test_same_asset_ignores_case(self):
        with pytest.raises(InvalidInputError):
            run_quote(make_engine(), USDC, USDC.upper().replace("0X", "0x"))

    def test_native_and_wrapped_are_the_same_asset(self):
        with pytest.raises(InvalidInputError):
            run_quote(make_engine(), ETH, WETH)

    def test_validation_before_any_remote_call(self):
        v2_quoter = MockUniswapV2Quoter(default_rate=(1, 1))
        with pytest.raises(InvalidInputError):
            run_quote(make_engine(v2_quoter=v2_quoter), USDC, USDC)
        assert v2_quoter.calls == []

    def test_build_request(self):
        request = make_engine().build_request(ETH, USDC, 10)
        assert request.token_in == WETH
        assert request.input_asset == ETH
        assert request.intermediate == WETH
        assert not request.hop_possible
