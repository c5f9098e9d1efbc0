"""Tests for routing value types."""

import pytest

from smartroute.exceptions import InvalidInputError
from smartroute.routing.types import Hop, Protocol, Route, SmartQuoteResult, SwapRequest
from tests.helpers import DAI, ETH, USDC, WETH, make_quote


class TestRoute:
    def test_tokens(self):
        route = Route(
            (Hop(DAI, WETH, Protocol.V3, 500), Hop(WETH, USDC, Protocol.V3, 3000))
        )
        assert route.tokens == [DAI, WETH, USDC]
        assert route.is_multihop

    def test_single_hop(self):
        route = Route((Hop(WETH, USDC, Protocol.V2),))
        assert not route.is_multihop

    def test_empty_route_rejected(self):
        with pytest.raises(InvalidInputError):
            Route(())

    def test_non_contiguous_route_rejected(self):
        with pytest.raises(InvalidInputError):
            Route((Hop(DAI, WETH, Protocol.V2), Hop(USDC, DAI, Protocol.V2)))

    def test_contiguity_ignores_case(self):
        Route((Hop(DAI, WETH, Protocol.V2), Hop(WETH.upper().replace("0X", "0x"), USDC, Protocol.V2)))


class TestSwapRequest:
    def test_hop_possible(self):
        request = SwapRequest(DAI, USDC, DAI, USDC, 1, WETH)
        assert request.hop_possible

    def test_no_hop_from_intermediate(self):
        assert not SwapRequest(WETH, USDC, WETH, USDC, 1, WETH).hop_possible
        assert not SwapRequest(USDC, ETH, USDC, WETH, 1, WETH).hop_possible

    def test_display_tokens_restore_native(self):
        request = SwapRequest(ETH, USDC, WETH, USDC, 1, WETH)
        assert request.display_tokens([WETH, USDC]) == [ETH, USDC]


class TestQuote:
    def test_min_amount_out(self):
        quote = make_quote(output_amount=10_000)
        assert quote.min_amount_out(0.5) == 9_950
        assert quote.min_amount_out(0) == 10_000


class TestSmartQuoteResult:
    def test_is_stale(self):
        result = SmartQuoteResult(best_quote=make_quote(), timestamp=100.0)
        assert not result.is_stale(130.0)
        assert result.is_stale(130.1)
        assert result.is_stale(106.0, max_age_seconds=5.0)

    def test_fallback_quote(self):
        v2 = make_quote(Protocol.V2, output_amount=90)
        v3 = make_quote(Protocol.V3, output_amount=100)
        result = SmartQuoteResult(best_quote=v3, v2_quote=v2, v3_quote=v3, alternative_quotes=(v2,))
        assert result.fallback_quote() is v2

    def test_no_fallback(self):
        assert SmartQuoteResult(best_quote=make_quote()).fallback_quote() is None

    def test_protocol_is_string_enum(self):
        assert Protocol.V3 == "V3"
        assert Protocol("V2") is Protocol.V2
