"""Pytest configuration and fixtures."""

import pytest

from smartroute.amm.uniswap_v2 import MockUniswapV2Quoter
from smartroute.amm.uniswap_v3 import MockUniswapV3Quoter
from smartroute.chain import MockChainReader
from smartroute.routing.engine import QuoteEngine
from tests.helpers import make_engine


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def v2_quoter() -> MockUniswapV2Quoter:
    """V2 quoter pricing every hop 1:1."""
    return MockUniswapV2Quoter(default_rate=(1, 1))


@pytest.fixture
def v3_quoter() -> MockUniswapV3Quoter:
    """V3 quoter with no pools."""
    return MockUniswapV3Quoter()


@pytest.fixture
def chain() -> MockChainReader:
    return MockChainReader(block_number=100)


@pytest.fixture
def engine(v2_quoter, v3_quoter, chain) -> QuoteEngine:
    return make_engine(v2_quoter=v2_quoter, v3_quoter=v3_quoter, chain=chain)
