"""Test helpers module for shared test utilities.

- constants: Token addresses and common amounts
- factories: Engine, service and quote factory functions
"""

from tests.helpers.constants import (
    DAI,
    ETH,
    ONE_ETH,
    ONE_USDC,
    TOKEN_DECIMALS,
    USDC,
    USDT,
    WBTC,
    WETH,
)
from tests.helpers.factories import (
    TEST_CONFIG,
    make_engine,
    make_quote,
    make_result,
    make_service,
)

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "WBTC",
    "ETH",
    "TOKEN_DECIMALS",
    "ONE_ETH",
    "ONE_USDC",
    # Factories
    "TEST_CONFIG",
    "make_engine",
    "make_service",
    "make_quote",
    "make_result",
]
