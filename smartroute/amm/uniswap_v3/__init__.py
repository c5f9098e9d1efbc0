"""UniswapV3 concentrated-liquidity support.

This package provides:
- Fee tier and contract address constants
- Packed multi-hop path encoding (encode_path / decode_path)
- Quoter implementations (Mock and Web3-based)
"""

from .constants import (
    FEE_TIER_LABELS,
    QUOTER_V2_ADDRESS,
    V3_FEE_HIGH,
    V3_FEE_LOW,
    V3_FEE_LOWEST,
    V3_FEE_MEDIUM,
    V3_FEE_TIERS,
    V3_FEE_ULTRA_HIGH,
)
from .path import decode_path, encode_path
from .quoter import (
    QUOTER_V2_ABI,
    MockUniswapV3Quoter,
    QuoteKey,
    UniswapV3Quoter,
    V3QuoteResult,
    Web3UniswapV3Quoter,
)

__all__ = [
    # Constants
    "V3_FEE_LOWEST",
    "V3_FEE_LOW",
    "V3_FEE_MEDIUM",
    "V3_FEE_HIGH",
    "V3_FEE_ULTRA_HIGH",
    "V3_FEE_TIERS",
    "FEE_TIER_LABELS",
    "QUOTER_V2_ADDRESS",
    # Path
    "encode_path",
    "decode_path",
    # Quoter
    "V3QuoteResult",
    "UniswapV3Quoter",
    "QuoteKey",
    "MockUniswapV3Quoter",
    "Web3UniswapV3Quoter",
    "QUOTER_V2_ABI",
]
