"""AMM quoting collaborators.

- uniswap_v2: constant-product pools and Router02 quoters
- uniswap_v3: fee tiers, packed path codec and QuoterV2 quoters
"""

from smartroute.amm.uniswap_v2 import (
    MockUniswapV2Quoter,
    UniswapV2Pool,
    UniswapV2Quoter,
    Web3UniswapV2Quoter,
)
from smartroute.amm.uniswap_v3 import (
    MockUniswapV3Quoter,
    UniswapV3Quoter,
    V3QuoteResult,
    Web3UniswapV3Quoter,
    decode_path,
    encode_path,
)

__all__ = [
    "UniswapV2Pool",
    "UniswapV2Quoter",
    "MockUniswapV2Quoter",
    "Web3UniswapV2Quoter",
    "V3QuoteResult",
    "UniswapV3Quoter",
    "MockUniswapV3Quoter",
    "Web3UniswapV3Quoter",
    "encode_path",
    "decode_path",
]
