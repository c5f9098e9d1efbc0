"""Per-protocol quote handlers.

Each handler explores the candidate routes of one AMM variant:
- UniswapV2Handler: direct pair and hop through the intermediate asset
- UniswapV3Handler: every fee tier, single hop and two-hop pairs

The QuoteHandler protocol defines the common interface for all handlers.
"""

from smartroute.routing.handlers.base import BaseHandler, QuoteHandler
from smartroute.routing.handlers.v2 import UniswapV2Handler
from smartroute.routing.handlers.v3 import UniswapV3Handler

__all__ = [
    "QuoteHandler",
    "BaseHandler",
    "UniswapV2Handler",
    "UniswapV3Handler",
]
