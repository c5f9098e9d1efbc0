"""Smart routing across the V2 and V3 AMMs.

- engine: validates a swap, queries both protocols concurrently, picks the best
- handlers: per-protocol candidate exploration
- price_impact: half-amount probe estimate
- cache: block-aware result cache
- service: debounced, cancellable, cached entry point for callers
"""

from smartroute.routing.cache import CacheKey, QuoteCache, run_periodic_cleanup
from smartroute.routing.cancellation import CancellationToken
from smartroute.routing.engine import QuoteEngine, select_best
from smartroute.routing.service import QuoteService, create_service
from smartroute.routing.types import Hop, Protocol, Quote, Route, SmartQuoteResult, SwapRequest

__all__ = [
    "Protocol",
    "SwapRequest",
    "Hop",
    "Route",
    "Quote",
    "SmartQuoteResult",
    "CancellationToken",
    "QuoteEngine",
    "select_best",
    "CacheKey",
    "QuoteCache",
    "run_periodic_cleanup",
    "QuoteService",
    "create_service",
]
