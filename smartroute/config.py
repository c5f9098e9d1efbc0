"""Routing configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from smartroute.amm.uniswap_v2 import V2_ROUTER_ADDRESS
from smartroute.amm.uniswap_v3.constants import QUOTER_V2_ADDRESS, V3_FEE_TIERS

# Wrapped native asset on mainnet, used as the hop token
WETH_ADDRESS = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"

_ENV_PREFIX = "SMARTROUTE_"


@dataclass(frozen=True)
class RoutingConfig:
    """Centralized configuration for quoting and caching.

    Attributes:
        rpc_url: JSON-RPC endpoint for chain reads
        wrapped_token_address: Intermediate asset for two-hop routes; also
            replaces the native (zero) address before any query
        v2_router_address: UniswapV2 Router02 used for getAmountsOut
        v3_quoter_address: UniswapV3 QuoterV2
        fee_tiers: V3 fee tiers probed, in enumeration order
        cache_ttl_seconds: Maximum age of a cached quote
        cache_sweep_interval_seconds: Period of the expired-entry sweep
        debounce_seconds: Quiet period before a quote request starts
        protocol_timeout_seconds: Per-protocol time limit, None to wait forever
        max_concurrent_calls: Upper bound on in-flight quoter calls per protocol
    """

    rpc_url: str = "http://localhost:8545"
    wrapped_token_address: str = WETH_ADDRESS
    v2_router_address: str = V2_ROUTER_ADDRESS
    v3_quoter_address: str = QUOTER_V2_ADDRESS
    fee_tiers: tuple[int, ...] = V3_FEE_TIERS
    cache_ttl_seconds: float = 5.0
    cache_sweep_interval_seconds: float = 30.0
    debounce_seconds: float = 0.3
    protocol_timeout_seconds: float | None = 10.0
    max_concurrent_calls: int = 8

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> RoutingConfig:
        """Build a config from SMARTROUTE_* environment variables.

        Unset variables keep their defaults. SMARTROUTE_FEE_TIERS is a
        comma-separated list; SMARTROUTE_PROTOCOL_TIMEOUT_SECONDS=none
        disables the timeout.

        Raises:
            ValueError: If a variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            return env.get(_ENV_PREFIX + name)

        timeout_raw = get("PROTOCOL_TIMEOUT_SECONDS")
        if timeout_raw is None:
            timeout = defaults.protocol_timeout_seconds
        elif timeout_raw.lower() in ("", "none", "off"):
            timeout = None
        else:
            timeout = float(timeout_raw)

        fee_tiers_raw = get("FEE_TIERS")
        fee_tiers = (
            tuple(int(f) for f in fee_tiers_raw.split(",") if f.strip())
            if fee_tiers_raw
            else defaults.fee_tiers
        )

        return cls(
            rpc_url=get("RPC_URL") or defaults.rpc_url,
            wrapped_token_address=get("WRAPPED_TOKEN_ADDRESS") or defaults.wrapped_token_address,
            v2_router_address=get("V2_ROUTER_ADDRESS") or defaults.v2_router_address,
            v3_quoter_address=get("V3_QUOTER_ADDRESS") or defaults.v3_quoter_address,
            fee_tiers=fee_tiers,
            cache_ttl_seconds=float(get("CACHE_TTL_SECONDS") or defaults.cache_ttl_seconds),
            cache_sweep_interval_seconds=float(
                get("CACHE_SWEEP_INTERVAL_SECONDS") or defaults.cache_sweep_interval_seconds
            ),
            debounce_seconds=float(get("DEBOUNCE_SECONDS") or defaults.debounce_seconds),
            protocol_timeout_seconds=timeout,
            max_concurrent_calls=int(
                get("MAX_CONCURRENT_CALLS") or defaults.max_concurrent_calls
            ),
        )


# Default configuration instance
DEFAULT_ROUTING_CONFIG = RoutingConfig()


__all__ = ["WETH_ADDRESS", "RoutingConfig", "DEFAULT_ROUTING_CONFIG"]
