"""UniswapV3 constants including fee tiers and contract addresses."""

# V3 Fee tiers in Uniswap units (hundredths of a basis point)
# Fee = units / 1,000,000 (e.g., 3000 = 0.3%)
V3_FEE_LOWEST = 100  # 0.01% - stable pairs
V3_FEE_LOW = 500  # 0.05% - stable pairs
V3_FEE_MEDIUM = 3000  # 0.30% - most pairs
V3_FEE_HIGH = 10000  # 1.00% - exotic pairs
V3_FEE_ULTRA_HIGH = 100000  # 10.00% - illiquid pairs

# Enumeration order matters: on equal output the earlier tier is kept
V3_FEE_TIERS = (V3_FEE_LOWEST, V3_FEE_LOW, V3_FEE_MEDIUM, V3_FEE_HIGH, V3_FEE_ULTRA_HIGH)

FEE_TIER_LABELS = {
    V3_FEE_LOWEST: "0.01%",
    V3_FEE_LOW: "0.05%",
    V3_FEE_MEDIUM: "0.3%",
    V3_FEE_HIGH: "1%",
    V3_FEE_ULTRA_HIGH: "10%",
}

# Largest value a uint24 fee field can carry
MAX_FEE = 2**24 - 1

# Contract addresses (mainnet)
QUOTER_V2_ADDRESS = "0x61fFE014bA17989E743c5F6cB21bF9697530B21e"
V3_FACTORY_ADDRESS = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
NONFUNGIBLE_POSITION_MANAGER_ADDRESS = "0xC36442b4a4522E871399CD717aBDD847Ab11FE88"

__all__ = [
    "V3_FEE_LOWEST",
    "V3_FEE_LOW",
    "V3_FEE_MEDIUM",
    "V3_FEE_HIGH",
    "V3_FEE_ULTRA_HIGH",
    "V3_FEE_TIERS",
    "FEE_TIER_LABELS",
    "MAX_FEE",
    "QUOTER_V2_ADDRESS",
    "V3_FACTORY_ADDRESS",
    "NONFUNGIBLE_POSITION_MANAGER_ADDRESS",
]
