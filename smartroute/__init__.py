"""Smart Route - best-execution swap quoting across Uniswap V2 and V3."""

__version__ = "0.1.0"
__all__ = ["__version__"]
