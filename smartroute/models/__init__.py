"""Pydantic models for the quoting HTTP surface."""

from smartroute.models.types import Address, DecimalAmount, Uint256

__all__ = [
    "Address",
    "DecimalAmount",
    "Uint256",
]
