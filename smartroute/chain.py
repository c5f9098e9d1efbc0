"""Point-in-time chain reads used outside the quoters.

The quote engine needs two things from the node besides quotes: whether the
quoter contract is deployed, and the current block number to stamp cache
entries with.
"""

from __future__ import annotations

from typing import Protocol

from web3 import AsyncHTTPProvider, AsyncWeb3

from smartroute.models.types import normalize_address


def make_async_web3(rpc_url: str) -> AsyncWeb3:
    """Create an async web3 connection over HTTP."""
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


class ChainReader(Protocol):
    """Protocol for chain readers."""

    async def get_block_number(self) -> int: ...

    async def get_code(self, address: str) -> bytes:
        """Deployed bytecode at address; empty when no contract exists."""
        ...


class MockChainReader:
    """In-memory chain reader for tests.

    Every address has code unless listed in missing_code. Setting
    fail_code_check makes get_code raise, like an unreachable node.
    """

    def __init__(
        self,
        block_number: int = 1,
        missing_code: set[str] | None = None,
        fail_code_check: bool = False,
        fail_block_number: bool = False,
    ):
        self.block_number = block_number
        self.missing_code = {normalize_address(a) for a in (missing_code or set())}
        self.fail_code_check = fail_code_check
        self.fail_block_number = fail_block_number

    async def get_block_number(self) -> int:
        if self.fail_block_number:
            raise ConnectionError("block number unavailable")
        return self.block_number

    async def get_code(self, address: str) -> bytes:
        if self.fail_code_check:
            raise ConnectionError("code lookup unavailable")
        if normalize_address(address) in self.missing_code:
            return b""
        return b"\x60\x80"


class Web3ChainReader:
    """Chain reader backed by an AsyncWeb3 connection."""

    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3

    async def get_block_number(self) -> int:
        return int(await self.w3.eth.block_number)

    async def get_code(self, address: str) -> bytes:
        code = await self.w3.eth.get_code(AsyncWeb3.to_checksum_address(address))
        return bytes(code)


__all__ = [
    "make_async_web3",
    "ChainReader",
    "MockChainReader",
    "Web3ChainReader",
]
