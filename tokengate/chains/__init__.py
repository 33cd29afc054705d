"""
Chain access package.

Usage:
    from tokengate.chains import NetworkRegistry

    async def example(settings):
        registry = NetworkRegistry.from_settings(settings)
        client = await registry.get_client(8453)
        code = await client.get_code("0x...")
"""

from .addresses import canonicalize_address, is_valid_address, to_checksum
from .base_client import (
    BaseChainClient,
    CallRevertedError,
    ChainClientError,
    ContractNotFoundError,
    RpcError,
    RpcTimeoutError,
)
from .evm_client import EVMChainClient
from .registry import NetworkRegistry

__all__ = [
    # Base classes and exceptions
    "BaseChainClient",
    "ChainClientError",
    "CallRevertedError",
    "ContractNotFoundError",
    "RpcError",
    "RpcTimeoutError",
    # Implementations
    "EVMChainClient",
    "NetworkRegistry",
    # Address helpers
    "canonicalize_address",
    "is_valid_address",
    "to_checksum",
]
