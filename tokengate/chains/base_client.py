"""
Chain Client Base

This module provides the abstract base class for the read-only chain access
the gate needs. The gate consumes exactly two primitives from a chain:

- fetch the deployed bytecode at an address
- call a read-only contract function with a given ABI shape

Each network has its own client instance bound to a single chain id, so the
active network is always an explicit value rather than ambient state.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from tokengate.config import NetworkConfig

logger = logging.getLogger(__name__)


class ChainClientError(Exception):
    """Base exception for chain client errors."""
    pass


class ContractNotFoundError(ChainClientError):
    """Raised when an address hosts no deployed bytecode."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Address {address} is not a contract")


class CallRevertedError(ChainClientError):
    """
    Raised when a contract call reverts or returns output that does not match
    the requested ABI shape.
    """
    pass


class RpcError(ChainClientError):
    """Raised when the RPC endpoint could not be reached or answered with a transport error."""
    pass


class RpcTimeoutError(RpcError):
    """Raised when an RPC call did not complete within its timeout."""
    pass


class BaseChainClient(ABC):
    """
    Abstract base class for blockchain client implementations.

    Implementations must translate their library's failures into the
    exception hierarchy above: ABI mismatches and reverts become
    ``CallRevertedError``, transport failures become ``RpcError``.
    """

    def __init__(self, network: NetworkConfig):
        """
        Initialize the chain client.

        Args:
            network: The network this client connects to
        """
        self.network = network
        self._rpc_endpoint = network.rpc_url
        self._initialized = False

    @property
    def chain_id(self) -> int:
        """The EIP-155 chain id this client is bound to."""
        return self.network.chain_id

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the chain connection and verify connectivity.

        This method should establish connection to the RPC endpoint
        and verify that it serves the configured chain id.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the chain connection and cleanup resources."""
        pass

    @abstractmethod
    async def get_code(self, address: str) -> bytes:
        """
        Get the deployed bytecode at an address.

        Args:
            address: The address to inspect

        Returns:
            Raw bytecode; empty for externally owned or undeployed addresses
        """
        pass

    @abstractmethod
    async def call_contract(
        self,
        contract_address: str,
        function_name: str,
        args: list[Any],
        abi: list[dict[str, Any]],
    ) -> Any:
        """
        Call a read-only contract function.

        Args:
            contract_address: The contract to call
            function_name: Name of the function to call
            args: Arguments to pass to the function
            abi: ABI fragment describing the function shape

        Returns:
            The decoded return value from the contract call
        """
        pass

    @property
    def is_initialized(self) -> bool:
        """Check if the client has been initialized."""
        return self._initialized

    def _ensure_initialized(self) -> None:
        """Raise error if client is not initialized."""
        if not self._initialized:
            raise ChainClientError(
                f"Chain client for {self.network.name} not initialized. "
                "Call initialize() first."
            )
