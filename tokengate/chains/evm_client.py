"""
EVM Chain Client Implementation

Concrete read-only chain client for EVM-compatible networks (Base, Base
Sepolia). It uses web3.py for all blockchain interactions and translates
web3 failures into the chain client exception hierarchy.
"""

import ipaddress
import logging
from typing import Any
from urllib.parse import urlparse

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import (  # type: ignore[import-not-found]
    BadFunctionCallOutput,
    ContractLogicError,
    Web3ValidationError,
)

from tokengate.config import NetworkConfig

from .base_client import (
    BaseChainClient,
    CallRevertedError,
    ChainClientError,
    RpcError,
    RpcTimeoutError,
)

logger: logging.Logger = logging.getLogger(__name__)

# Known public and provider RPC hosts for the supported networks
ALLOWED_RPC_HOSTS = frozenset({
    "mainnet.base.org",
    "sepolia.base.org",
    "base-mainnet.g.alchemy.com",
    "base-sepolia.g.alchemy.com",
    "base.llamarpc.com",
    "base-mainnet.infura.io",
    "base-sepolia.infura.io",
    "rpc.ankr.com",
    "base.blockpi.network",
    "base.drpc.org",
    "base.publicnode.com",
    "base-sepolia-rpc.publicnode.com",
    "1rpc.io",
})


def _validate_rpc_url(rpc_url: str, strict: bool = False) -> None:
    """
    Validate an RPC URL before connecting to it.

    Hosts outside the allowlist are logged, or rejected when ``strict`` is
    set. Private and loopback IP literals are always rejected.

    Raises:
        ChainClientError: If the URL is malformed or not allowed
    """
    parsed = urlparse(rpc_url)

    if parsed.scheme not in ("http", "https"):
        raise ChainClientError(f"Invalid RPC URL scheme: {parsed.scheme!r}")

    hostname = parsed.hostname
    if not hostname:
        raise ChainClientError("RPC URL missing hostname")

    hostname_lower = hostname.lower()
    is_allowed = any(
        hostname_lower == allowed or hostname_lower.endswith(f".{allowed}")
        for allowed in ALLOWED_RPC_HOSTS
    )

    if not is_allowed:
        try:
            ip = ipaddress.ip_address(hostname_lower)
        except ValueError:
            ip = None
        if ip is not None and (
            ip.is_private or ip.is_loopback or ip.is_link_local or ip.is_reserved
        ):
            raise ChainClientError(f"RPC URL points to a private address: {hostname_lower}")
        if strict:
            raise ChainClientError(f"RPC host {hostname_lower} is not in the allowlist")
        logger.warning(
            f"RPC URL host {hostname_lower} not in allowlist, proceeding: {rpc_url}"
        )


class EVMChainClient(BaseChainClient):
    """
    Chain client implementation for EVM-compatible blockchains.

    The client is not connected until initialize() is called. Once connected
    it is bound to the configured chain id; an endpoint reporting any other
    chain id is refused.
    """

    def __init__(self, network: NetworkConfig, strict_rpc_hosts: bool = False) -> None:
        """
        Initialize the EVM chain client.

        Args:
            network: The network to connect to
            strict_rpc_hosts: Reject RPC hosts outside the allowlist
        """
        super().__init__(network)
        self._strict_rpc_hosts = strict_rpc_hosts
        self._w3: AsyncWeb3 | None = None

    def _get_w3(self) -> AsyncWeb3:
        """Return the Web3 instance, raising if not initialized."""
        if self._w3 is None:
            raise ChainClientError(
                f"Chain client for {self.network.name} not initialized. "
                "Call initialize() first."
            )
        return self._w3

    async def initialize(self) -> None:
        """
        Initialize the chain connection.

        Establishes the Web3 connection to the RPC endpoint and checks that the
        endpoint serves the chain id this client is configured for.
        """
        _validate_rpc_url(self._rpc_endpoint, strict=self._strict_rpc_hosts)

        self._w3 = AsyncWeb3(AsyncHTTPProvider(self._rpc_endpoint))

        try:
            chain_id: int = await self._w3.eth.chain_id  # type: ignore[misc]
        except Exception as e:
            self._w3 = None
            raise RpcError(f"Failed to connect to {self.network.name}: {e}") from e

        if chain_id != self.network.chain_id:
            self._w3 = None
            raise ChainClientError(
                f"RPC endpoint for {self.network.name} reports chain id {chain_id}, "
                f"expected {self.network.chain_id}"
            )

        logger.info(f"Connected to {self.network.name} (chain_id: {chain_id})")
        self._initialized = True

    async def close(self) -> None:
        """Close the chain connection and dispose of the provider."""
        if self._w3 and hasattr(self._w3.provider, 'disconnect'):  # type: ignore[attr-defined]
            await self._w3.provider.disconnect()  # type: ignore[attr-defined]
        self._w3 = None
        self._initialized = False

    # ==================== Read Operations ====================

    async def get_code(self, address: str) -> bytes:
        """Get the deployed bytecode at an address."""
        self._ensure_initialized()
        w3 = self._get_w3()

        try:
            code: Any = await w3.eth.get_code(w3.to_checksum_address(address))
        except TimeoutError as e:
            raise RpcTimeoutError(f"get_code timed out on {self.network.name}") from e
        except Exception as e:
            raise RpcError(f"get_code failed on {self.network.name}: {e}") from e
        return bytes(code)

    async def call_contract(
        self,
        contract_address: str,
        function_name: str,
        args: list[Any],
        abi: list[dict[str, Any]],
    ) -> Any:
        """
        Call a read-only contract function.

        This executes a view function on a contract without sending a
        transaction. Reverts, empty return data and undecodable output all
        surface as ``CallRevertedError``.
        """
        self._ensure_initialized()
        w3 = self._get_w3()

        contract: Any = w3.eth.contract(  # type: ignore[attr-defined]
            address=w3.to_checksum_address(contract_address), abi=abi
        )
        func: Any = getattr(contract.functions, function_name)

        try:
            result: Any = await func(*args).call()
        except (ContractLogicError, BadFunctionCallOutput, Web3ValidationError) as e:
            raise CallRevertedError(f"{function_name} reverted: {e}") from e
        except TimeoutError as e:
            raise RpcTimeoutError(
                f"{function_name} timed out on {self.network.name}"
            ) from e
        except Exception as e:
            raise RpcError(f"{function_name} failed on {self.network.name}: {e}") from e
        return result
