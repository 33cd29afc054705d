"""
Network registry.

Routes chain ids to chain clients. Only chain ids of enabled networks are
known to the registry; clients are created and connected on first use so a
single unreachable endpoint never blocks startup.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable

from tokengate.config import NetworkConfig, Settings
from tokengate.errors import UnsupportedNetworkError

from .base_client import BaseChainClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[NetworkConfig], BaseChainClient]


class NetworkRegistry:
    """
    Registry coordinating chain clients across the enabled networks.

    Each chain id maps to exactly one client instance. Client creation is
    serialized per chain id so concurrent first requests share one connection.
    """

    def __init__(
        self,
        networks: Iterable[NetworkConfig],
        client_factory: ClientFactory,
    ) -> None:
        self._networks: dict[int, NetworkConfig] = {n.chain_id: n for n in networks}
        self._client_factory = client_factory
        self._clients: dict[int, BaseChainClient] = {}
        self._locks: dict[int, asyncio.Lock] = {
            chain_id: asyncio.Lock() for chain_id in self._networks
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "NetworkRegistry":
        """Build a registry of web3-backed clients for every enabled network."""
        from .evm_client import EVMChainClient

        def factory(network: NetworkConfig) -> BaseChainClient:
            return EVMChainClient(network, strict_rpc_hosts=settings.strict_rpc_hosts)

        return cls(settings.get_network_configs(), factory)

    @property
    def supported_chain_ids(self) -> frozenset[int]:
        """Chain ids accepted by the gate."""
        return frozenset(self._networks)

    @property
    def networks(self) -> list[NetworkConfig]:
        """Enabled networks in configuration order."""
        return list(self._networks.values())

    async def get_client(self, chain_id: int) -> BaseChainClient:
        """
        Get the connected client for a chain id.

        Raises:
            UnsupportedNetworkError: If the chain id is not enabled
            ChainClientError: If the client could not connect
        """
        network = self._networks.get(chain_id)
        if network is None:
            raise UnsupportedNetworkError(chain_id)

        client = self._clients.get(chain_id)
        if client is not None:
            return client

        async with self._locks[chain_id]:
            client = self._clients.get(chain_id)
            if client is None:
                client = self._client_factory(network)
                if not client.is_initialized:
                    try:
                        await client.initialize()
                    except Exception:
                        await client.close()
                        raise
                self._clients[chain_id] = client
                logger.info(f"Initialized chain client for {network.name}")
        return client

    async def close(self) -> None:
        """Close all chain clients."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
