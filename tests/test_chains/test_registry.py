"""
Network Registry Tests
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from tokengate.chains.base_client import RpcError
from tokengate.chains.evm_client import EVMChainClient
from tokengate.chains.registry import NetworkRegistry
from tokengate.config import NetworkConfig, Settings
from tokengate.errors import UnsupportedNetworkError


BASE = NetworkConfig(name="base", chain_id=8453, rpc_url="https://mainnet.base.org")
BASE_SEPOLIA = NetworkConfig(
    name="base_sepolia", chain_id=84532, rpc_url="https://sepolia.base.org"
)


class _CountingFactory:
    """Client factory that records how many clients it built."""

    def __init__(self, make_chain):
        self.make_chain = make_chain
        self.built = []

    def __call__(self, network):
        client = self.make_chain(network=network)
        client._initialized = False
        self.built.append(client)
        return client


@pytest.fixture
def factory(make_chain):
    return _CountingFactory(make_chain)


class TestNetworkRegistry:
    """Tests for NetworkRegistry."""

    def test_supported_chain_ids(self, factory):
        registry = NetworkRegistry([BASE, BASE_SEPOLIA], client_factory=factory)

        assert registry.supported_chain_ids == frozenset({8453, 84532})
        assert [n.name for n in registry.networks] == ["base", "base_sepolia"]

    @pytest.mark.asyncio
    async def test_unknown_chain_id_raises(self, factory):
        registry = NetworkRegistry([BASE], client_factory=factory)

        with pytest.raises(UnsupportedNetworkError) as exc_info:
            await registry.get_client(84532)

        assert exc_info.value.chain_id == 84532
        assert factory.built == []

    @pytest.mark.asyncio
    async def test_client_created_and_initialized_once(self, factory):
        registry = NetworkRegistry([BASE, BASE_SEPOLIA], client_factory=factory)

        first = await registry.get_client(8453)
        second = await registry.get_client(8453)

        assert first is second
        assert first.is_initialized
        assert len(factory.built) == 1

    @pytest.mark.asyncio
    async def test_concurrent_first_requests_share_client(self, factory):
        registry = NetworkRegistry([BASE], client_factory=factory)

        clients = await asyncio.gather(*(registry.get_client(8453) for _ in range(5)))

        assert len(factory.built) == 1
        assert all(c is clients[0] for c in clients)

    @pytest.mark.asyncio
    async def test_each_chain_gets_own_client(self, factory):
        registry = NetworkRegistry([BASE, BASE_SEPOLIA], client_factory=factory)

        base = await registry.get_client(8453)
        sepolia = await registry.get_client(84532)

        assert base is not sepolia
        assert base.chain_id == 8453
        assert sepolia.chain_id == 84532

    @pytest.mark.asyncio
    async def test_failed_initialize_is_retried_next_time(self, make_chain):
        failing = make_chain(network=BASE)
        failing._initialized = False
        failing.initialize = AsyncMock(side_effect=RpcError("connection refused"))
        healthy = make_chain(network=BASE)
        clients = iter([failing, healthy])
        registry = NetworkRegistry([BASE], client_factory=lambda network: next(clients))

        with pytest.raises(RpcError):
            await registry.get_client(8453)

        assert await registry.get_client(8453) is healthy

    @pytest.mark.asyncio
    async def test_failed_initialize_closes_client(self, make_chain):
        failing = make_chain(network=BASE)
        failing._initialized = False
        failing.initialize = AsyncMock(side_effect=RpcError("connection refused"))
        failing.close = AsyncMock()
        registry = NetworkRegistry([BASE], client_factory=lambda network: failing)

        with pytest.raises(RpcError, match="connection refused"):
            await registry.get_client(8453)

        failing.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_closes_clients(self, factory):
        registry = NetworkRegistry([BASE, BASE_SEPOLIA], client_factory=factory)
        await registry.get_client(8453)
        await registry.get_client(84532)

        await registry.close()

        assert all(not client.is_initialized for client in factory.built)

    def test_from_settings_builds_evm_clients(self):
        settings = Settings(enabled_networks=["base"])
        registry = NetworkRegistry.from_settings(settings)

        assert registry.supported_chain_ids == frozenset({8453})
        client = registry._client_factory(registry.networks[0])
        assert isinstance(client, EVMChainClient)
        assert client.chain_id == 8453
