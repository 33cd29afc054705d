"""
TokenGate - Test Fixtures

Shared pytest fixtures for all test modules.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================

_current_env = os.environ.get("APP_ENV", "")
if _current_env == "production":
    raise RuntimeError("Test fixtures cannot be loaded in production environment.")

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USER", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "testpassword")  # TEST ONLY

from tokengate.chains.abis import (  # noqa: E402
    CUSTOM_BALANCE_ABI,
    ERC20_BALANCE_ABI,
    ERC721_BALANCE_ABI,
    ERC1155_BALANCE_ABI,
)
from tokengate.chains.base_client import BaseChainClient, CallRevertedError  # noqa: E402
from tokengate.chains.registry import NetworkRegistry  # noqa: E402
from tokengate.config import NetworkConfig  # noqa: E402
from tokengate.gating.probe import StandardProbeEngine  # noqa: E402
from tokengate.gating.service import ContentGateService  # noqa: E402
from tokengate.models.gating import StandardTag  # noqa: E402
from tokengate.repositories.memory_repository import InMemoryContentRepository  # noqa: E402

TOKEN = "0x" + "ab" * 20
ACCOUNT = "0x" + "12" * 20
BASE = NetworkConfig(name="base", chain_id=8453, rpc_url="https://mainnet.base.org")
BASE_SEPOLIA = NetworkConfig(
    name="base_sepolia", chain_id=84532, rpc_url="https://sepolia.base.org"
)


# =============================================================================
# Fake Chain Client
# =============================================================================


def _tag_for(abi: list[dict[str, Any]], args: list[Any]) -> StandardTag:
    """Map the ABI fragment and arguments of a balance call to its strategy."""
    if abi is ERC721_BALANCE_ABI:
        return StandardTag.ERC721
    if abi is ERC20_BALANCE_ABI:
        return StandardTag.ERC20
    if abi is ERC1155_BALANCE_ABI:
        return StandardTag.ERC1155_ID1 if args[1] == 1 else StandardTag.ERC1155_ID0
    if abi is CUSTOM_BALANCE_ABI:
        return StandardTag.CUSTOM_SINGLE_ARG
    raise AssertionError(f"unexpected ABI: {abi!r}")


class FakeChainClient(BaseChainClient):
    """
    In-process chain that answers balance calls by strategy.

    ``balances`` maps a StandardTag to the value that call returns, or to an
    exception it raises. Shapes not listed revert.
    """

    def __init__(
        self,
        network: NetworkConfig = BASE,
        code: bytes | Exception = b"\x60\x80\x60\x40",
        balances: dict[StandardTag, Any] | None = None,
        delays: dict[StandardTag, float] | None = None,
    ):
        super().__init__(network)
        self.code = code
        self.balances = balances or {}
        self.delays = delays or {}
        self.calls: list[StandardTag] = []
        self.completed: list[StandardTag] = []
        self.call_args: list[list[Any]] = []
        self.code_calls = 0
        self._initialized = True

    async def initialize(self) -> None:
        self._initialized = True

    async def close(self) -> None:
        self._initialized = False

    async def get_code(self, address: str) -> bytes:
        self.code_calls += 1
        if isinstance(self.code, Exception):
            raise self.code
        return self.code

    async def call_contract(
        self,
        contract_address: str,
        function_name: str,
        args: list[Any],
        abi: list[dict[str, Any]],
    ) -> Any:
        tag = _tag_for(abi, args)
        self.calls.append(tag)
        self.call_args.append(args)
        if tag in self.delays:
            await asyncio.sleep(self.delays[tag])
        self.completed.append(tag)
        outcome = self.balances.get(tag, CallRevertedError("execution reverted"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def make_chain():
    """Factory for fake chain clients."""

    def _make(**kwargs: Any) -> FakeChainClient:
        return FakeChainClient(**kwargs)

    return _make


@pytest.fixture
def make_registry():
    """Factory for a registry of Base and Base Sepolia that hands out one chain."""

    def _make(chain: BaseChainClient) -> NetworkRegistry:
        return NetworkRegistry([BASE, BASE_SEPOLIA], client_factory=lambda network: chain)

    return _make


@pytest.fixture
def memory_repository():
    """Empty in-memory content store."""
    return InMemoryContentRepository()


@pytest.fixture
def make_service(memory_repository, make_registry):
    """Factory for a gate service over a fake chain and an in-memory store."""

    def _make(
        chain: BaseChainClient,
        call_timeout: float = 1.0,
        concurrent: bool = False,
    ) -> ContentGateService:
        return ContentGateService(
            repository=memory_repository,
            networks=make_registry(chain),
            probe_engine=StandardProbeEngine(call_timeout=call_timeout, concurrent=concurrent),
        )

    return _make


# =============================================================================
# Mock Database Client
# =============================================================================


@pytest.fixture
def mock_db_client():
    """Create a mock Neo4j client."""
    client = AsyncMock()
    client.execute = AsyncMock(return_value=[])
    client.execute_single = AsyncMock(return_value=None)
    client.connect = AsyncMock()
    client.close = AsyncMock()
    client._driver = MagicMock()
    return client
