"""
API test fixtures.

Apps are built around a TokenGateApp whose gate service runs on a fake chain
and an in-memory store; the lifespan is not run unless a test enters the
TestClient context.
"""

import pytest
from fastapi.testclient import TestClient

from tokengate.api.app import TokenGateApp, create_app
from tokengate.config import Settings
from tokengate.models.gating import StandardTag


@pytest.fixture
def chain(make_chain):
    """Chain on which the account holds one ERC-721 token."""
    return make_chain(balances={StandardTag.ERC721: 1})


@pytest.fixture
def gate(make_service, chain):
    gate = TokenGateApp(Settings(storage_backend="memory"))
    gate.gate_service = make_service(chain)
    gate.is_ready = True
    return gate


@pytest.fixture
def app(gate):
    return create_app(gate=gate)


@pytest.fixture
def client(app):
    return TestClient(app)
