"""
Content Route Tests
"""

import pytest

from tokengate.chains.base_client import RpcError, RpcTimeoutError
from tokengate.models.gating import StandardTag

TOKEN = "0xd90af9670eb73e3aba8176a5aeabfb9c280af930"
UPPER = "0x" + TOKEN[2:].upper()
ACCOUNT = "0x" + "12" * 20
BASE_CHAIN_ID = 8453

CONTENT = {
    "token_address": TOKEN,
    "title": "SCP-042: The Singing Forest",
    "body": "This is the secret classified content that is only visible to holders of this coin.",
}


@pytest.fixture
def stored(client):
    response = client.post("/api/v1/content", json=CONTENT)
    assert response.status_code == 201
    return response.json()


def _access(client, token=TOKEN, account=ACCOUNT, chain_id=BASE_CHAIN_ID):
    return client.get(
        f"/api/v1/content/{token}", params={"account": account, "chain_id": chain_id}
    )


class TestCreateContent:
    """Tests for POST /api/v1/content."""

    def test_create(self, client):
        response = client.post("/api/v1/content", json={**CONTENT, "token_address": UPPER})

        assert response.status_code == 201
        data = response.json()
        assert data["token_address"] == TOKEN
        assert data["title"] == CONTENT["title"]
        assert data["id"]
        assert data["created_at"]

    def test_duplicate_is_conflict(self, client, stored):
        response = client.post("/api/v1/content", json={**CONTENT, "token_address": UPPER})

        assert response.status_code == 409
        assert response.json()["token_address"] == TOKEN

    def test_invalid_address(self, client):
        response = client.post("/api/v1/content", json={**CONTENT, "token_address": "0x1234"})

        assert response.status_code == 422
        assert response.json()["field"] == "token_address"

    def test_blank_title(self, client):
        response = client.post("/api/v1/content", json={**CONTENT, "title": "   "})

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "Validation error"
        assert "   " not in str(body["details"])

    def test_missing_body(self, client):
        payload = {k: v for k, v in CONTENT.items() if k != "body"}
        assert client.post("/api/v1/content", json=payload).status_code == 422


class TestRequestAccess:
    """Tests for GET /api/v1/content/{token_address}."""

    def test_holder_is_granted(self, client, stored):
        response = _access(client, token=UPPER)

        assert response.status_code == 200
        data = response.json()
        assert data["granted"] is True
        assert data["token_address"] == TOKEN
        assert data["standard"] == "erc721"
        assert data["raw_balance"] == "1"
        assert data["title"] == CONTENT["title"]
        assert data["body"] == CONTENT["body"]
        assert data["reason"] is None

    def test_body_is_returned_as_written(self, client):
        body = "  indented first line\nsecond\n\n"
        created = client.post("/api/v1/content", json={**CONTENT, "body": body})
        assert created.json()["body"] == body

        assert _access(client).json()["body"] == body

    def test_blank_body_rejected(self, client):
        response = client.post("/api/v1/content", json={**CONTENT, "body": " \n "})

        assert response.status_code == 422
        assert response.json()["field"] == "body"

    def test_large_balance_is_exact(self, client, chain, stored):
        chain.balances = {StandardTag.ERC20: 10**30}

        data = _access(client).json()

        assert data["standard"] == "erc20"
        assert data["raw_balance"] == str(10**30)

    def test_missing_content(self, client, chain):
        response = _access(client)

        assert response.status_code == 404
        data = response.json()
        assert data["granted"] is False
        assert data["reason"] == "content_not_found"
        assert data["body"] is None
        assert chain.code_calls == 0
        assert chain.calls == []

    def test_unsupported_network(self, client, chain, stored):
        response = _access(client, chain_id=1)

        assert response.status_code == 400
        assert response.json()["reason"] == "unsupported_network"
        assert chain.calls == []

    def test_contract_not_found(self, client, chain, stored):
        chain.code = b""

        response = _access(client)

        assert response.status_code == 422
        assert response.json()["reason"] == "contract_not_found"

    def test_zero_balance(self, client, chain, stored):
        chain.balances = {StandardTag.ERC721: 0}

        response = _access(client)

        assert response.status_code == 403
        data = response.json()
        assert data["reason"] == "insufficient_balance"
        assert data["standard"] == "erc721"
        assert data["raw_balance"] == "0"
        assert data["title"] is None
        assert data["body"] is None

    def test_no_matching_standard(self, client, chain, stored):
        chain.balances = {}

        response = _access(client)

        assert response.status_code == 403
        assert response.json()["reason"] == "no_matching_standard"

    def test_rpc_timeout(self, client, chain, stored):
        chain.code = RpcTimeoutError("get_code timed out")

        response = _access(client)

        assert response.status_code == 504
        assert response.json()["reason"] == "rpc_timeout"

    def test_rpc_error(self, client, chain, stored):
        chain.code = RpcError("connection refused")

        response = _access(client)

        assert response.status_code == 502
        assert response.json()["reason"] == "rpc_error"

    def test_invalid_account(self, client, stored):
        response = _access(client, account="not-an-address")

        assert response.status_code == 422
        assert response.json()["field"] == "account"

    def test_missing_query_params(self, client, stored):
        response = client.get(f"/api/v1/content/{TOKEN}")
        assert response.status_code == 422

    def test_non_integer_chain_id(self, client, stored):
        response = client.get(
            f"/api/v1/content/{TOKEN}", params={"account": ACCOUNT, "chain_id": "base"}
        )
        assert response.status_code == 422


class TestContentStatus:
    """Tests for GET /api/v1/content/{token_address}/status."""

    def test_has_content(self, client, chain, stored):
        response = client.get(f"/api/v1/content/{UPPER}/status")

        assert response.status_code == 200
        assert response.json() == {"token_address": TOKEN, "has_content": True}
        assert chain.calls == []

    def test_no_content(self, client):
        response = client.get(f"/api/v1/content/{TOKEN}/status")

        assert response.status_code == 200
        assert response.json()["has_content"] is False

    def test_invalid_address(self, client):
        assert client.get("/api/v1/content/0xabc/status").status_code == 422


class TestNetworks:
    """Tests for GET /api/v1/networks."""

    def test_list_networks(self, client):
        response = client.get("/api/v1/networks")

        assert response.status_code == 200
        assert response.json() == [
            {"name": "base", "chain_id": 8453},
            {"name": "base_sepolia", "chain_id": 84532},
        ]
