"""
Model Tests
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from tokengate.models.content import ContentCreate, ContentRecord
from tokengate.models.gating import (
    AccessDecision,
    DenialReason,
    GateResult,
    StandardProbeResult,
    StandardTag,
)

TOKEN = "0x" + "ab" * 20
ACCOUNT = "0x" + "12" * 20


def _record(**overrides):
    data = {"id": "c-1", "token_address": TOKEN, "title": "Title", "body": "Body"}
    data.update(overrides)
    return ContentRecord(**data)


class TestContentModels:
    """Tests for content models."""

    def test_create_trims_address_and_title(self):
        create = ContentCreate(token_address=f" {TOKEN} ", title="  Title ", body="Body")
        assert create.token_address == TOKEN
        assert create.title == "Title"

    def test_body_whitespace_is_kept(self):
        body = "  indented first line\nsecond\n\n"
        assert ContentCreate(token_address=TOKEN, title="Title", body=body).body == body
        assert _record(body=body).body == body

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            ContentCreate(token_address=TOKEN, title="   ", body="Body")

    def test_title_length_limit(self):
        with pytest.raises(ValidationError):
            ContentCreate(token_address=TOKEN, title="x" * 501, body="Body")

    def test_created_at_defaults_to_utc(self):
        assert _record().created_at.tzinfo is not None

    def test_created_at_from_iso_string(self):
        record = _record(created_at="2026-01-01T12:00:00Z")
        assert record.created_at == datetime(2026, 1, 1, 12, tzinfo=UTC)

    def test_naive_created_at_is_utc(self):
        record = _record(created_at=datetime(2026, 1, 1))
        assert record.created_at.utcoffset() == timedelta(0)


class TestGatingModels:
    """Tests for probe results and gate results."""

    def test_probe_order(self):
        assert [tag.value for tag in StandardTag] == [
            "erc721",
            "erc20",
            "erc1155_id1",
            "erc1155_id0",
            "custom_single_arg",
        ]

    def test_negative_balance_rejected(self):
        with pytest.raises(ValidationError):
            StandardProbeResult(standard=StandardTag.ERC20, raw_balance=-1)

    def test_balance_beyond_uint64(self):
        result = StandardProbeResult(standard=StandardTag.ERC20, raw_balance=2**256 - 1)
        assert result.raw_balance == 2**256 - 1

    def test_granted_result_carries_content(self):
        decision = AccessDecision.grant(
            StandardProbeResult(standard=StandardTag.ERC721, raw_balance=1)
        )
        result = GateResult(
            token_address=TOKEN, account=ACCOUNT, chain_id=8453,
            decision=decision, content=_record(),
        )
        assert result.granted is True

    def test_granted_result_without_content_rejected(self):
        decision = AccessDecision.grant(
            StandardProbeResult(standard=StandardTag.ERC721, raw_balance=1)
        )
        with pytest.raises(ValidationError):
            GateResult(token_address=TOKEN, account=ACCOUNT, chain_id=8453, decision=decision)

    def test_denied_result_with_content_rejected(self):
        decision = AccessDecision.deny(DenialReason.INSUFFICIENT_BALANCE)
        with pytest.raises(ValidationError):
            GateResult(
                token_address=TOKEN, account=ACCOUNT, chain_id=8453,
                decision=decision, content=_record(),
            )

    def test_denied_result(self):
        decision = AccessDecision.deny(DenialReason.RPC_ERROR, detail="connection refused")
        result = GateResult(token_address=TOKEN, account=ACCOUNT, chain_id=8453, decision=decision)

        assert result.granted is False
        assert result.content is None
        assert result.decision.reason == "rpc_error"
