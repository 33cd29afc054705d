"""
Gating models.

Outcomes of the balance probe, the access decision, and the orchestrator.
"""

from enum import Enum
from typing import Self

from pydantic import Field, model_validator

from tokengate.models.base import GateModel
from tokengate.models.content import ContentRecord


class StandardTag(str, Enum):
    """Token interface shapes the probe engine recognises, in probe order."""

    ERC721 = "erc721"
    ERC20 = "erc20"
    ERC1155_ID1 = "erc1155_id1"
    ERC1155_ID0 = "erc1155_id0"
    CUSTOM_SINGLE_ARG = "custom_single_arg"


class DenialReason(str, Enum):
    """Why access was not granted."""

    CONTENT_NOT_FOUND = "content_not_found"
    UNSUPPORTED_NETWORK = "unsupported_network"
    CONTRACT_NOT_FOUND = "contract_not_found"
    NO_MATCHING_STANDARD = "no_matching_standard"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    RPC_TIMEOUT = "rpc_timeout"
    RPC_ERROR = "rpc_error"


class StandardProbeResult(GateModel):
    """The first balance strategy that answered, and what it answered."""

    standard: StandardTag
    raw_balance: int = Field(ge=0)


class AccessDecision(GateModel):
    """
    Grant or denial for one access request.

    A grant always carries a probe result with a positive balance; a denial
    always carries a reason.
    """

    granted: bool
    standard: StandardProbeResult | None = None
    reason: DenialReason | None = None
    detail: str | None = None

    @model_validator(mode='after')
    def check_consistency(self) -> Self:
        if self.granted:
            if self.standard is None or self.standard.raw_balance <= 0:
                raise ValueError("granted decision requires a positive balance")
            if self.reason is not None:
                raise ValueError("granted decision cannot carry a denial reason")
        elif self.reason is None:
            raise ValueError("denied decision requires a reason")
        return self

    @classmethod
    def grant(cls, result: StandardProbeResult) -> "AccessDecision":
        return cls(granted=True, standard=result)

    @classmethod
    def deny(
        cls,
        reason: DenialReason,
        detail: str | None = None,
        standard: StandardProbeResult | None = None,
    ) -> "AccessDecision":
        return cls(granted=False, reason=reason, detail=detail, standard=standard)


class GateResult(GateModel):
    """Terminal outcome of an access request; content is present only on grant."""

    token_address: str
    account: str
    chain_id: int
    decision: AccessDecision
    content: ContentRecord | None = None

    @model_validator(mode='after')
    def check_content_matches_decision(self) -> Self:
        if self.decision.granted != (self.content is not None):
            raise ValueError("content must be present exactly when access is granted")
        return self

    @property
    def granted(self) -> bool:
        return self.decision.granted
