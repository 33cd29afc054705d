"""
TokenGate - Content Routes
Endpoints for binding content to tokens and requesting gated access.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tokengate.api.dependencies import CorrelationIdDep, GateServiceDep
from tokengate.models.content import ContentCreate, ContentRecord, ContentStatus
from tokengate.models.gating import DenialReason, GateResult

router = APIRouter()
logger = structlog.get_logger(__name__)


# HTTP status for each denial reason
DENIAL_STATUS: dict[DenialReason, int] = {
    DenialReason.CONTENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    DenialReason.UNSUPPORTED_NETWORK: status.HTTP_400_BAD_REQUEST,
    DenialReason.CONTRACT_NOT_FOUND: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DenialReason.NO_MATCHING_STANDARD: status.HTTP_403_FORBIDDEN,
    DenialReason.INSUFFICIENT_BALANCE: status.HTTP_403_FORBIDDEN,
    DenialReason.RPC_TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    DenialReason.RPC_ERROR: status.HTTP_502_BAD_GATEWAY,
}


# =============================================================================
# Request/Response Models
# =============================================================================


class ContentResponse(BaseModel):
    """Stored content record."""

    id: str
    token_address: str
    title: str
    body: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: ContentRecord) -> ContentResponse:
        return cls(
            id=record.id,
            token_address=record.token_address,
            title=record.title,
            body=record.body,
            created_at=record.created_at,
        )


class AccessResponse(BaseModel):
    """Outcome of an access request. Title and body are set only on grant."""

    granted: bool
    token_address: str
    chain_id: int
    standard: str | None = None
    raw_balance: str | None = Field(
        default=None,
        description="Balance in the token's smallest unit, as a decimal string",
    )
    title: str | None = None
    body: str | None = None
    reason: str | None = None
    detail: str | None = None

    @classmethod
    def from_result(cls, result: GateResult) -> AccessResponse:
        decision = result.decision
        probe = decision.standard
        return cls(
            granted=decision.granted,
            token_address=result.token_address,
            chain_id=result.chain_id,
            standard=probe.standard if probe else None,
            raw_balance=str(probe.raw_balance) if probe else None,
            title=result.content.title if result.content else None,
            body=result.content.body if result.content else None,
            reason=decision.reason,
            detail=decision.detail,
        )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/content", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    request: ContentCreate,
    service: GateServiceDep,
    correlation_id: CorrelationIdDep,
) -> ContentResponse:
    """
    Bind a piece of content to a token contract.

    Each token can carry exactly one piece of content; a second create for
    the same address (in any letter case) is rejected with 409.
    """
    record = await service.create_content(request.token_address, request.title, request.body)
    logger.info(
        "content_create_request_completed",
        token_address=record.token_address,
        correlation_id=correlation_id,
    )
    return ContentResponse.from_record(record)


@router.get(
    "/content/{token_address}",
    response_model=AccessResponse,
    responses={
        404: {"model": AccessResponse, "description": "No content for this token"},
        400: {"model": AccessResponse, "description": "Unsupported network"},
        403: {"model": AccessResponse, "description": "Account does not hold the token"},
        422: {"model": AccessResponse, "description": "Token address is not a contract"},
        502: {"model": AccessResponse, "description": "Chain RPC failed"},
        504: {"model": AccessResponse, "description": "Chain RPC timed out"},
    },
)
async def get_content(
    token_address: str,
    service: GateServiceDep,
    account: str = Query(..., description="Wallet address of the requester"),
    chain_id: int = Query(..., description="EIP-155 chain id the token lives on"),
) -> AccessResponse | JSONResponse:
    """
    Reveal the content bound to a token if the account holds a positive balance.
    """
    result = await service.request_access(token_address, account, chain_id)
    response = AccessResponse.from_result(result)
    if result.granted:
        return response

    return JSONResponse(
        status_code=DENIAL_STATUS[DenialReason(result.decision.reason)],
        content=response.model_dump(),
    )


@router.get("/content/{token_address}/status", response_model=ContentStatus)
async def get_content_status(
    token_address: str,
    service: GateServiceDep,
) -> ContentStatus:
    """Report whether a token has content, without revealing it."""
    return await service.content_status(token_address)
