"""
TokenGate - FastAPI Dependencies
Dependency injection for API routes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends, HTTPException, Request, status

from tokengate.gating.service import ContentGateService

if TYPE_CHECKING:
    from tokengate.api.app import TokenGateApp


# =============================================================================
# Application Access
# =============================================================================

def get_gate_app(request: Request) -> TokenGateApp:
    """Get the TokenGateApp instance from app state."""
    if not hasattr(request.app.state, 'gate'):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="TokenGate application not initialized",
        )
    return request.app.state.gate


def get_gate_service(request: Request) -> ContentGateService:
    """Get the content gate service."""
    gate = get_gate_app(request)
    if gate.gate_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content gate not ready",
        )
    return gate.gate_service


GateServiceDep = Annotated[ContentGateService, Depends(get_gate_service)]


def get_correlation_id(request: Request) -> str:
    """Get the correlation id assigned by CorrelationIdMiddleware."""
    return getattr(request.state, 'correlation_id', 'unknown')


CorrelationIdDep = Annotated[str, Depends(get_correlation_id)]
