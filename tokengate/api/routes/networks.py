"""
TokenGate - Network Routes
"""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from tokengate.api.dependencies import GateServiceDep

router = APIRouter()


class NetworkResponse(BaseModel):
    """A network the gate verifies ownership on."""

    name: str
    chain_id: int


@router.get("/networks", response_model=list[NetworkResponse])
async def list_networks(service: GateServiceDep) -> list[NetworkResponse]:
    """List the networks accepted by the gate."""
    return [
        NetworkResponse(name=network.name, chain_id=network.chain_id)
        for network in service.supported_networks()
    ]
