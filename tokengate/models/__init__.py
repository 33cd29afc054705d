"""
TokenGate Models

Pydantic models for content records and gating outcomes.
"""

from tokengate.models.base import GateModel
from tokengate.models.content import (
    ContentCreate,
    ContentRecord,
    ContentStatus,
)
from tokengate.models.gating import (
    AccessDecision,
    DenialReason,
    GateResult,
    StandardProbeResult,
    StandardTag,
)

__all__ = [
    "GateModel",
    "ContentCreate",
    "ContentRecord",
    "ContentStatus",
    "AccessDecision",
    "DenialReason",
    "GateResult",
    "StandardProbeResult",
    "StandardTag",
]
