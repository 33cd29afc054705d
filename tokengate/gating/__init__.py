"""
Gating package.

Contract existence checking, token-standard probing, the access decision,
and the orchestrating service.
"""

from tokengate.gating.decision import decide_access
from tokengate.gating.probe import (
    DEFAULT_STRATEGIES,
    BalanceStrategy,
    StandardProbeEngine,
    ensure_contract_exists,
)
from tokengate.gating.service import ContentGateService

__all__ = [
    "BalanceStrategy",
    "ContentGateService",
    "DEFAULT_STRATEGIES",
    "StandardProbeEngine",
    "decide_access",
    "ensure_contract_exists",
]
