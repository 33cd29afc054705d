"""
Access decision.

Pure mapping from a network check and a probe result to a grant or denial.
"""

from collections.abc import Container

from tokengate.models.gating import AccessDecision, DenialReason, StandardProbeResult


def decide_access(
    network_id: int,
    probe_result: StandardProbeResult | None,
    supported_networks: Container[int],
) -> AccessDecision:
    """
    Decide whether an account may see gated content.

    The network allow-list is checked first; the probe result is not
    consulted for unsupported networks.
    """
    if network_id not in supported_networks:
        return AccessDecision.deny(
            DenialReason.UNSUPPORTED_NETWORK,
            detail=f"Chain id {network_id} is not supported",
        )

    if probe_result is None:
        return AccessDecision.deny(DenialReason.NO_MATCHING_STANDARD)

    if probe_result.raw_balance > 0:
        return AccessDecision.grant(probe_result)

    return AccessDecision.deny(
        DenialReason.INSUFFICIENT_BALANCE,
        detail="Account holds none of this token",
        standard=probe_result,
    )
