"""
Content gate service.

Orchestrates one access request: content lookup, network check, contract
existence, balance probe, decision. Missing content and every chain outcome
become a typed denial on the returned ``GateResult``. Malformed input and an
unavailable database raise.
"""

from typing import Any

import structlog

from tokengate.chains.addresses import canonicalize_address
from tokengate.chains.base_client import (
    ChainClientError,
    ContractNotFoundError,
    RpcTimeoutError,
)
from tokengate.chains.registry import NetworkRegistry
from tokengate.config import NetworkConfig
from tokengate.errors import (
    ContentNotFoundError,
    InputValidationError,
    NoMatchingStandardError,
)
from tokengate.gating.decision import decide_access
from tokengate.gating.probe import StandardProbeEngine
from tokengate.models.content import ContentRecord, ContentStatus
from tokengate.models.gating import AccessDecision, DenialReason, GateResult
from tokengate.monitoring.logging import log_duration
from tokengate.repositories.base import ContentRepository

logger = structlog.get_logger(__name__)


class ContentGateService:
    """
    Gates stored content behind ownership of the token it is bound to.

    Lookup order is fixed: the content store is consulted first, then the
    network allow-list, then the chain. A request for a token without content
    never touches the chain.
    """

    def __init__(
        self,
        repository: ContentRepository,
        networks: NetworkRegistry,
        probe_engine: StandardProbeEngine,
    ):
        self.repository = repository
        self.networks = networks
        self.probe_engine = probe_engine

    async def request_access(
        self,
        token_address: str,
        account: str,
        chain_id: int,
    ) -> GateResult:
        """
        Decide access for ``account`` to the content bound to ``token_address``.

        Raises:
            InputValidationError: If an address or the chain id is malformed
        """
        token = canonicalize_address(token_address, field="token_address")
        account = canonicalize_address(account, field="account")
        if isinstance(chain_id, bool) or not isinstance(chain_id, int):
            raise InputValidationError("chain_id", "must be an integer")

        log = logger.bind(token_address=token, account=account, chain_id=chain_id)

        try:
            record = await self.repository.lookup(token)
        except ContentNotFoundError as e:
            return self._denied(
                log, token, account, chain_id,
                AccessDecision.deny(DenialReason.CONTENT_NOT_FOUND, detail=str(e)),
            )

        supported = self.networks.supported_chain_ids
        if chain_id not in supported:
            return self._denied(
                log, token, account, chain_id, decide_access(chain_id, None, supported)
            )

        try:
            chain = await self.networks.get_client(chain_id)
            await self.probe_engine.ensure_contract(chain, token)
            with log_duration(log, "balance_probe", level="debug"):
                result = await self.probe_engine.probe(chain, account, token)
        except ContractNotFoundError as e:
            decision = AccessDecision.deny(DenialReason.CONTRACT_NOT_FOUND, detail=str(e))
        except NoMatchingStandardError as e:
            decision = AccessDecision.deny(DenialReason.NO_MATCHING_STANDARD, detail=str(e))
        except RpcTimeoutError as e:
            decision = AccessDecision.deny(DenialReason.RPC_TIMEOUT, detail=str(e))
        except ChainClientError as e:
            decision = AccessDecision.deny(DenialReason.RPC_ERROR, detail=str(e))
        else:
            decision = decide_access(chain_id, result, supported)

        if not decision.granted:
            return self._denied(log, token, account, chain_id, decision)

        log.info(
            "access_granted",
            standard=decision.standard.standard,
            raw_balance=decision.standard.raw_balance,
        )
        return GateResult(
            token_address=token,
            account=account,
            chain_id=chain_id,
            decision=decision,
            content=record,
        )

    async def create_content(self, token_address: str, title: str, body: str) -> ContentRecord:
        """
        Bind a new piece of content to a token.

        Raises:
            InputValidationError: If the address, title or body is invalid
            DuplicateContentError: If the token already has content
        """
        record = await self.repository.create(token_address, title, body)
        logger.info("content_created", token_address=record.token_address, content_id=record.id)
        return record

    async def content_status(self, token_address: str) -> ContentStatus:
        """Report whether a token has content without revealing it."""
        token = canonicalize_address(token_address, field="token_address")
        return ContentStatus(
            token_address=token,
            has_content=await self.repository.exists(token),
        )

    def supported_networks(self) -> list[NetworkConfig]:
        return self.networks.networks

    def _denied(
        self,
        log: Any,
        token: str,
        account: str,
        chain_id: int,
        decision: AccessDecision,
    ) -> GateResult:
        log.info("access_denied", reason=decision.reason, detail=decision.detail)
        return GateResult(
            token_address=token,
            account=account,
            chain_id=chain_id,
            decision=decision,
        )
