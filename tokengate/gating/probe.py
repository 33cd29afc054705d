"""
Contract existence check and token-standard probing.

A contract is probed with a fixed, ordered list of balance strategies. Each
strategy is one ``balanceOf`` shape; the first strategy that answers without
error decides the standard and the balance, even when that balance is zero.
Reverts, undecodable output and per-call timeouts only disqualify the
strategy that hit them.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from tokengate.chains.abis import (
    CUSTOM_BALANCE_ABI,
    ERC20_BALANCE_ABI,
    ERC721_BALANCE_ABI,
    ERC1155_BALANCE_ABI,
)
from tokengate.chains.addresses import to_checksum
from tokengate.chains.base_client import (
    BaseChainClient,
    CallRevertedError,
    ChainClientError,
    ContractNotFoundError,
    RpcError,
    RpcTimeoutError,
)
from tokengate.config import Settings
from tokengate.errors import NoMatchingStandardError
from tokengate.models.gating import StandardProbeResult, StandardTag

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BalanceStrategy:
    """One ``balanceOf`` call shape and the standard it identifies."""

    tag: StandardTag
    abi: list[dict[str, Any]] = field(compare=False, repr=False)
    function_name: str = "balanceOf"
    token_id: int | None = None

    def build_args(self, account: str) -> list[Any]:
        if self.token_id is None:
            return [account]
        return [account, self.token_id]

    async def probe(self, chain: BaseChainClient, account: str, contract: str) -> int:
        """
        Query the balance with this strategy's shape.

        Raises:
            ChainClientError: If the call failed or the answer is not a balance
        """
        value = await chain.call_contract(
            contract, self.function_name, self.build_args(account), self.abi
        )
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise CallRevertedError(
                f"{self.tag.value} answered with a non-balance value: {value!r}"
            )
        return value


DEFAULT_STRATEGIES: tuple[BalanceStrategy, ...] = (
    BalanceStrategy(StandardTag.ERC721, ERC721_BALANCE_ABI),
    BalanceStrategy(StandardTag.ERC20, ERC20_BALANCE_ABI),
    BalanceStrategy(StandardTag.ERC1155_ID1, ERC1155_BALANCE_ABI, token_id=1),
    BalanceStrategy(StandardTag.ERC1155_ID0, ERC1155_BALANCE_ABI, token_id=0),
    BalanceStrategy(StandardTag.CUSTOM_SINGLE_ARG, CUSTOM_BALANCE_ABI),
)


async def ensure_contract_exists(
    chain: BaseChainClient,
    address: str,
    timeout: float,
) -> None:
    """
    Confirm that bytecode is deployed at an address.

    Raises:
        ContractNotFoundError: If the address holds no code
        RpcTimeoutError: If the lookup did not finish within ``timeout``
        RpcError: If the lookup failed in transport
    """
    try:
        code = await asyncio.wait_for(chain.get_code(address), timeout=timeout)
    except TimeoutError as e:
        raise RpcTimeoutError(f"get_code for {address} timed out after {timeout}s") from e

    if not code:
        logger.info("contract_not_found", contract=address, chain_id=chain.chain_id)
        raise ContractNotFoundError(address)


class StandardProbeEngine:
    """
    Runs balance strategies against a contract and picks the first success.

    In concurrent mode every strategy is issued at once; the earliest-listed
    success still wins regardless of which call finishes first.
    """

    def __init__(
        self,
        strategies: Sequence[BalanceStrategy] = DEFAULT_STRATEGIES,
        call_timeout: float = 10.0,
        concurrent: bool = False,
    ):
        if not strategies:
            raise ValueError("At least one balance strategy is required")
        if call_timeout <= 0:
            raise ValueError("call_timeout must be positive")
        self.strategies = tuple(strategies)
        self.call_timeout = call_timeout
        self.concurrent = concurrent

    @classmethod
    def from_settings(cls, settings: Settings) -> "StandardProbeEngine":
        return cls(
            call_timeout=settings.probe_call_timeout_seconds,
            concurrent=settings.probe_concurrently,
        )

    async def ensure_contract(self, chain: BaseChainClient, contract: str) -> None:
        """Existence check bounded by this engine's call timeout."""
        await ensure_contract_exists(chain, contract, timeout=self.call_timeout)

    async def probe(
        self,
        chain: BaseChainClient,
        account: str,
        contract: str,
    ) -> StandardProbeResult:
        """
        Determine the contract's standard and the account's balance.

        Raises:
            NoMatchingStandardError: If every strategy failed against the contract
            RpcTimeoutError: If every strategy failed by timing out
            RpcError: If every strategy failed in transport
        """
        account = to_checksum(account)

        if self.concurrent:
            outcomes = await self._attempt_all(chain, account, contract)
            for strategy, outcome in zip(self.strategies, outcomes, strict=True):
                if not isinstance(outcome, ChainClientError):
                    return self._success(strategy, outcome, contract)
        else:
            outcomes = []
            for strategy in self.strategies:
                outcome = await self._attempt(strategy, chain, account, contract)
                if not isinstance(outcome, ChainClientError):
                    return self._success(strategy, outcome, contract)
                outcomes.append(outcome)

        raise self._aggregate_error(contract, outcomes)

    async def _attempt_all(
        self,
        chain: BaseChainClient,
        account: str,
        contract: str,
    ) -> list[int | ChainClientError]:
        """Run every strategy at once; an unexpected error cancels the rest."""
        tasks = [
            asyncio.create_task(self._attempt(s, chain, account, contract))
            for s in self.strategies
        ]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _attempt(
        self,
        strategy: BalanceStrategy,
        chain: BaseChainClient,
        account: str,
        contract: str,
    ) -> int | ChainClientError:
        """Run one strategy; chain failures are returned rather than raised."""
        try:
            return await asyncio.wait_for(
                strategy.probe(chain, account, contract),
                timeout=self.call_timeout,
            )
        except TimeoutError:
            error: ChainClientError = RpcTimeoutError(
                f"{strategy.tag.value} timed out after {self.call_timeout}s"
            )
        except ChainClientError as e:
            error = e

        logger.debug(
            "probe_strategy_failed",
            standard=strategy.tag.value,
            contract=contract,
            error_type=type(error).__name__,
            error=str(error),
        )
        return error

    def _success(
        self,
        strategy: BalanceStrategy,
        balance: int,
        contract: str,
    ) -> StandardProbeResult:
        logger.info(
            "probe_standard_detected",
            standard=strategy.tag.value,
            contract=contract,
            raw_balance=balance,
        )
        return StandardProbeResult(standard=strategy.tag, raw_balance=balance)

    def _aggregate_error(
        self,
        contract: str,
        errors: Sequence[ChainClientError],
    ) -> Exception:
        # Transport failures on every strategy: the contract was never reached
        if all(isinstance(e, RpcError) for e in errors):
            if all(isinstance(e, RpcTimeoutError) for e in errors):
                return RpcTimeoutError(f"All balance strategies timed out for {contract}")
            return RpcError(f"All balance strategies failed in transport for {contract}")

        failures = {
            strategy.tag.value: f"{type(error).__name__}: {error}"
            for strategy, error in zip(self.strategies, errors, strict=True)
        }
        logger.info("probe_no_matching_standard", contract=contract, tried=list(failures))
        return NoMatchingStandardError(contract, failures)
