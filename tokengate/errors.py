"""
TokenGate exceptions.

Chain-level failures live in ``tokengate.chains.base_client``; this module
holds the content and gating errors raised by the store and the gate.
"""


class TokenGateError(Exception):
    """Base exception for gate and content store errors."""
    pass


class InputValidationError(TokenGateError, ValueError):
    """Raised when a request field is malformed or empty."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class ContentNotFoundError(TokenGateError):
    """Raised when no content is stored for a token address."""

    def __init__(self, token_address: str):
        self.token_address = token_address
        super().__init__(f"No content stored for token {token_address}")


class DuplicateContentError(TokenGateError):
    """Raised when content already exists for a token address."""

    def __init__(self, token_address: str):
        self.token_address = token_address
        super().__init__(f"Content already exists for token {token_address}")


class UnsupportedNetworkError(TokenGateError):
    """Raised when a chain id is outside the supported allow-list."""

    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        super().__init__(f"Chain id {chain_id} is not supported")


class NoMatchingStandardError(TokenGateError):
    """
    Raised when every balance strategy failed against a contract.

    ``failures`` maps each attempted standard tag to a short reason, in the
    order the strategies were tried.
    """

    def __init__(self, contract_address: str, failures: dict[str, str]):
        self.contract_address = contract_address
        self.failures = failures
        super().__init__(
            f"No balance strategy succeeded for {contract_address} "
            f"(tried: {', '.join(failures) or 'none'})"
        )
