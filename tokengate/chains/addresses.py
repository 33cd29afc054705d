"""
Address validation and canonicalization.

Token addresses are compared and stored in lowercase form so that letter-case
variations in client input (checksummed vs. plain) never cause a spurious
miss or a duplicate record.
"""

from web3 import Web3

from tokengate.errors import InputValidationError


def is_valid_address(value: object) -> bool:
    """Check that a value is a 20-byte hex address (checksum honoured if mixed-case)."""
    if not isinstance(value, str):
        return False
    return bool(Web3.is_address(value.strip()))


def canonicalize_address(value: object, field: str = "address") -> str:
    """
    Validate an address and return its canonical lowercase form.

    Raises:
        InputValidationError: If the value is not a syntactically valid address
    """
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(field, "address is required")
    candidate = value.strip()
    if not candidate.startswith(("0x", "0X")) or not is_valid_address(candidate):
        raise InputValidationError(field, f"invalid address {candidate!r}")
    return "0x" + candidate[2:].lower()


def to_checksum(address: str) -> str:
    """Return the EIP-55 checksummed form of an address."""
    return Web3.to_checksum_address(address)
