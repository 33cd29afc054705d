"""
Content Repository Base

Abstract content store shared by the Neo4j and in-memory backends. Both
backends accept any letter case for token addresses and key records by the
canonical lowercase form.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from uuid import uuid4

import structlog

from tokengate.chains.addresses import canonicalize_address
from tokengate.errors import InputValidationError
from tokengate.models.content import ContentRecord

MAX_TITLE_LENGTH = 500
MAX_BODY_LENGTH = 100_000


def _require_text(field: str, value: object, max_length: int) -> str:
    """Reject missing, blank or oversized text; the value itself is returned untouched."""
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(field, f"{field} is required")
    if len(value) > max_length:
        raise InputValidationError(field, f"{field} exceeds {max_length} characters")
    return value


class ContentRepository(ABC):
    """
    Write-once store of gated content, one record per token contract.

    Subclasses implement the storage primitives; address canonicalization and
    field validation happen here, before any storage access.
    """

    def __init__(self) -> None:
        self.logger = structlog.get_logger(self.__class__.__name__)

    def _generate_id(self) -> str:
        """Generate a new unique ID."""
        return str(uuid4())

    def _now(self) -> datetime:
        """Get current UTC timestamp."""
        return datetime.now(UTC)

    def _new_record(self, token_address: str, title: str, body: str) -> ContentRecord:
        """Validate author input and build the record to insert."""
        token = canonicalize_address(token_address, field="token_address")
        return ContentRecord(
            id=self._generate_id(),
            token_address=token,
            title=_require_text("title", title, MAX_TITLE_LENGTH).strip(),
            body=_require_text("body", body, MAX_BODY_LENGTH),
            created_at=self._now(),
        )

    async def lookup(self, token_address: str) -> ContentRecord:
        """
        Get the content bound to a token.

        Raises:
            InputValidationError: If the address is malformed
            ContentNotFoundError: If the token has no content
        """
        return await self._lookup(canonicalize_address(token_address, field="token_address"))

    async def create(self, token_address: str, title: str, body: str) -> ContentRecord:
        """
        Store content for a token that has none.

        Raises:
            InputValidationError: If the address, title or body is invalid
            DuplicateContentError: If the token already has content
        """
        return await self._insert(self._new_record(token_address, title, body))

    async def exists(self, token_address: str) -> bool:
        """Check whether a token has content."""
        return await self._exists(canonicalize_address(token_address, field="token_address"))

    @abstractmethod
    async def _lookup(self, token: str) -> ContentRecord:
        pass

    @abstractmethod
    async def _insert(self, record: ContentRecord) -> ContentRecord:
        """Insert unless a record with the same token exists; check and insert are atomic."""
        pass

    @abstractmethod
    async def _exists(self, token: str) -> bool:
        pass
