"""
In-memory content repository for development and tests.

Records live only for the life of the process.
"""

import asyncio

from tokengate.errors import ContentNotFoundError, DuplicateContentError
from tokengate.models.content import ContentRecord
from tokengate.repositories.base import ContentRepository


class InMemoryContentRepository(ContentRepository):
    """Content store held in a dict, with inserts serialized by a lock."""

    def __init__(self) -> None:
        super().__init__()
        self._records: dict[str, ContentRecord] = {}
        self._lock = asyncio.Lock()

    async def _lookup(self, token: str) -> ContentRecord:
        record = self._records.get(token)
        if record is None:
            raise ContentNotFoundError(token)
        return record

    async def _insert(self, record: ContentRecord) -> ContentRecord:
        async with self._lock:
            if record.token_address in self._records:
                raise DuplicateContentError(record.token_address)
            self._records[record.token_address] = record
        self.logger.info(
            "content_stored",
            token_address=record.token_address,
            content_id=record.id,
        )
        return record

    async def _exists(self, token: str) -> bool:
        return token in self._records
