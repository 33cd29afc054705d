"""
Neo4j Content Repository

Stores gated content as ``(:GatedContent)`` nodes keyed by token address.
"""

from typing import Any

from neo4j.exceptions import ConstraintError

from tokengate.database.client import Neo4jClient
from tokengate.errors import ContentNotFoundError, DuplicateContentError
from tokengate.models.content import ContentRecord
from tokengate.repositories.base import ContentRepository


class Neo4jContentRepository(ContentRepository):
    """
    Content store backed by Neo4j.

    Creation is a single MERGE on ``token_address`` so concurrent writers for
    one token cannot both insert; the uniqueness constraint from
    ``SchemaManager`` backs this up across clusters.
    """

    node_label = "GatedContent"

    def __init__(self, client: Neo4jClient):
        super().__init__()
        self.client = client

    def _to_model(self, record: dict[str, Any]) -> ContentRecord:
        return ContentRecord.model_validate(record)

    async def _lookup(self, token: str) -> ContentRecord:
        query = """
        MATCH (c:GatedContent {token_address: $token_address})
        RETURN c {.*} AS content
        LIMIT 1
        """
        result = await self.client.execute_single(query, {"token_address": token})
        if not result or not result.get("content"):
            raise ContentNotFoundError(token)
        return self._to_model(result["content"])

    async def _insert(self, record: ContentRecord) -> ContentRecord:
        query = """
        MERGE (c:GatedContent {token_address: $token_address})
        ON CREATE SET
            c.id = $id,
            c.title = $title,
            c.body = $body,
            c.created_at = $created_at
        RETURN c {.*} AS content, c.id = $id AS created
        """
        params = {
            "token_address": record.token_address,
            "id": record.id,
            "title": record.title,
            "body": record.body,
            "created_at": record.created_at.isoformat(),
        }

        try:
            result = await self.client.execute_single(query, params)
        except ConstraintError as e:
            raise DuplicateContentError(record.token_address) from e

        if not result or not result.get("created"):
            self.logger.info("content_create_rejected", token_address=record.token_address)
            raise DuplicateContentError(record.token_address)

        self.logger.info(
            "content_stored",
            token_address=record.token_address,
            content_id=record.id,
        )
        return self._to_model(result["content"])

    async def _exists(self, token: str) -> bool:
        query = """
        MATCH (c:GatedContent {token_address: $token_address})
        RETURN count(c) > 0 AS exists
        """
        result = await self.client.execute_single(query, {"token_address": token})
        return bool(result and result.get("exists"))
