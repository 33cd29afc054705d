"""
Neo4j Schema Manager

Creates the constraints and indexes the content store relies on. The
uniqueness constraint on ``token_address`` is what keeps the store at one
record per token when writers race.
"""

from typing import Any

import structlog
from neo4j.exceptions import (
    ClientError,
    ConstraintError,
    DatabaseError,
    ServiceUnavailable,
)

from tokengate.database.client import Neo4jClient

logger = structlog.get_logger(__name__)


CONSTRAINTS: list[tuple[str, str]] = [
    (
        "gatedcontent_token_unique",
        "CREATE CONSTRAINT gatedcontent_token_unique IF NOT EXISTS "
        "FOR (c:GatedContent) REQUIRE c.token_address IS UNIQUE"
    ),
    (
        "gatedcontent_id_unique",
        "CREATE CONSTRAINT gatedcontent_id_unique IF NOT EXISTS "
        "FOR (c:GatedContent) REQUIRE c.id IS UNIQUE"
    ),
]

INDEXES: list[tuple[str, str]] = [
    (
        "gatedcontent_created_idx",
        "CREATE INDEX gatedcontent_created_idx IF NOT EXISTS "
        "FOR (c:GatedContent) ON (c.created_at)"
    ),
]


class SchemaManager:
    """
    Manages Neo4j schema setup.

    All statements use IF NOT EXISTS, so ``setup_all`` is safe to re-run.
    Each statement runs in its own implicit transaction; a failure on one
    does not roll back the others.
    """

    def __init__(self, client: Neo4jClient):
        self.client = client

    async def setup_all(self) -> dict[str, bool]:
        """
        Set up all schema elements.

        Returns:
            Dict of schema element names to success status
        """
        results = {}
        results.update(await self.create_constraints())
        results.update(await self.create_indexes())

        logger.info(
            "schema_setup_complete",
            total=len(results),
            successful=sum(1 for v in results.values() if v),
            failed=sum(1 for v in results.values() if not v),
        )
        return results

    async def create_constraints(self) -> dict[str, bool]:
        """Create uniqueness constraints."""
        return await self._apply(CONSTRAINTS, "constraint")

    async def create_indexes(self) -> dict[str, bool]:
        """Create lookup indexes."""
        return await self._apply(INDEXES, "index")

    async def _apply(self, statements: list[tuple[str, str]], kind: str) -> dict[str, bool]:
        results = {}
        for name, query in statements:
            try:
                await self.client.execute(query)
                results[name] = True
                logger.debug("schema_element_created", kind=kind, name=name)
            except ConstraintError as e:
                # Existing data violates the constraint
                results[name] = False
                logger.warning("schema_constraint_conflict", kind=kind, name=name, error=str(e))
            except ClientError as e:
                results[name] = False
                logger.error("schema_client_error", kind=kind, name=name, error=str(e))
            except DatabaseError as e:
                results[name] = False
                logger.error("schema_database_error", kind=kind, name=name, error=str(e))
            except ServiceUnavailable as e:
                logger.critical("schema_database_unavailable", kind=kind, name=name, error=str(e))
                raise
        return results

    async def verify_schema(self) -> dict[str, Any]:
        """
        Verify that all required schema elements exist.

        Returns:
            Verification results with missing elements
        """
        expected_constraints = {name for name, _ in CONSTRAINTS}
        expected_indexes = {name for name, _ in INDEXES}

        constraints = await self.client.execute("SHOW CONSTRAINTS YIELD name RETURN name")
        existing_constraints = {c["name"] for c in constraints}

        indexes = await self.client.execute("SHOW INDEXES YIELD name, type RETURN name, type")
        existing_indexes = {i["name"] for i in indexes}

        missing_constraints = sorted(expected_constraints - existing_constraints)
        missing_indexes = sorted(expected_indexes - existing_indexes)

        return {
            "constraints": {
                "expected": len(expected_constraints),
                "found": len(existing_constraints & expected_constraints),
                "missing": missing_constraints,
            },
            "indexes": {
                "expected": len(expected_indexes),
                "found": len(existing_indexes & expected_indexes),
                "missing": missing_indexes,
            },
            "valid": not missing_constraints and not missing_indexes,
        }
