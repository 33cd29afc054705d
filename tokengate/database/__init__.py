"""
TokenGate Database Layer

Neo4j integration for the content store.
"""

from tokengate.database.client import Neo4jClient
from tokengate.database.schema import SchemaManager

__all__ = [
    "Neo4jClient",
    "SchemaManager",
]
