"""
TokenGate Repositories

Content store backends.
"""

from tokengate.repositories.base import ContentRepository
from tokengate.repositories.content_repository import Neo4jContentRepository
from tokengate.repositories.memory_repository import InMemoryContentRepository

__all__ = [
    "ContentRepository",
    "InMemoryContentRepository",
    "Neo4jContentRepository",
]
