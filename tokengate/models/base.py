"""
Base Models and Common Types

Foundation classes for all TokenGate models.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


def convert_neo4j_datetime(value: Any) -> datetime:
    """Convert a Neo4j DateTime (or ISO string) to a timezone-aware datetime."""
    if value is None:
        return datetime.now(UTC)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
    # Handle Neo4j DateTime object
    if hasattr(value, 'to_native'):
        return value.to_native()
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    return value


class GateModel(BaseModel):
    """Base model for all TokenGate entities with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )
