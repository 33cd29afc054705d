"""
Gated content models.

A content record is bound to exactly one token contract, keyed by the
lowercase form of the contract address.
"""

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import ConfigDict, Field, StringConstraints, field_validator

from tokengate.models.base import GateModel, convert_neo4j_datetime


# Trimmed on input; the body is stored exactly as written
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


class ContentBase(GateModel):
    """Fields supplied by the content author."""

    model_config = ConfigDict(str_strip_whitespace=False)

    title: TrimmedStr = Field(min_length=1, max_length=500)
    body: str = Field(min_length=1, max_length=100_000)


class ContentCreate(ContentBase):
    """Schema for creating gated content."""

    token_address: TrimmedStr = Field(
        description="Address of the token contract that unlocks the content"
    )


class ContentRecord(ContentBase):
    """A stored piece of gated content."""

    id: str
    token_address: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator('created_at', mode='before')
    @classmethod
    def convert_datetime(cls, v: Any) -> datetime:
        return convert_neo4j_datetime(v)


class ContentStatus(GateModel):
    """Whether a token has content, without revealing it."""

    token_address: str
    has_content: bool
