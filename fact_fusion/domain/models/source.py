"""Domain model for information sources used in verification."""

from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator


class SourceKind(str, Enum):
    """Broad category of an information source."""

    GOVERNMENT = "government"
    ACADEMIC = "academic"
    INDUSTRY = "industry"
    NEWS = "news"
    ENCYCLOPEDIA = "encyclopedia"
    INTERNAL = "internal"
    OTHER = "other"


class Feedback(str, Enum):
    """Direction of a trust adjustment."""

    POSITIVE = "positive"
    NEGATIVE = "negative"


class Source(BaseModel):
    """Represents a source used in verification."""

    id: str = Field(..., description="Stable identifier of the source")
    name: Optional[str] = Field(None, description="Display name of the provider")
    title: str = Field(..., description="Title or name of the source")
    url: Optional[str] = Field(None, description="URL of the source")
    kind: SourceKind = Field(SourceKind.OTHER, description="Source category")
    credibility_score: Optional[float] = Field(
        None,
        description="Stored credibility score (0-100)",
    )
    publish_date: Optional[datetime] = Field(None, description="When the source was published")
    last_verified: Optional[datetime] = Field(None, description="When the source was last verified")
    author: Optional[str] = Field(None, description="Author or issuing body")

    @field_validator("credibility_score")
    @classmethod
    def _clamp_credibility(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        return max(0.0, min(100.0, value))

    @property
    def identity(self) -> Tuple[str, SourceKind]:
        """Key used to collapse duplicate sources: url-or-title plus kind."""
        return (self.url or self.title, self.kind)


def deduplicate_sources(sources: Iterable[Source]) -> List[Source]:
    """Drop repeated sources, keeping the first occurrence of each identity."""
    seen = set()
    unique = []
    for source in sources:
        if source.identity in seen:
            continue
        seen.add(source.identity)
        unique.append(source)
    return unique
