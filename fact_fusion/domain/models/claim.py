"""Domain model for factual claims extracted from documents."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Domain(str, Enum):
    """Verticals with domain-specific reliability and authority rules."""

    HEALTHCARE = "healthcare"
    FINANCIAL = "financial"
    LEGAL = "legal"
    INSURANCE = "insurance"


class ClaimType(str, Enum):
    """Kinds of factual claims the extractor recognizes."""

    FACTUAL = "factual"
    STATISTICAL = "statistical"
    REGULATORY = "regulatory"
    MEDICAL = "medical"
    FINANCIAL = "financial"


class ClaimLocation(BaseModel):
    """Position of a claim inside the source text."""

    start: int = Field(..., description="Start character offset")
    end: int = Field(..., description="End character offset (exclusive)")
    line: Optional[int] = Field(None, description="1-based line number")
    column: Optional[int] = Field(None, description="1-based column number")

    class Config:
        """Pydantic model configuration."""
        frozen = True


class Claim(BaseModel):
    """Represents a factual statement to be verified."""

    statement: str = Field(..., description="The claim text to be verified")
    confidence: float = Field(50, description="Extraction confidence (0-100)")
    location: ClaimLocation = Field(
        default_factory=lambda: ClaimLocation(start=0, end=0),
        description="Where the claim appears in the document",
    )
    type: ClaimType = Field(ClaimType.FACTUAL, description="Claim classification")
    context: str = Field("", description="Text surrounding the claim")

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(100.0, value))

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "statement": "Aspirin reduces the risk of heart attack",
                "confidence": 65,
                "location": {"start": 0, "end": 40, "line": 1, "column": 1},
                "type": "medical",
                "context": "Aspirin reduces the risk of heart attack in adults.",
            }
        }
