"""Domain models for document-level fact checking requests and results."""

from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from .claim import ClaimLocation, Domain
from .knowledge import clamp_score


class IssueKind(str, Enum):
    """Reason a claim failed verification."""

    UNSUPPORTED_CLAIM = "unsupported_claim"
    CONTRADICTED_CLAIM = "contradicted_claim"


class VerificationMethod(str, Enum):
    """How a verified claim was confirmed."""

    COMBINED_INTERNAL_EXTERNAL = "combined_internal_external"
    KNOWLEDGE_BASE_VERIFICATION = "knowledge_base_verification"
    KNOWLEDGE_BASE_MATCH = "knowledge_base_match"
    KNOWLEDGE_BASE_SEARCH = "knowledge_base_search"


class FactualIssue(BaseModel):
    """A claim that could not be verified or was contradicted."""

    id: str = Field(default_factory=lambda: str(uuid4()), description="Issue identifier")
    kind: IssueKind = Field(..., description="Issue classification")
    statement: str = Field(..., description="The offending claim")
    location: ClaimLocation = Field(..., description="Where the claim appears")
    confidence: float = Field(..., description="Confidence that this is an issue (0-100)")
    evidence: List[str] = Field(default_factory=list, description="Origin-tagged evidence")
    sources: List[str] = Field(default_factory=list, description="Source ids consulted")
    suggested_correction: Optional[str] = Field(None, description="Suggested next step")

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_score(value)


class VerifiedClaim(BaseModel):
    """A claim that passed verification."""

    statement: str = Field(..., description="The verified claim")
    confidence: float = Field(..., description="Verification confidence (0-100)")
    sources: List[str] = Field(default_factory=list, description="Supporting source ids")
    verification_method: VerificationMethod = Field(..., description="How it was verified")

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_score(value)


class FactCheckRequest(BaseModel):
    """Document-level verification request."""

    content: str = Field(..., description="Document text to check")
    domain: Optional[Domain] = Field(None, description="Vertical of the document")
    strict_mode: bool = Field(False, description="Raise the confidence bar for verification")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "content": "Aspirin reduces the risk of heart attack in adults.",
                "domain": "healthcare",
                "strict_mode": False,
            }
        }


class FactCheckResult(BaseModel):
    """Result of checking every claim of one document."""

    verification_id: str = Field(default_factory=lambda: str(uuid4()))
    overall_confidence: float = Field(..., description="Document confidence (0-100)")
    issues: List[FactualIssue] = Field(default_factory=list)
    verified_claims: List[VerifiedClaim] = Field(default_factory=list)
    processing_time_ms: int = Field(0, description="Processing duration in milliseconds")
    sources_used: List[str] = Field(default_factory=list, description="Every source id referenced")

    @field_validator("overall_confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_score(value)
