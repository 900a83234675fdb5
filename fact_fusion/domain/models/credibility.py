"""Domain models for source credibility assessments."""

from typing import List

from pydantic import BaseModel, Field


class CredibilityFactors(BaseModel):
    """Per-factor credibility scores, each 0-100."""

    source_kind: float
    recency: float
    author_credibility: float
    domain_relevance: float
    verification_history: float
    citation_weight: float


class CredibilityAssessment(BaseModel):
    """Outcome of assessing one source."""

    overall_score: int = Field(..., description="Weighted credibility score (0-100)")
    factors: CredibilityFactors
    reasoning: List[str] = Field(default_factory=list, description="Human-readable notes")
    confidence: int = Field(..., description="Trust in the assessment itself (0-95)")
