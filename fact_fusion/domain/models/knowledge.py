"""Domain models exchanged between the verifier, the source manager and knowledge sources."""

import math
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .claim import Domain
from .source import Source

# Weight assumed for a source that never had a reliability config registered.
DEFAULT_SOURCE_WEIGHT = 0.5


def clamp_weight(value: float) -> float:
    """Clamp a reliability weight to [0, 1]."""
    return max(0.0, min(1.0, value))


def clamp_score(value: float) -> float:
    """Clamp a confidence or credibility value to [0, 100]."""
    return max(0.0, min(100.0, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (62.5 -> 63)."""
    return int(math.floor(value + 0.5))


class SourceQuery(BaseModel):
    """Query sent to a knowledge source."""

    statement: str = Field(..., description="Statement to look up")
    domain: Optional[Domain] = Field(None, description="Vertical the statement belongs to")
    max_results: int = Field(3, description="Maximum number of sources to return")
    timeout: float = Field(5.0, description="Per-source timeout in seconds")

    class Config:
        """Pydantic model configuration."""
        frozen = True


class SourceResult(BaseModel):
    """Verdict returned by a single knowledge source."""

    sources: List[Source] = Field(default_factory=list, description="Sources found")
    confidence: float = Field(0, description="Confidence in the verdict (0-100)")
    query_time_ms: int = Field(1, description="Query duration in milliseconds")
    is_supported: bool = Field(False, description="Whether the statement is supported")
    evidence: List[str] = Field(default_factory=list, description="Supporting evidence")
    contradictions: List[str] = Field(default_factory=list, description="Contradicting evidence")

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_score(value)

    @field_validator("query_time_ms")
    @classmethod
    def _at_least_one_ms(cls, value: int) -> int:
        return max(1, value)

    @classmethod
    def empty(cls, query_time_ms: int = 1) -> "SourceResult":
        """Result reported by a source that could not answer."""
        return cls(query_time_ms=query_time_ms)


class ReliabilityConfig(BaseModel):
    """Trust configuration for one knowledge source.

    Instances are immutable; feedback produces a new config which replaces
    the old one in the registry, so a consolidation that captured the old
    instance keeps a consistent view.
    """

    source_name: str = Field(..., description="Name of the configured source")
    base_weight: float = Field(..., description="Default reliability weight (0-1)")
    domain_weights: Dict[Domain, float] = Field(
        default_factory=dict,
        description="Per-domain weight overrides (0-1)",
    )
    enabled: bool = Field(True, description="Whether the source takes part in queries")

    @field_validator("base_weight")
    @classmethod
    def _clamp_base_weight(cls, value: float) -> float:
        return clamp_weight(value)

    @field_validator("domain_weights")
    @classmethod
    def _clamp_domain_weights(cls, value: Dict[Domain, float]) -> Dict[Domain, float]:
        return {domain: clamp_weight(weight) for domain, weight in value.items()}

    class Config:
        """Pydantic model configuration."""
        frozen = True

    def weight_for(self, domain: Optional[Domain] = None) -> float:
        """Domain override when one exists, otherwise the base weight."""
        if domain is not None and domain in self.domain_weights:
            return self.domain_weights[domain]
        return self.base_weight

    def with_base_weight(self, weight: float) -> "ReliabilityConfig":
        return ReliabilityConfig(
            source_name=self.source_name,
            base_weight=weight,
            domain_weights=dict(self.domain_weights),
            enabled=self.enabled,
        )

    def with_domain_weight(self, domain: Domain, weight: float) -> "ReliabilityConfig":
        domain_weights = dict(self.domain_weights)
        domain_weights[domain] = weight
        return ReliabilityConfig(
            source_name=self.source_name,
            base_weight=self.base_weight,
            domain_weights=domain_weights,
            enabled=self.enabled,
        )


def effective_weight(
    config: Optional[ReliabilityConfig],
    domain: Optional[Domain] = None,
) -> float:
    """Weight a source's verdict carries for a query in ``domain``."""
    if config is None:
        return DEFAULT_SOURCE_WEIGHT
    return config.weight_for(domain)


class ConsolidatedResult(BaseModel):
    """Weighted union of the verdicts of several knowledge sources."""

    sources: List[Source] = Field(default_factory=list, description="Deduplicated sources")
    overall_confidence: float = Field(0, description="Weighted confidence (0-100)")
    is_supported: bool = Field(False, description="Weighted-majority support verdict")
    evidence: List[str] = Field(default_factory=list, description="Union of evidence")
    contradictions: List[str] = Field(default_factory=list, description="Union of contradictions")
    source_weights: Dict[str, float] = Field(
        default_factory=dict,
        description="Reliability weight used per source name",
    )
    query_time_ms: int = Field(1, description="Total duration in milliseconds")
    available_sources: List[str] = Field(default_factory=list, description="Sources that answered")
    unavailable_sources: List[str] = Field(
        default_factory=list,
        description="Sources skipped, failed or timed out",
    )

    @field_validator("overall_confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_score(value)

    @field_validator("query_time_ms")
    @classmethod
    def _at_least_one_ms(cls, value: int) -> int:
        return max(1, value)


class KnowledgeStoreVerdict(BaseModel):
    """Answer of the internal knowledge store for one statement."""

    is_supported: bool = Field(False, description="Whether the store supports the statement")
    confidence: float = Field(0, description="Confidence of the store (0-100)")
    supporting_sources: List[Source] = Field(default_factory=list)
    contradicting_sources: List[Source] = Field(default_factory=list)

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return clamp_score(value)
