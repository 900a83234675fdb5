"""Domain models."""

from .claim import Claim, ClaimLocation, ClaimType, Domain
from .credibility import CredibilityAssessment, CredibilityFactors
from .fact_check_result import (
    FactCheckRequest,
    FactCheckResult,
    FactualIssue,
    IssueKind,
    VerificationMethod,
    VerifiedClaim,
)
from .knowledge import (
    ConsolidatedResult,
    KnowledgeStoreVerdict,
    ReliabilityConfig,
    SourceQuery,
    SourceResult,
)
from .source import Feedback, Source, SourceKind, deduplicate_sources

__all__ = [
    "Claim",
    "ClaimLocation",
    "ClaimType",
    "ConsolidatedResult",
    "CredibilityAssessment",
    "CredibilityFactors",
    "Domain",
    "FactCheckRequest",
    "FactCheckResult",
    "FactualIssue",
    "Feedback",
    "IssueKind",
    "KnowledgeStoreVerdict",
    "ReliabilityConfig",
    "Source",
    "SourceKind",
    "SourceQuery",
    "SourceResult",
    "VerificationMethod",
    "VerifiedClaim",
    "deduplicate_sources",
]
