"""Domain services of the fact verification core."""

from .credibility_scorer import SourceCredibilityScorer
from .fact_verifier import FactVerifier, combine_confidence, document_confidence
from .reliability_model import ReliabilityModel, StepReliabilityModel
from .source_manager import NO_SOURCES_EVIDENCE, SourceManager
from .source_registry import RegisteredSource, SourceRegistry

__all__ = [
    "FactVerifier",
    "NO_SOURCES_EVIDENCE",
    "RegisteredSource",
    "ReliabilityModel",
    "SourceCredibilityScorer",
    "SourceManager",
    "SourceRegistry",
    "StepReliabilityModel",
    "combine_confidence",
    "document_confidence",
]
