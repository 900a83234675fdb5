"""Ports (interfaces) for collaborators of the fact verification core."""

from .claim_extractor import ClaimExtractor
from .knowledge_source import KnowledgeSource
from .knowledge_store import KnowledgeStore

__all__ = ["ClaimExtractor", "KnowledgeSource", "KnowledgeStore"]
