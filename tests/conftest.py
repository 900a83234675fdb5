"""Test configuration and common fixtures."""

import asyncio
from typing import List, Optional

import pytest

from fact_fusion.domain.models.knowledge import SourceQuery, SourceResult
from fact_fusion.domain.models.source import Source, SourceKind
from fact_fusion.domain.ports.knowledge_source import KnowledgeSource
from fact_fusion.domain.services.source_manager import SourceManager
from fact_fusion.infrastructure.extraction.pattern_extractor import PatternClaimExtractor
from fact_fusion.infrastructure.knowledge.in_memory_store import InMemoryKnowledgeStore


class StubSource(KnowledgeSource):
    """Knowledge source returning a canned result."""

    def __init__(
        self,
        name: str = "Stub",
        reliability: float = 80,
        result: Optional[SourceResult] = None,
        available: bool = True,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ):
        self._name = name
        self._reliability = reliability
        self._result = result or SourceResult()
        self._available = available
        self._delay = delay
        self._error = error
        self.queries: List[SourceQuery] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def reliability(self) -> float:
        return self._reliability

    async def is_available(self) -> bool:
        return self._available

    async def query(self, query: SourceQuery) -> SourceResult:
        self.queries.append(query)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error:
            raise self._error
        return self._result


def make_source(title: str, url: Optional[str] = None, kind: SourceKind = SourceKind.OTHER, **kwargs) -> Source:
    """Build a source with an id derived from its title."""
    return Source(id=title.lower().replace(" ", "-"), title=title, url=url, kind=kind, **kwargs)


def make_result(confidence: float, is_supported: bool, **kwargs) -> SourceResult:
    return SourceResult(confidence=confidence, is_supported=is_supported, **kwargs)


@pytest.fixture
def source_manager() -> SourceManager:
    """Provide an empty source manager."""
    return SourceManager()


@pytest.fixture
def knowledge_store() -> InMemoryKnowledgeStore:
    """Provide a knowledge store seeded with sample facts."""
    return InMemoryKnowledgeStore.with_sample_data()


@pytest.fixture
def claim_extractor() -> PatternClaimExtractor:
    return PatternClaimExtractor()
