"""Tests for the Wikipedia knowledge source."""

import asyncio
from typing import Dict, Tuple
from unittest.mock import MagicMock, patch

import pytest

from fact_fusion.domain.models.claim import Domain
from fact_fusion.domain.models.knowledge import SourceQuery
from fact_fusion.domain.models.source import SourceKind
from fact_fusion.infrastructure.sources.wikipedia_source import (
    WikipediaKnowledgeSource,
    WikipediaSourceConfig,
)

STATEMENT = "Aspirin reduces the risk of heart attack"

PAGES: Dict[str, Tuple[str, str]] = {
    "Aspirin": ("Aspirin", "Aspirin is a medication used to reduce the risk of heart attack."),
    "risk": ("Risk factor", "Smoking raises the risk of heart attack."),
    "heart": ("Heart attack", "Aspirin reduces the risk of a heart attack."),
}


def _page(title: str = "", summary: str = "", exists: bool = True) -> MagicMock:
    page = MagicMock()
    page.exists.return_value = exists
    page.title = title
    page.summary = summary
    page.fullurl = f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}"
    return page


def _fake_wiki(pages: Dict[str, Tuple[str, str]]) -> MagicMock:
    wiki = MagicMock()

    def _lookup(title):
        if title in pages:
            return _page(*pages[title])
        return _page(exists=False)

    wiki.page.side_effect = _lookup
    return wiki


def _source(pages: Dict[str, Tuple[str, str]] = PAGES, **config) -> WikipediaKnowledgeSource:
    source = WikipediaKnowledgeSource(WikipediaSourceConfig(**config))
    source._wiki = _fake_wiki(pages)
    source._initialized = True
    return source


@pytest.mark.asyncio
async def test_query_returns_relevant_pages():
    source = _source()

    result = await source.query(SourceQuery(statement=STATEMENT, domain=Domain.HEALTHCARE))

    assert [s.title for s in result.sources] == ["Heart attack", "Aspirin", "Risk factor"]
    assert all(s.kind == SourceKind.ENCYCLOPEDIA for s in result.sources)
    assert all(s.credibility_score == 70 for s in result.sources)
    assert result.sources[0].url == "https://en.wikipedia.org/wiki/Heart_attack"
    assert result.sources[0].id == "wikipedia-Heart_attack"
    assert result.confidence == 70
    assert result.is_supported is True
    assert result.evidence[0] == "Aspirin reduces the risk of a heart attack."
    assert result.contradictions == []


@pytest.mark.asyncio
async def test_query_respects_max_results():
    source = _source()

    result = await source.query(SourceQuery(statement=STATEMENT, max_results=1))

    assert len(result.sources) == 1
    assert result.confidence == 30
    assert result.is_supported is False
    assert result.sources[0].credibility_score == 75


@pytest.mark.asyncio
async def test_irrelevant_pages_are_dropped():
    source = _source({"Aspirin": ("Aspirin (band)", "A rock band from Ohio.")})

    result = await source.query(SourceQuery(statement=STATEMENT))

    assert result.sources == []
    assert result.confidence == 0


@pytest.mark.asyncio
async def test_contradictions_detected():
    source = _source({
        "Aspirin": (
            "Aspirin",
            "Contrary to popular belief, aspirin reduces the risk of heart attack only in some groups.",
        ),
    })

    result = await source.query(SourceQuery(statement=STATEMENT))

    assert len(result.contradictions) == 1


@pytest.mark.asyncio
async def test_results_are_cached():
    source = _source()
    query = SourceQuery(statement=STATEMENT)

    await source.query(query)
    calls = source._wiki.page.call_count
    await source.query(query)

    assert source._wiki.page.call_count == calls


@pytest.mark.asyncio
async def test_lookup_failure_returns_empty_result():
    source = _source()
    source._wiki.page.side_effect = RuntimeError("network down")

    result = await source.query(SourceQuery(statement=STATEMENT))

    assert result.sources == []
    assert result.confidence == 0
    assert result.query_time_ms >= 1


@pytest.mark.asyncio
async def test_disabled_or_uninitialized_source_is_unavailable():
    assert await WikipediaKnowledgeSource().is_available() is False

    disabled = _source(enabled=False)
    assert await disabled.is_available() is False
    result = await disabled.query(SourceQuery(statement=STATEMENT))
    assert result.sources == []
    disabled._wiki.page.assert_not_called()


@pytest.mark.asyncio
async def test_initialize_and_shutdown():
    source = WikipediaKnowledgeSource()
    with patch("fact_fusion.infrastructure.sources.wikipedia_source.wikipediaapi.Wikipedia") as wiki_cls:
        await source.initialize()

    wiki_cls.assert_called_once_with(language="en", user_agent="FactFusion/1.0")
    assert await source.is_available() is True

    await source.shutdown()
    assert await source.is_available() is False


@pytest.mark.asyncio
async def test_initialize_failure():
    source = WikipediaKnowledgeSource()
    with patch(
        "fact_fusion.infrastructure.sources.wikipedia_source.wikipediaapi.Wikipedia",
        side_effect=ValueError("bad user agent"),
    ):
        with pytest.raises(ConnectionError):
            await source.initialize()

    assert await source.is_available() is False


def test_reliability_per_domain():
    source = WikipediaKnowledgeSource()
    assert source.reliability == 75
    assert source.reliability_for_domain(Domain.HEALTHCARE) == 70
    assert source.reliability_for_domain(Domain.FINANCIAL) == 75
    assert source.reliability_for_domain(Domain.LEGAL) == 65
    assert source.reliability_for_domain(Domain.INSURANCE) == 70
    assert source.capabilities["batch_query"] is False


@pytest.mark.asyncio
async def test_concurrent_queries_share_a_small_cache():
    source = _source(cache_maxsize=2)
    statements = [f"{STATEMENT} number {i}" for i in range(16)]

    results = await asyncio.gather(
        *(source.query(SourceQuery(statement=statement)) for statement in statements)
    )

    assert all(result.sources for result in results)
    assert len(source._cache) <= 2
