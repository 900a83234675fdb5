"""Tests for the in-memory knowledge store."""

import pytest

from fact_fusion.domain.models.claim import Domain
from fact_fusion.domain.models.source import Feedback, Source
from fact_fusion.infrastructure.knowledge.in_memory_store import (
    InMemoryKnowledgeStore,
    KnowledgeEntry,
)


@pytest.mark.asyncio
async def test_search_by_word_overlap(knowledge_store: InMemoryKnowledgeStore):
    result = await knowledge_store.search("aspirin heart attack")

    assert [entry.id for entry in result.entries] == ["claim-1"]
    assert result.confidence == 92
    assert [source.id for source in result.sources] == ["src-1", "src-2"]


@pytest.mark.asyncio
async def test_search_matches_substrings(knowledge_store: InMemoryKnowledgeStore):
    result = await knowledge_store.search("FDIC deposit coverage")
    assert [entry.id for entry in result.entries] == ["claim-2"]


@pytest.mark.asyncio
async def test_single_word_needs_one_hit(knowledge_store: InMemoryKnowledgeStore):
    result = await knowledge_store.search("HIPAA")
    assert [entry.id for entry in result.entries] == ["claim-3"]


@pytest.mark.asyncio
async def test_search_filters_by_domain(knowledge_store: InMemoryKnowledgeStore):
    result = await knowledge_store.search("aspirin heart attack", Domain.FINANCIAL)

    assert result.entries == []
    assert result.confidence == 0


@pytest.mark.asyncio
async def test_empty_statement_matches_nothing(knowledge_store: InMemoryKnowledgeStore):
    assert (await knowledge_store.search("")).entries == []


@pytest.mark.asyncio
async def test_verify_supported_statement(knowledge_store: InMemoryKnowledgeStore):
    verdict = await knowledge_store.verify("Aspirin reduces the risk of heart attack", Domain.HEALTHCARE)

    assert verdict.is_supported is True
    assert verdict.confidence == 92
    assert [source.id for source in verdict.supporting_sources] == ["src-1", "src-2"]
    assert verdict.contradicting_sources == []


@pytest.mark.asyncio
async def test_verify_contradicted_statement(knowledge_store: InMemoryKnowledgeStore):
    knowledge_store.add_entry(
        KnowledgeEntry(
            id="claim-4",
            statement="Vitamin C does not cure colds",
            sources=[Source(id="src-9", title="Cochrane Review", credibility_score=90)],
            confidence=40,
            domain=Domain.HEALTHCARE,
            contradictions=["Vitamin C cures colds"],
        )
    )

    verdict = await knowledge_store.verify("Vitamin C cures colds")

    assert verdict.is_supported is False
    assert verdict.confidence == 40
    assert [source.id for source in verdict.contradicting_sources] == ["src-9"]


@pytest.mark.asyncio
async def test_update_credibility_is_clamped_and_visible(knowledge_store: InMemoryKnowledgeStore):
    await knowledge_store.update_credibility("src-1", Feedback.POSITIVE)
    await knowledge_store.update_credibility("src-1", Feedback.POSITIVE)
    await knowledge_store.update_credibility("src-3", Feedback.NEGATIVE)

    assert await knowledge_store.get_source_credibility("src-1") == 100
    assert await knowledge_store.get_source_credibility("src-3") == 80

    verdict = await knowledge_store.verify("FDIC insurance covers deposits")
    source = verdict.supporting_sources[0]
    assert source.credibility_score == 80
    assert source.last_verified.year > 2024


@pytest.mark.asyncio
async def test_update_credibility_unknown_source(knowledge_store: InMemoryKnowledgeStore):
    with pytest.raises(KeyError):
        await knowledge_store.update_credibility("missing", Feedback.POSITIVE)
    assert await knowledge_store.get_source_credibility("missing") == 0


def test_update_entry(knowledge_store: InMemoryKnowledgeStore):
    updated = knowledge_store.update_entry("claim-1", confidence=50)

    assert updated.confidence == 50
    assert knowledge_store.get_entry("claim-1").confidence == 50
    with pytest.raises(KeyError):
        knowledge_store.update_entry("missing", confidence=10)


def test_update_entry_clamps_confidence(knowledge_store: InMemoryKnowledgeStore):
    assert knowledge_store.update_entry("claim-1", confidence=150).confidence == 100
    assert knowledge_store.update_entry("claim-2", confidence=-5).confidence == 0
    assert knowledge_store.get_entry("claim-1").confidence == 100
