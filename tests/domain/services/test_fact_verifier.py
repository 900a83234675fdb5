"""Tests for the fact verifier."""

import asyncio
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest
from conftest import StubSource, make_result, make_source

from fact_fusion.domain.exceptions import FactCheckError
from fact_fusion.domain.models.claim import Claim, ClaimLocation, Domain
from fact_fusion.domain.models.fact_check_result import (
    FactCheckRequest,
    FactualIssue,
    IssueKind,
    VerificationMethod,
    VerifiedClaim,
)
from fact_fusion.domain.models.knowledge import KnowledgeStoreVerdict
from fact_fusion.domain.models.source import Feedback, Source
from fact_fusion.domain.services.fact_verifier import (
    FactVerifier,
    combine_confidence,
    document_confidence,
)
from fact_fusion.domain.services.source_manager import SourceManager

STATEMENT = "Aspirin reduces the risk of heart attack"
INTERNAL_SOURCE = make_source("Medical Research Database", url="https://pubmed.ncbi.nlm.nih.gov", credibility_score=95)


def _store(
    is_supported: bool,
    confidence: float,
    supporting: Optional[List[Source]] = None,
    contradicting: Optional[List[Source]] = None,
) -> AsyncMock:
    store = AsyncMock()
    store.verify.return_value = KnowledgeStoreVerdict(
        is_supported=is_supported,
        confidence=confidence,
        supporting_sources=supporting or [],
        contradicting_sources=contradicting or [],
    )
    return store


def _extractor(*statements: str) -> AsyncMock:
    extractor = AsyncMock()
    extractor.extract.return_value = [
        Claim(statement=statement, location=ClaimLocation(start=i * 50, end=i * 50 + len(statement)))
        for i, statement in enumerate(statements)
    ]
    return extractor


def _manager_with(result_confidence: float, is_supported: bool, **kwargs) -> SourceManager:
    manager = SourceManager()
    manager.register(StubSource("External", reliability=90, result=make_result(
        result_confidence, is_supported, **kwargs
    )))
    return manager


def test_combine_confidence():
    assert combine_confidence(100, 0) == 60
    assert combine_confidence(75, 75) == 75
    assert combine_confidence(75, 44) == 63
    # 31.5 rounds half up
    assert combine_confidence(52.5, 0) == 32


def test_document_confidence():
    location = ClaimLocation(start=0, end=10)
    issue = FactualIssue(kind=IssueKind.CONTRADICTED_CLAIM, statement="x", location=location, confidence=80)
    verified = VerifiedClaim(
        statement="y",
        confidence=90,
        verification_method=VerificationMethod.KNOWLEDGE_BASE_VERIFICATION,
    )

    assert document_confidence([], [], 0) == 100
    assert document_confidence([issue], [verified], 2) == 58
    # One claim without a verdict counts as neutral
    assert document_confidence([], [], 1) == 100
    assert document_confidence([issue], [], 2) == 44


@pytest.mark.asyncio
async def test_strict_mode_turns_combined_75_into_issue():
    verifier = FactVerifier(
        _store(True, 75, supporting=[INTERNAL_SOURCE]),
        _extractor(STATEMENT),
        _manager_with(75, True, evidence=["Aspirin inhibits platelets"]),
    )

    result = await verifier.check(FactCheckRequest(content=STATEMENT, strict_mode=True))

    assert result.verified_claims == []
    assert len(result.issues) == 1
    issue = result.issues[0]
    assert issue.kind == IssueKind.UNSUPPORTED_CLAIM
    assert issue.confidence == 75
    assert issue.evidence == [
        "Internal: Medical Research Database",
        "External: Aspirin inhibits platelets",
    ]
    assert issue.suggested_correction == "Consider verifying against: Medical Research Database"
    assert result.overall_confidence == 0


@pytest.mark.asyncio
async def test_same_claim_verified_in_standard_mode():
    verifier = FactVerifier(
        _store(True, 75, supporting=[INTERNAL_SOURCE]),
        _extractor(STATEMENT),
        _manager_with(75, True, sources=[make_source("Aspirin", url="https://en.wikipedia.org/wiki/Aspirin")]),
    )

    result = await verifier.check(FactCheckRequest(content=STATEMENT))

    assert result.issues == []
    verified = result.verified_claims[0]
    assert verified.confidence == 75
    assert verified.verification_method == VerificationMethod.COMBINED_INTERNAL_EXTERNAL
    assert verified.sources == [INTERNAL_SOURCE.id, "aspirin"]
    assert result.sources_used == [INTERNAL_SOURCE.id, "aspirin"]


@pytest.mark.asyncio
async def test_internal_only_at_threshold_is_verified():
    verifier = FactVerifier(_store(True, 100, supporting=[INTERNAL_SOURCE]), _extractor(STATEMENT))

    result = await verifier.check(FactCheckRequest(content=STATEMENT))

    assert result.issues == []
    assert result.verified_claims[0].confidence == 60
    assert result.verified_claims[0].verification_method == VerificationMethod.KNOWLEDGE_BASE_VERIFICATION
    assert result.overall_confidence == 100


@pytest.mark.asyncio
async def test_unsupported_claim_is_issue_even_with_high_confidence():
    verifier = FactVerifier(_store(False, 100), _extractor(STATEMENT), _manager_with(90, False))

    result = await verifier.check(FactCheckRequest(content=STATEMENT))

    assert result.verified_claims == []
    assert result.issues[0].kind == IssueKind.UNSUPPORTED_CLAIM
    assert result.issues[0].confidence == 96


@pytest.mark.asyncio
async def test_contradicting_internal_source_marks_claim_contradicted():
    contradicting = make_source("Retracted Study", credibility_score=40)
    verifier = FactVerifier(_store(False, 30, contradicting=[contradicting]), _extractor(STATEMENT))

    result = await verifier.check(FactCheckRequest(content=STATEMENT))

    issue = result.issues[0]
    assert issue.kind == IssueKind.CONTRADICTED_CLAIM
    assert "Internal (contradicting): Retracted Study" in issue.evidence
    assert "External: No external sources available for verification" in issue.evidence
    assert issue.sources == [contradicting.id]
    assert issue.suggested_correction is None


@pytest.mark.asyncio
async def test_external_contradictions_mark_claim_contradicted():
    verifier = FactVerifier(
        _store(False, 0),
        _extractor(STATEMENT),
        _manager_with(40, False, contradictions=["Aspirin does not reduce risk"]),
    )

    result = await verifier.check(FactCheckRequest(content=STATEMENT))

    assert result.issues[0].kind == IssueKind.CONTRADICTED_CLAIM
    assert "External (contradicting): Aspirin does not reduce risk" in result.issues[0].evidence


@pytest.mark.asyncio
async def test_outcomes_keep_claim_order():
    statements = ["First claim is true", "Second claim is true", "Third claim is true"]
    delays = {statements[0]: 0.05, statements[1]: 0.0, statements[2]: 0.02}

    async def _verify(statement, domain=None):
        await asyncio.sleep(delays[statement])
        return KnowledgeStoreVerdict(is_supported=True, confidence=100, supporting_sources=[INTERNAL_SOURCE])

    store = AsyncMock()
    store.verify.side_effect = _verify
    verifier = FactVerifier(store, _extractor(*statements), max_concurrent_claims=2)

    result = await verifier.check(FactCheckRequest(content=" ".join(statements)))

    assert [claim.statement for claim in result.verified_claims] == statements
    assert result.sources_used == [INTERNAL_SOURCE.id]


@pytest.mark.asyncio
async def test_no_claims_gives_full_confidence():
    verifier = FactVerifier(_store(False, 0), _extractor())

    result = await verifier.check(FactCheckRequest(content="Hello there"))

    assert result.overall_confidence == 100
    assert result.issues == []
    assert result.verified_claims == []


@pytest.mark.asyncio
async def test_extraction_failure_raises_fact_check_error():
    extractor = AsyncMock()
    extractor.extract.side_effect = ValueError("bad input")
    verifier = FactVerifier(_store(True, 90), extractor)

    with pytest.raises(FactCheckError, match="Fact checking failed: bad input") as exc_info:
        await verifier.check(FactCheckRequest(content=STATEMENT))

    assert isinstance(exc_info.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_store_failure_raises_fact_check_error():
    store = AsyncMock()
    store.verify.side_effect = RuntimeError("store offline")
    verifier = FactVerifier(store, _extractor(STATEMENT))

    with pytest.raises(FactCheckError, match="store offline"):
        await verifier.check(FactCheckRequest(content=STATEMENT))


@pytest.mark.asyncio
async def test_domain_is_passed_to_collaborators():
    store = _store(True, 90)
    extractor = _extractor(STATEMENT)
    manager = _manager_with(80, True)
    verifier = FactVerifier(store, extractor, manager, external_max_results=2, external_timeout=1.5)

    await verifier.check(FactCheckRequest(content=STATEMENT, domain=Domain.HEALTHCARE))

    extractor.extract.assert_awaited_once_with(STATEMENT, Domain.HEALTHCARE)
    store.verify.assert_awaited_once_with(STATEMENT, Domain.HEALTHCARE)
    query = manager.registry.get("External").queries[0]
    assert query.domain == Domain.HEALTHCARE
    assert query.max_results == 2
    assert query.timeout == 1.5


@pytest.mark.asyncio
async def test_verify_uses_internal_store_only():
    manager = _manager_with(90, True)
    verifier = FactVerifier(_store(True, 92, supporting=[INTERNAL_SOURCE]), _extractor(), manager)

    verified = await verifier.verify(STATEMENT)

    assert verified.confidence == 92
    assert verified.sources == [INTERNAL_SOURCE.id]
    assert verified.verification_method == VerificationMethod.KNOWLEDGE_BASE_MATCH
    assert manager.registry.get("External").queries == []

    unsupported = FactVerifier(_store(False, 10), _extractor())
    assert (await unsupported.verify(STATEMENT)).verification_method == VerificationMethod.KNOWLEDGE_BASE_SEARCH


@pytest.mark.asyncio
async def test_extract_claim_statements():
    verifier = FactVerifier(_store(True, 90), _extractor("One is one", "Two is two"))
    assert await verifier.extract_claim_statements("text") == ["One is one", "Two is two"]


@pytest.mark.asyncio
async def test_record_feedback_updates_store_and_sources():
    store = _store(True, 90)
    manager = _manager_with(80, True)
    verifier = FactVerifier(store, _extractor(), manager)

    await verifier.record_feedback(
        Feedback.NEGATIVE,
        source_ids=["src-1", "src-2"],
        source_name="External",
        domain=Domain.LEGAL,
    )

    assert store.update_credibility.await_count == 2
    store.update_credibility.assert_any_await("src-2", Feedback.NEGATIVE)
    config = manager.get_reliability_config("External")
    assert config.domain_weights == {Domain.LEGAL: 0.85}
    assert config.base_weight == 0.9
