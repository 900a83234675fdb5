"""Service for verifying the factual claims of a document.

Every claim is checked against the internal knowledge store and against
external sources through the source manager. The two verdicts are blended
with fixed trust weights (internal 60%, external 40%) and the claim is
either verified or reported as an issue. Per-claim results are rolled up
into one document-level confidence.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
from uuid import uuid4

from ..exceptions import FactCheckError
from ..models.claim import Claim, Domain
from ..models.fact_check_result import (
    FactCheckRequest,
    FactCheckResult,
    FactualIssue,
    IssueKind,
    VerificationMethod,
    VerifiedClaim,
)
from ..models.knowledge import (
    ConsolidatedResult,
    KnowledgeStoreVerdict,
    SourceQuery,
    clamp_score,
    round_half_up,
)
from ..models.source import Feedback, Source
from ..ports.claim_extractor import ClaimExtractor
from ..ports.knowledge_store import KnowledgeStore
from .source_manager import SourceManager

logger = logging.getLogger(__name__)

# Blend of internal and external confidence, in percent.
INTERNAL_WEIGHT = 60
EXTERNAL_WEIGHT = 40

STRICT_CONFIDENCE_THRESHOLD = 80
STANDARD_CONFIDENCE_THRESHOLD = 60

CONTRADICTED_SEVERITY = 0.8
UNSUPPORTED_SEVERITY = 0.6
UNVERIFIED_CLAIM_WEIGHT = 0.5

EXTERNAL_MAX_RESULTS = 3
EXTERNAL_TIMEOUT = 5.0
DEFAULT_MAX_CONCURRENT_CLAIMS = 8


@dataclass
class ClaimOutcome:
    """Verdict for one claim: exactly one of issue or verified_claim is set."""

    issue: Optional[FactualIssue] = None
    verified_claim: Optional[VerifiedClaim] = None
    sources: List[str] = field(default_factory=list)


def combine_confidence(internal_confidence: float, external_confidence: float) -> int:
    """Blend internal and external confidence with fixed trust weights."""
    return round_half_up(
        (internal_confidence * INTERNAL_WEIGHT + external_confidence * EXTERNAL_WEIGHT) / 100
    )


def document_confidence(
    issues: Sequence[FactualIssue],
    verified_claims: Sequence[VerifiedClaim],
    total_claims: int,
) -> int:
    """Roll claim verdicts up into one document confidence (0-100).

    Issues count against the document weighted by severity, verified
    claims count for it, and claims with neither verdict count as neutral.
    """
    if total_claims == 0:
        return 100

    issue_weight = sum(
        issue.confidence / 100
        * (CONTRADICTED_SEVERITY if issue.kind == IssueKind.CONTRADICTED_CLAIM else UNSUPPORTED_SEVERITY)
        for issue in issues
    )
    verified_weight = sum(claim.confidence / 100 for claim in verified_claims)
    unverified_count = max(0, total_claims - len(issues) - len(verified_claims))
    unverified_weight = unverified_count * UNVERIFIED_CLAIM_WEIGHT

    total_weight = issue_weight + verified_weight + unverified_weight
    if total_weight <= 0:
        return 0

    confidence = (verified_weight + unverified_weight) / total_weight * 100
    return round_half_up(clamp_score(confidence))


def _suggest_correction(candidates: Iterable[Source]) -> Optional[str]:
    candidates = list(candidates)
    if not candidates:
        return None
    best = max(candidates, key=lambda source: source.credibility_score or 0)
    return f"Consider verifying against: {best.title}"


class FactVerifier:
    """Orchestrates claim extraction, internal and external verification.

    Usage:
        verifier = FactVerifier(store, extractor, source_manager)
        result = await verifier.check(FactCheckRequest(content=text))
    """

    def __init__(
        self,
        knowledge_store: KnowledgeStore,
        claim_extractor: ClaimExtractor,
        source_manager: Optional[SourceManager] = None,
        max_concurrent_claims: int = DEFAULT_MAX_CONCURRENT_CLAIMS,
        external_max_results: int = EXTERNAL_MAX_RESULTS,
        external_timeout: float = EXTERNAL_TIMEOUT,
    ):
        """Initialize the verifier.

        Args:
            knowledge_store: Internal knowledge store
            claim_extractor: Turns document text into claims
            source_manager: External sources; an empty manager by default
            max_concurrent_claims: Upper bound on claims verified at once
            external_max_results: ``max_results`` sent to external sources
            external_timeout: Per-source timeout in seconds
        """
        self._knowledge_store = knowledge_store
        self._claim_extractor = claim_extractor
        self._source_manager = source_manager or SourceManager()
        self._max_concurrent_claims = max(1, max_concurrent_claims)
        self._external_max_results = external_max_results
        self._external_timeout = external_timeout
        logger.info("🔧 FactVerifier initialized")

    @property
    def source_manager(self) -> SourceManager:
        return self._source_manager

    async def check(self, request: FactCheckRequest) -> FactCheckResult:
        """Fact check a document.

        Args:
            request: Document text, domain and strictness

        Returns:
            Issues, verified claims and the document confidence

        Raises:
            FactCheckError: If claim extraction or the knowledge store fails
        """
        start = time.perf_counter()
        verification_id = str(uuid4())
        logger.info(f"🔍 Starting fact check {verification_id} ({len(request.content)} chars)")

        try:
            claims = await self._claim_extractor.extract(request.content, request.domain)
            logger.info(f"📝 Extracted {len(claims)} claims")
            outcomes = await self._verify_claims(claims, request.domain, request.strict_mode)
        except Exception as e:
            logger.error(f"❌ Fact check {verification_id} failed: {e}")
            raise FactCheckError(f"Fact checking failed: {e}") from e

        issues = [outcome.issue for outcome in outcomes if outcome.issue]
        verified_claims = [outcome.verified_claim for outcome in outcomes if outcome.verified_claim]
        sources_used = list(dict.fromkeys(
            source_id for outcome in outcomes for source_id in outcome.sources
        ))

        result = FactCheckResult(
            verification_id=verification_id,
            overall_confidence=document_confidence(issues, verified_claims, len(claims)),
            issues=issues,
            verified_claims=verified_claims,
            processing_time_ms=int((time.perf_counter() - start) * 1000),
            sources_used=sources_used,
        )
        logger.info(
            f"✅ Fact check complete: {len(verified_claims)} verified, {len(issues)} issues, "
            f"confidence {result.overall_confidence:.0f}"
        )
        return result

    async def extract_claim_statements(
        self,
        content: str,
        domain: Optional[Domain] = None,
    ) -> List[str]:
        """Return the statements of the claims found in ``content``."""
        claims = await self._claim_extractor.extract(content, domain)
        return [claim.statement for claim in claims]

    async def verify(self, statement: str, domain: Optional[Domain] = None) -> VerifiedClaim:
        """Verify a single statement against the internal knowledge store only."""
        verdict = await self._knowledge_store.verify(statement, domain)
        method = (
            VerificationMethod.KNOWLEDGE_BASE_MATCH
            if verdict.is_supported
            else VerificationMethod.KNOWLEDGE_BASE_SEARCH
        )
        return VerifiedClaim(
            statement=statement,
            confidence=verdict.confidence,
            sources=[source.id for source in verdict.supporting_sources],
            verification_method=method,
        )

    async def record_feedback(
        self,
        feedback: Feedback,
        source_ids: Sequence[str] = (),
        source_name: Optional[str] = None,
        domain: Optional[Domain] = None,
    ) -> None:
        """Feed a user's judgement back into source trust.

        Args:
            feedback: Whether the verdict was right
            source_ids: Internal knowledge store sources to adjust
            source_name: External source whose reliability to adjust
            domain: Restrict the external adjustment to one domain
        """
        for source_id in source_ids:
            await self._knowledge_store.update_credibility(source_id, feedback)
        if source_name is not None:
            self._source_manager.adjust_reliability(source_name, feedback, domain)

    async def _verify_claims(
        self,
        claims: Sequence[Claim],
        domain: Optional[Domain],
        strict_mode: bool,
    ) -> List[ClaimOutcome]:
        """Verify claims concurrently; outcomes keep the order of ``claims``."""
        semaphore = asyncio.Semaphore(self._max_concurrent_claims)

        async def _bounded(claim: Claim) -> ClaimOutcome:
            async with semaphore:
                return await self._verify_claim(claim, domain, strict_mode)

        tasks = [asyncio.create_task(_bounded(claim)) for claim in claims]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

    async def _verify_claim(
        self,
        claim: Claim,
        domain: Optional[Domain],
        strict_mode: bool,
    ) -> ClaimOutcome:
        internal = await self._knowledge_store.verify(claim.statement, domain)
        external = await self._source_manager.query_best(
            SourceQuery(
                statement=claim.statement,
                domain=domain,
                max_results=self._external_max_results,
                timeout=self._external_timeout,
            )
        )

        all_sources = [
            *(source.id for source in internal.supporting_sources),
            *(source.id for source in internal.contradicting_sources),
            *(source.id for source in external.sources),
        ]

        combined = combine_confidence(internal.confidence, external.overall_confidence)
        threshold = STRICT_CONFIDENCE_THRESHOLD if strict_mode else STANDARD_CONFIDENCE_THRESHOLD
        supported = internal.is_supported or external.is_supported

        if not supported or combined < threshold:
            logger.info(
                f"⚠️ Claim not verified (supported={supported}, confidence={combined}): "
                f"{claim.statement[:80]}"
            )
            return ClaimOutcome(
                issue=self._build_issue(claim, internal, external, combined, all_sources),
                sources=all_sources,
            )

        method = (
            VerificationMethod.COMBINED_INTERNAL_EXTERNAL
            if external.sources
            else VerificationMethod.KNOWLEDGE_BASE_VERIFICATION
        )
        verified = VerifiedClaim(
            statement=claim.statement,
            confidence=combined,
            sources=[
                *(source.id for source in internal.supporting_sources),
                *(source.id for source in external.sources),
            ],
            verification_method=method,
        )
        return ClaimOutcome(verified_claim=verified, sources=all_sources)

    @staticmethod
    def _build_issue(
        claim: Claim,
        internal: KnowledgeStoreVerdict,
        external: ConsolidatedResult,
        combined: int,
        all_sources: List[str],
    ) -> FactualIssue:
        contradicted = bool(internal.contradicting_sources or external.contradictions)
        evidence = [
            *(f"Internal: {source.title}" for source in internal.supporting_sources),
            *(f"Internal (contradicting): {source.title}" for source in internal.contradicting_sources),
            *(f"External: {item}" for item in external.evidence),
            *(f"External (contradicting): {item}" for item in external.contradictions),
        ]
        return FactualIssue(
            kind=IssueKind.CONTRADICTED_CLAIM if contradicted else IssueKind.UNSUPPORTED_CLAIM,
            statement=claim.statement,
            location=claim.location,
            confidence=max(claim.confidence, combined),
            evidence=evidence,
            sources=all_sources,
            suggested_correction=_suggest_correction(
                [*internal.supporting_sources, *external.sources]
            ),
        )
