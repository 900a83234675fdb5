"""Source credibility scoring.

Rates a source's trustworthiness from six weighted factors:

- Source kind (25%): fixed table, government highest
- Recency (15%): age of the last verification, falling back to publication
- Author credibility (20%): credential and affiliation markers
- Domain relevance (20%): authority allowlist per vertical
- Verification history (15%): the stored credibility score
- Citation weight (5%): estimated from the source kind

The scorer is pure apart from the clock used for recency, which can be
injected for testing.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from ..models.claim import Domain
from ..models.credibility import CredibilityAssessment, CredibilityFactors
from ..models.knowledge import clamp_score, round_half_up
from ..models.source import Feedback, Source, SourceKind

logger = logging.getLogger(__name__)

SOURCE_KIND_SCORES: Dict[SourceKind, float] = {
    SourceKind.GOVERNMENT: 95,
    SourceKind.ACADEMIC: 90,
    SourceKind.ENCYCLOPEDIA: 80,
    SourceKind.INDUSTRY: 75,
    SourceKind.INTERNAL: 70,
    SourceKind.NEWS: 60,
    SourceKind.OTHER: 50,
}

# Percentages of the overall score.
FACTOR_WEIGHTS: Dict[str, int] = {
    "source_kind": 25,
    "recency": 15,
    "author_credibility": 20,
    "domain_relevance": 20,
    "verification_history": 15,
    "citation_weight": 5,
}

DOMAIN_AUTHORITIES: Dict[Domain, List[str]] = {
    Domain.HEALTHCARE: [
        "nih.gov",
        "cdc.gov",
        "fda.gov",
        "who.int",
        "pubmed.ncbi.nlm.nih.gov",
        "nejm.org",
        "bmj.com",
        "thelancet.com",
        "jama.jamanetwork.com",
    ],
    Domain.FINANCIAL: [
        "sec.gov",
        "federalreserve.gov",
        "treasury.gov",
        "finra.org",
        "bloomberg.com",
        "reuters.com",
        "wsj.com",
        "ft.com",
    ],
    Domain.LEGAL: [
        "supremecourt.gov",
        "uscourts.gov",
        "justice.gov",
        "law.cornell.edu",
        "westlaw.com",
        "lexisnexis.com",
        "justia.com",
    ],
    Domain.INSURANCE: [
        "naic.org",
        "iii.org",
        "irmi.com",
        "riskandinsurance.com",
    ],
}

# (max age in days, score), checked in order
RECENCY_BUCKETS = [
    (30, 100),
    (90, 90),
    (365, 75),
    (1095, 60),
    (1825, 40),
]
OLDEST_RECENCY_SCORE = 20
UNKNOWN_DATE_SCORE = 30

# Checked in order; the first marker found wins.
AUTHOR_CREDENTIALS = [
    (("Dr.", "PhD"), 85),
    (("Prof.", "Professor"), 90),
    (("MD",), 88),
    (("JD",), 82),
]
INSTITUTIONAL_KEYWORDS = ["University", "Institute", "Department", "Center"]
INSTITUTIONAL_AUTHOR_SCORE = 80
NAMED_AUTHOR_SCORE = 60
ANONYMOUS_AUTHOR_SCORE = 50

AUTHORITATIVE_DOMAIN_SCORE = 95
NON_AUTHORITATIVE_DOMAIN_SCORE = 60
NEUTRAL_DOMAIN_SCORE = 70
DEFAULT_HISTORY_SCORE = 70

FEEDBACK_STEP = 5.0
MAX_ASSESSMENT_CONFIDENCE = 95


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SourceCredibilityScorer:
    """Computes credibility assessments for sources.

    Usage:
        scorer = SourceCredibilityScorer()
        assessment = scorer.assess(source, Domain.HEALTHCARE)
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """Initialize the scorer.

        Args:
            clock: Returns the current time; defaults to UTC now
        """
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def assess(self, source: Source, domain: Optional[Domain] = None) -> CredibilityAssessment:
        """Assess a source's credibility.

        Args:
            source: Source to assess
            domain: Vertical the source is being used for

        Returns:
            Overall score, factor breakdown, reasoning and assessment confidence
        """
        factors = CredibilityFactors(
            source_kind=self._score_kind(source.kind),
            recency=self._score_recency(source.publish_date, source.last_verified),
            author_credibility=self._score_author(source.author),
            domain_relevance=self._score_domain_relevance(source, domain),
            verification_history=self._score_history(source),
            citation_weight=self._score_citations(source),
        )

        assessment = CredibilityAssessment(
            overall_score=self._overall_score(factors),
            factors=factors,
            reasoning=self._reasoning(factors, source),
            confidence=self._assessment_confidence(factors),
        )
        logger.debug(f"📊 Credibility of {source.id}: {assessment.overall_score}")
        return assessment

    def update_from_feedback(
        self,
        current_score: float,
        feedback: Feedback,
        weight: float = 1.0,
    ) -> float:
        """Move a credibility score by 5 x ``weight`` in the feedback's direction."""
        step = FEEDBACK_STEP * weight
        adjustment = step if feedback == Feedback.POSITIVE else -step
        return clamp_score(current_score + adjustment)

    def rank(self, sources: Sequence[Source], domain: Optional[Domain] = None) -> List[Source]:
        """Sort sources by overall score, best first; ties keep input order."""
        scored = [(self.assess(source, domain).overall_score, source) for source in sources]
        scored.sort(key=lambda item: item[0], reverse=True)
        return [source for _, source in scored]

    def _score_kind(self, kind: SourceKind) -> float:
        return SOURCE_KIND_SCORES.get(kind, SOURCE_KIND_SCORES[SourceKind.OTHER])

    def _score_recency(
        self,
        publish_date: Optional[datetime],
        last_verified: Optional[datetime],
    ) -> float:
        relevant = last_verified or publish_date
        if relevant is None:
            return UNKNOWN_DATE_SCORE

        age_days = (_utc(self._clock()) - _utc(relevant)).total_seconds() / 86400
        for max_age, score in RECENCY_BUCKETS:
            if age_days <= max_age:
                return score
        return OLDEST_RECENCY_SCORE

    def _score_author(self, author: Optional[str]) -> float:
        if not author:
            return ANONYMOUS_AUTHOR_SCORE

        # TODO: look authors up in a credential registry instead of string markers
        for markers, score in AUTHOR_CREDENTIALS:
            if any(marker in author for marker in markers):
                return score

        if any(keyword in author for keyword in INSTITUTIONAL_KEYWORDS):
            return INSTITUTIONAL_AUTHOR_SCORE

        return NAMED_AUTHOR_SCORE

    def _score_domain_relevance(self, source: Source, domain: Optional[Domain]) -> float:
        if domain is None or not source.url:
            return NEUTRAL_DOMAIN_SCORE

        authorities = DOMAIN_AUTHORITIES.get(domain)
        if not authorities:
            return NEUTRAL_DOMAIN_SCORE

        url = source.url.lower()
        if any(pattern in url for pattern in authorities):
            return AUTHORITATIVE_DOMAIN_SCORE
        return NON_AUTHORITATIVE_DOMAIN_SCORE

    def _score_history(self, source: Source) -> float:
        if source.credibility_score is None:
            return DEFAULT_HISTORY_SCORE
        return source.credibility_score

    def _score_citations(self, source: Source) -> float:
        if source.kind == SourceKind.ACADEMIC:
            return 85
        if source.kind == SourceKind.GOVERNMENT:
            return 80
        return 60

    def _overall_score(self, factors: CredibilityFactors) -> int:
        values = factors.model_dump()
        total = sum(values[name] * weight for name, weight in FACTOR_WEIGHTS.items()) / 100
        return round_half_up(total)

    def _reasoning(self, factors: CredibilityFactors, source: Source) -> List[str]:
        reasoning = []

        if factors.source_kind >= 90:
            reasoning.append(f"High credibility source type: {source.kind.value}")
        elif factors.source_kind <= 60:
            reasoning.append(f"Lower credibility source type: {source.kind.value}")

        if factors.recency >= 90:
            reasoning.append("Very recent information")
        elif factors.recency <= 40:
            reasoning.append("Information may be outdated")

        if factors.author_credibility >= 85:
            reasoning.append("Author has strong credentials")
        elif factors.author_credibility <= 50:
            reasoning.append("Author credentials unknown or limited")

        if factors.domain_relevance >= 90:
            reasoning.append("Source is highly relevant to domain")
        elif factors.domain_relevance <= 60:
            reasoning.append("Source relevance to domain is limited")

        return reasoning

    def _assessment_confidence(self, factors: CredibilityFactors) -> int:
        confidence = 50
        if factors.author_credibility > 50:
            confidence += 15
        if factors.recency > 70:
            confidence += 15
        if factors.domain_relevance > 80:
            confidence += 10
        if factors.verification_history > 70:
            confidence += 10
        return min(MAX_ASSESSMENT_CONFIDENCE, confidence)
