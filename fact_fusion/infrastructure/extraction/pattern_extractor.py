"""Regex-based extraction of checkable claims from plain text."""

import logging
import re
from typing import Dict, List, Optional

from ...domain.models.claim import Claim, ClaimLocation, ClaimType, Domain

logger = logging.getLogger(__name__)

FACTUAL_PATTERNS = [
    # Statistical
    re.compile(r"(\d+(?:\.\d+)?%?\s+(?:of|percent|percentage)\s+.+)", re.IGNORECASE),
    re.compile(r"(.+\s+(?:is|are|was|were)\s+\d+(?:\.\d+)?(?:%|percent|percentage)?)", re.IGNORECASE),
    # Definitive
    re.compile(r"(.+\s+(?:always|never|all|none|every|must|shall|will|cannot)\s+.+)", re.IGNORECASE),
    re.compile(r"(.+\s+(?:requires?|prohibits?|allows?|mandates?)\s+.+)", re.IGNORECASE),
    # Comparative
    re.compile(r"(.+\s+(?:more|less|higher|lower|better|worse|faster|slower)\s+than\s+.+)", re.IGNORECASE),
    re.compile(r"(.+\s+(?:increases?|decreases?|reduces?|improves?|worsens?)\s+.+)", re.IGNORECASE),
    # Medical and scientific
    re.compile(r"(.+\s+(?:causes?|prevents?|treats?|cures?|diagnoses?)\s+.+)", re.IGNORECASE),
    re.compile(r"(.+\s+(?:effective|ineffective|safe|unsafe|toxic|beneficial)\s+.+)", re.IGNORECASE),
    # Financial and regulatory
    re.compile(r"(.+\s+(?:complies?|violates?|meets?|exceeds?)\s+.+)", re.IGNORECASE),
    re.compile(r"(.+\s+(?:costs?|saves?|earns?|loses?)\s+\$?\d+)", re.IGNORECASE),
]

DOMAIN_KEYWORDS: Dict[Domain, List[str]] = {
    Domain.HEALTHCARE: [
        "patient", "medical", "treatment", "diagnosis",
        "medication", "therapy", "clinical", "health",
    ],
    Domain.FINANCIAL: [
        "investment", "return", "profit", "loss", "revenue",
        "cost", "price", "market", "financial",
    ],
    Domain.LEGAL: [
        "contract", "agreement", "liability", "compliance",
        "regulation", "law", "legal", "court",
    ],
    Domain.INSURANCE: [
        "policy", "coverage", "claim", "premium",
        "deductible", "benefit", "risk", "insurance",
    ],
}

COMMON_VERBS = [
    "is", "are", "was", "were", "has", "have", "had",
    "will", "would", "can", "could", "should", "must",
]

MIN_CLAIM_LENGTH = 10
MAX_CLAIM_LENGTH = 500
CONTEXT_RADIUS = 100
OVERLAP_DUPLICATE_RATIO = 0.8

PERCENT_RE = re.compile(r"\d+(?:\.\d+)?%")
REGULATORY_RE = re.compile(r"(?:requires?|prohibits?|mandates?|complies?|violates?)")
ABSOLUTE_RE = re.compile(r"(?:always|never|all|none|every)", re.IGNORECASE)
MODAL_RE = re.compile(r"(?:must|shall|will|cannot)", re.IGNORECASE)
HEDGE_RE = re.compile(r"(?:might|maybe|possibly|probably|likely)", re.IGNORECASE)
APPEARANCE_RE = re.compile(r"(?:seems?|appears?|suggests?)", re.IGNORECASE)


class PatternClaimExtractor:
    """Finds sentences that make checkable assertions.

    Every pattern is run over the whole text; candidates are filtered,
    classified, scored, de-duplicated and returned most confident first.
    """

    async def extract(self, content: str, domain: Optional[Domain] = None) -> List[Claim]:
        return self.extract_sync(content, domain)

    def extract_sync(self, content: str, domain: Optional[Domain] = None) -> List[Claim]:
        claims = []
        for pattern in FACTUAL_PATTERNS:
            for match in pattern.finditer(content):
                statement = match.group(1).strip()
                if not self._is_valid_claim(statement):
                    continue

                claims.append(
                    Claim(
                        statement=statement,
                        confidence=self._calculate_confidence(statement, domain),
                        location=self._get_location(content, match.start(), len(match.group(0))),
                        type=self._classify(statement, domain),
                        context=self._get_context(content, match.start()),
                    )
                )

        unique = self._deduplicate(claims)
        logger.debug(f"Extracted {len(unique)} claims from {len(claims)} candidates")
        return unique

    @staticmethod
    def _is_valid_claim(statement: str) -> bool:
        if not MIN_CLAIM_LENGTH <= len(statement) <= MAX_CLAIM_LENGTH:
            return False
        if "?" in statement:
            return False
        lower = statement.lower()
        return any(verb in lower for verb in COMMON_VERBS)

    @staticmethod
    def _get_location(text: str, start: int, length: int) -> ClaimLocation:
        lines = text[:start].split("\n")
        return ClaimLocation(
            start=start,
            end=start + length,
            line=len(lines),
            column=len(lines[-1]) + 1,
        )

    @staticmethod
    def _get_context(text: str, position: int) -> str:
        return text[max(0, position - CONTEXT_RADIUS):position + CONTEXT_RADIUS]

    @staticmethod
    def _classify(statement: str, domain: Optional[Domain]) -> ClaimType:
        lower = statement.lower()

        if PERCENT_RE.search(lower) or "percent" in lower:
            return ClaimType.STATISTICAL
        if REGULATORY_RE.search(lower):
            return ClaimType.REGULATORY

        if domain is not None and any(keyword in lower for keyword in DOMAIN_KEYWORDS[domain]):
            if domain == Domain.HEALTHCARE:
                return ClaimType.MEDICAL
            if domain == Domain.FINANCIAL:
                return ClaimType.FINANCIAL

        return ClaimType.FACTUAL

    @staticmethod
    def _calculate_confidence(statement: str, domain: Optional[Domain]) -> int:
        confidence = 50

        if PERCENT_RE.search(statement):
            confidence += 20
        if ABSOLUTE_RE.search(statement):
            confidence += 15
        if MODAL_RE.search(statement):
            confidence += 15

        if domain is not None:
            lower = statement.lower()
            confidence += 5 * sum(1 for keyword in DOMAIN_KEYWORDS[domain] if keyword in lower)

        if HEDGE_RE.search(statement):
            confidence -= 20
        if APPEARANCE_RE.search(statement):
            confidence -= 15

        return max(10, min(95, confidence))

    @staticmethod
    def _deduplicate(claims: List[Claim]) -> List[Claim]:
        unique: List[Claim] = []
        for claim in claims:
            if not any(PatternClaimExtractor._is_duplicate(existing, claim) for existing in unique):
                unique.append(claim)
        # sorted() is stable, so equal confidences keep discovery order
        return sorted(unique, key=lambda claim: claim.confidence, reverse=True)

    @staticmethod
    def _is_duplicate(existing: Claim, claim: Claim) -> bool:
        if existing.statement == claim.statement:
            return True

        a, b = existing.location, claim.location
        overlap = max(0, min(a.end, b.end) - max(a.start, b.start))
        shortest = min(a.end - a.start, b.end - b.start)
        if shortest <= 0:
            return False
        return overlap / shortest > OVERLAP_DUPLICATE_RATIO
