"""In-memory knowledge store backed by word-overlap matching."""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ...domain.models.claim import Domain
from ...domain.models.knowledge import KnowledgeStoreVerdict
from ...domain.models.source import Feedback, Source, SourceKind

logger = logging.getLogger(__name__)

# Entries above this confidence count as supporting the statement.
SUPPORTING_ENTRY_THRESHOLD = 70
CREDIBILITY_STEP = 5
DEFAULT_MAX_RESULTS = 10


class KnowledgeEntry(BaseModel):
    """A fact held by the knowledge store, with the sources backing it."""

    id: str = Field(..., description="Entry identifier")
    statement: str = Field(..., description="The fact as a sentence")
    sources: List[Source] = Field(default_factory=list, description="Backing sources")
    confidence: float = Field(..., description="Confidence in the fact (0-100)")
    domain: Optional[Domain] = Field(None, description="Vertical the fact belongs to")
    last_verified: Optional[datetime] = Field(None, description="When the fact was last checked")
    tags: List[str] = Field(default_factory=list, description="Free-form labels")
    contradictions: List[str] = Field(
        default_factory=list,
        description="Statements known to contradict this fact",
    )

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return max(0.0, min(100.0, value))


class KnowledgeSearchResult(BaseModel):
    """Entries matching a statement and their average confidence."""

    entries: List[KnowledgeEntry] = Field(default_factory=list)
    confidence: float = Field(0, description="Average confidence of the matches")
    query_time_ms: int = Field(1, description="Search time in milliseconds")
    sources: List[Source] = Field(default_factory=list)


def _words(text: str) -> List[str]:
    return text.lower().split()


def _matches(statement_words: List[str], entry_words: List[str]) -> bool:
    """At least min(2, n) query words overlap an entry word as substrings."""
    if not statement_words:
        return False
    common = [
        word for word in statement_words
        if len(word) > 2 and any(word in other or other in word for other in entry_words)
    ]
    return len(common) >= min(2, len(statement_words))


class InMemoryKnowledgeStore:
    """Knowledge store that keeps entries and sources in dictionaries.

    Matching is lexical: a statement matches an entry when enough of its
    words overlap the entry's words. Source credibility changes made
    through ``update_credibility`` are visible to later verdicts.
    """

    def __init__(self):
        self._entries: Dict[str, KnowledgeEntry] = {}
        self._sources: Dict[str, Source] = {}

    @classmethod
    def with_sample_data(cls) -> "InMemoryKnowledgeStore":
        """Create a store seeded with a few healthcare and financial facts."""
        store = cls()
        seeded_at = datetime(2024, 1, 1, tzinfo=timezone.utc)

        medical_db = Source(
            id="src-1",
            title="Medical Research Database",
            kind=SourceKind.ACADEMIC,
            credibility_score=95,
            url="https://pubmed.ncbi.nlm.nih.gov",
            last_verified=seeded_at,
        )
        fda = Source(
            id="src-2",
            title="FDA Guidelines",
            kind=SourceKind.GOVERNMENT,
            credibility_score=98,
            url="https://www.fda.gov",
            last_verified=seeded_at,
        )
        finra = Source(
            id="src-3",
            title="Financial Industry Standards",
            kind=SourceKind.INDUSTRY,
            credibility_score=85,
            url="https://www.finra.org",
            last_verified=seeded_at,
        )

        for entry in (
            KnowledgeEntry(
                id="claim-1",
                statement="Aspirin reduces the risk of heart attack",
                sources=[medical_db, fda],
                confidence=92,
                domain=Domain.HEALTHCARE,
                last_verified=seeded_at,
                tags=["medication", "cardiovascular"],
            ),
            KnowledgeEntry(
                id="claim-2",
                statement="FDIC insurance covers deposits up to $250,000",
                sources=[finra],
                confidence=98,
                domain=Domain.FINANCIAL,
                last_verified=seeded_at,
                tags=["banking", "insurance"],
            ),
            KnowledgeEntry(
                id="claim-3",
                statement="HIPAA requires patient consent for data sharing",
                sources=[fda],
                confidence=95,
                domain=Domain.HEALTHCARE,
                last_verified=seeded_at,
                tags=["privacy", "compliance"],
            ),
        ):
            store.add_entry(entry)

        return store

    def add_entry(self, entry: KnowledgeEntry) -> None:
        """Add or replace an entry; its sources are registered if new."""
        self._entries[entry.id] = entry
        for source in entry.sources:
            self._sources.setdefault(source.id, source)

    def update_entry(self, entry_id: str, **updates) -> KnowledgeEntry:
        """Replace fields of an existing entry, validating the result.

        Raises:
            KeyError: If no entry has ``entry_id``
        """
        existing = self._entries.get(entry_id)
        if existing is None:
            raise KeyError(f"Entry with id {entry_id} not found")

        updated = KnowledgeEntry.model_validate({**existing.model_dump(), **updates})
        self._entries[entry_id] = updated
        return updated

    def get_entry(self, entry_id: str) -> Optional[KnowledgeEntry]:
        return self._entries.get(entry_id)

    async def search(
        self,
        statement: str,
        domain: Optional[Domain] = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> KnowledgeSearchResult:
        """Find entries sharing words with ``statement``, optionally in one domain."""
        start = time.perf_counter()
        statement_words = _words(statement)

        matched = [
            entry for entry in self._entries.values()
            if _matches(statement_words, _words(entry.statement))
            and (domain is None or entry.domain == domain)
        ][:max_results]

        confidence = (
            sum(entry.confidence for entry in matched) / len(matched) if matched else 0
        )
        return KnowledgeSearchResult(
            entries=matched,
            confidence=confidence,
            query_time_ms=max(1, int((time.perf_counter() - start) * 1000)),
            sources=[self._current(source) for entry in matched for source in entry.sources],
        )

    async def verify(
        self,
        statement: str,
        domain: Optional[Domain] = None,
    ) -> KnowledgeStoreVerdict:
        """Judge a statement from the entries that match it.

        Confident entries lend their sources as support. Other entries
        whose recorded contradictions mention the statement lend theirs
        as contradiction.
        """
        result = await self.search(statement, domain)
        needle = statement.lower()

        supporting: List[Source] = []
        contradicting: List[Source] = []
        for entry in result.entries:
            sources = [self._current(source) for source in entry.sources]
            if entry.confidence > SUPPORTING_ENTRY_THRESHOLD:
                supporting.extend(sources)
            elif any(needle in contradiction.lower() for contradiction in entry.contradictions):
                contradicting.extend(sources)

        logger.debug(
            f"Knowledge store matched {len(result.entries)} entries "
            f"({len(supporting)} supporting, {len(contradicting)} contradicting)"
        )
        return KnowledgeStoreVerdict(
            is_supported=len(supporting) > len(contradicting),
            confidence=result.confidence,
            supporting_sources=supporting,
            contradicting_sources=contradicting,
        )

    async def get_source_credibility(self, source_id: str) -> float:
        """Stored credibility of a source, 0 when unknown or unscored."""
        source = self._sources.get(source_id)
        if source is None or source.credibility_score is None:
            return 0
        return source.credibility_score

    async def update_credibility(self, source_id: str, feedback: Feedback) -> None:
        """Move a source's credibility by one step in the feedback direction.

        Raises:
            KeyError: If no source has ``source_id``
        """
        source = self._sources.get(source_id)
        if source is None:
            raise KeyError(f"Source with id {source_id} not found")

        step = CREDIBILITY_STEP if feedback == Feedback.POSITIVE else -CREDIBILITY_STEP
        score = max(0.0, min(100.0, (source.credibility_score or 0) + step))
        self._sources[source_id] = source.model_copy(
            update={"credibility_score": score, "last_verified": datetime.now(timezone.utc)}
        )
        logger.info(f"🔧 Credibility of {source.title} after {feedback.value} feedback: {score:.0f}")

    def _current(self, source: Source) -> Source:
        return self._sources.get(source.id, source)
