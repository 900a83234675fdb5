"""Wikipedia implementation of the knowledge source interface."""

import asyncio
import logging
import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

import wikipediaapi
from cachetools import TTLCache
from pydantic import BaseModel, Field

from ...domain.models.claim import Domain
from ...domain.models.knowledge import SourceQuery, SourceResult
from ...domain.models.source import Source, SourceKind
from ...domain.ports.knowledge_source import KnowledgeSource

logger = logging.getLogger(__name__)

NEGATION_PATTERNS = [
    "not",
    "never",
    "no",
    "false",
    "incorrect",
    "wrong",
    "isn't",
    "wasn't",
    "aren't",
    "weren't",
    "doesn't",
    "didn't",
    "cannot",
    "can't",
    "won't",
    "wouldn't",
]


class WikipediaSourceConfig(BaseModel):
    """Configuration for the Wikipedia knowledge source."""

    user_agent: str = Field(
        default="FactFusion/1.0",
        description="User agent for Wikipedia API"
    )
    language: str = Field(default="en", description="Wikipedia language edition")
    cache_ttl: int = Field(default=3600, description="Cache TTL in seconds")
    cache_maxsize: int = Field(default=1000, description="Maximum cache size")
    min_relevance: float = Field(default=0.3, description="Minimum page relevance (0-1)")
    enabled: bool = Field(default=True, description="Whether the source answers queries")


@dataclass(frozen=True)
class WikipediaHit:
    """A Wikipedia page judged relevant to a statement."""

    title: str
    url: str
    summary: str
    relevance: float


class WikipediaKnowledgeSource(KnowledgeSource):
    """Wikipedia implementation of the knowledge source interface.

    Pages are looked up by the statement itself and by its key terms, kept
    when their title and summary overlap the statement enough, and cached
    with a TTL. Wikipedia is broadly reliable but not authoritative, and
    less so for legal and medical content.
    """

    BASE_RELIABILITY = 75
    DOMAIN_RELIABILITY: Dict[Domain, float] = {
        Domain.HEALTHCARE: 70,
        Domain.FINANCIAL: 75,
        Domain.LEGAL: 65,
        Domain.INSURANCE: 70,
    }

    def __init__(
        self,
        config: Optional[WikipediaSourceConfig] = None,
        source_name: str = "Wikipedia",
    ):
        """Initialize the source.

        Args:
            config: Source configuration
            source_name: Name of the source
        """
        self._config = config or WikipediaSourceConfig()
        self._name = source_name
        self._wiki = None
        self._initialized = False
        self._cache = TTLCache(
            maxsize=self._config.cache_maxsize,
            ttl=self._config.cache_ttl
        )
        # TTLCache is not thread-safe and _search runs in worker threads
        self._cache_lock = threading.Lock()

    async def initialize(self) -> None:
        """Initialize the Wikipedia API client."""
        try:
            self._wiki = wikipediaapi.Wikipedia(
                language=self._config.language,
                user_agent=self._config.user_agent,
            )
            self._initialized = True
        except Exception as e:
            self._initialized = False
            self._wiki = None
            raise ConnectionError(f"Failed to initialize Wikipedia source: {e}")

    async def shutdown(self) -> None:
        """Release the API client."""
        self._wiki = None
        self._initialized = False
        with self._cache_lock:
            self._cache.clear()

    @property
    def name(self) -> str:
        return self._name

    @property
    def reliability(self) -> float:
        return self.BASE_RELIABILITY

    @property
    def capabilities(self) -> Dict[str, bool]:
        return {
            "batch_query": False,
            "contradiction_detection": True,
            "caching": True,
        }

    def reliability_for_domain(self, domain: Domain) -> float:
        return self.DOMAIN_RELIABILITY.get(domain, self.BASE_RELIABILITY)

    async def is_available(self) -> bool:
        return self._config.enabled and self._initialized and self._wiki is not None

    async def query(self, query: SourceQuery) -> SourceResult:
        """Look the statement up on Wikipedia.

        Args:
            query: Statement, domain and limits

        Returns:
            Pages found as sources, their summaries as evidence; an empty
            result when the source is disabled or the lookup fails
        """
        start = time.perf_counter()

        if not await self.is_available():
            return SourceResult.empty(self._elapsed_ms(start))

        try:
            hits = await asyncio.to_thread(self._search, query.statement, query.max_results)
        except Exception as e:
            logger.warning(f"⚠️ Wikipedia query failed: {e}")
            return SourceResult.empty(self._elapsed_ms(start))

        credibility = (
            self.reliability_for_domain(query.domain) if query.domain else self.reliability
        )
        verified_at = datetime.now(timezone.utc)
        sources = [
            Source(
                id=f"wikipedia-{hit.title.replace(' ', '_')}",
                name=self._name,
                title=hit.title,
                url=hit.url,
                kind=SourceKind.ENCYCLOPEDIA,
                credibility_score=credibility,
                last_verified=verified_at,
            )
            for hit in hits
        ]

        confidence = self._calculate_confidence(hits, query.statement)
        contradictions = [
            hit.summary for hit in hits
            if self._find_contradictions(hit.summary, query.statement)
        ]

        logger.info(f"📚 Wikipedia found {len(hits)} pages, confidence {confidence}")
        return SourceResult(
            sources=sources,
            confidence=confidence,
            query_time_ms=self._elapsed_ms(start),
            is_supported=confidence > 60,
            evidence=[hit.summary for hit in hits],
            contradictions=contradictions,
        )

    def _search(self, statement: str, max_results: int) -> List[WikipediaHit]:
        """Find relevant pages; runs in a worker thread."""
        cache_key = f"search:{self._config.language}:{statement}:{max_results}"
        with self._cache_lock:
            cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        query = self._preprocess_query(statement)
        candidates = [query] + [term for term in query.split() if len(term) > 3]

        hits = []
        seen_titles: Set[str] = set()
        for candidate in candidates:
            if len(hits) >= max_results:
                break

            page = self._wiki.page(candidate)
            if not page.exists() or page.title in seen_titles:
                continue

            summary = page.summary[:500]
            relevance = self._calculate_relevance(query, page.title, summary)
            if relevance >= self._config.min_relevance:
                hits.append(
                    WikipediaHit(
                        title=page.title,
                        url=page.fullurl,
                        summary=summary,
                        relevance=relevance,
                    )
                )
                seen_titles.add(page.title)

        hits.sort(key=lambda hit: hit.relevance, reverse=True)
        with self._cache_lock:
            self._cache[cache_key] = hits
        return hits

    def _preprocess_query(self, query: str) -> str:
        """Remove special characters and normalize whitespace."""
        query = re.sub(r'[^\w\s]', ' ', query)
        return ' '.join(query.split())

    def _calculate_relevance(self, query: str, title: str, summary: str) -> float:
        """Weighted share of query terms found in the title (60%) and summary (40%)."""
        query = query.lower()
        title = title.lower()

        query_terms = set(re.findall(r'\w+', query))
        if not query_terms:
            return 0.0

        title_matches = len(query_terms.intersection(re.findall(r'\w+', title)))
        summary_matches = len(query_terms.intersection(re.findall(r'\w+', summary.lower())))

        score = (
            (title_matches / len(query_terms)) * 0.6 +
            (summary_matches / len(query_terms)) * 0.4
        )

        # Boost exact matches
        if query in title:
            score = min(1.0, score * 1.5)

        return min(1.0, score)

    def _calculate_confidence(self, hits: List[WikipediaHit], statement: str) -> int:
        if not hits:
            return 0
        base = min(len(hits) * 20, 80)
        detail_bonus = 10 if len(statement.split()) > 3 else 0
        return min(base + detail_bonus, 95)

    def _find_contradictions(self, text: str, statement: str) -> bool:
        """Detect negations around the statement or explicit contrast markers."""
        text = text.lower()
        statement = statement.lower().rstrip('.')

        for pattern in NEGATION_PATTERNS:
            if f"{pattern} {statement}" in text or f"{statement} {pattern}" in text:
                return True

        if "contrary to" in text or "opposed to" in text or "unlike" in text:
            if statement in text:
                return True

        return False

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return max(1, int((time.perf_counter() - start) * 1000))
