"""Multi-source consensus over external knowledge sources."""

import asyncio
import logging
import time
from typing import List, Optional, Sequence, Tuple

from ..models.claim import Domain
from ..models.knowledge import (
    ConsolidatedResult,
    ReliabilityConfig,
    SourceQuery,
    SourceResult,
    effective_weight,
    round_half_up,
)
from ..models.source import Feedback, deduplicate_sources
from ..ports.knowledge_source import KnowledgeSource
from .reliability_model import ReliabilityModel, StepReliabilityModel
from .source_registry import RegisteredSource, SourceRegistry

logger = logging.getLogger(__name__)

# A single source answering above this confidence ends query_best early.
BEST_SOURCE_CONFIDENCE_THRESHOLD = 70
NO_SOURCES_EVIDENCE = "No external sources available for verification"
DEFAULT_MAX_CONCURRENT_SOURCES = 4


def _elapsed_ms(start: float) -> int:
    return max(1, int((time.perf_counter() - start) * 1000))


class SourceManager:
    """Queries registered knowledge sources and consolidates their verdicts.

    Each source's verdict is weighted by its reliability config: the
    domain override when the query names a domain that has one, the base
    weight otherwise. Support is decided by strict majority of weight,
    never by counting sources.
    """

    def __init__(
        self,
        registry: Optional[SourceRegistry] = None,
        reliability_model: Optional[ReliabilityModel] = None,
        fallback_enabled: bool = True,
        max_concurrent_sources: int = DEFAULT_MAX_CONCURRENT_SOURCES,
    ):
        """Initialize the manager.

        Args:
            registry: Source registry to use; a new empty one by default
            reliability_model: Rule applied by ``adjust_reliability``
            fallback_enabled: Whether an empty consolidation explains itself
            max_concurrent_sources: Upper bound on sources queried at once
        """
        self._registry = registry or SourceRegistry()
        self._reliability_model = reliability_model or StepReliabilityModel()
        self._fallback_enabled = fallback_enabled
        self._max_concurrent_sources = max(1, max_concurrent_sources)

    @property
    def registry(self) -> SourceRegistry:
        return self._registry

    @property
    def source_names(self) -> List[str]:
        return self._registry.names

    @property
    def fallback_enabled(self) -> bool:
        return self._fallback_enabled

    def register(
        self,
        source: KnowledgeSource,
        reliability_config: Optional[ReliabilityConfig] = None,
    ) -> None:
        """Register a source, deriving its config from its reliability if none is given."""
        config = self._registry.register(source, reliability_config)
        logger.info(f"📚 Registered source {source.name} (base weight {config.base_weight:.2f})")

    def unregister(self, name: str) -> None:
        """Remove a source; unknown names are ignored."""
        if self._registry.unregister(name):
            logger.info(f"🗑️ Unregistered source {name}")

    def get_reliability_config(self, name: str) -> Optional[ReliabilityConfig]:
        return self._registry.get_config(name)

    def set_fallback_enabled(self, enabled: bool) -> None:
        self._fallback_enabled = enabled

    def adjust_reliability(
        self,
        name: str,
        feedback: Feedback,
        domain: Optional[Domain] = None,
    ) -> None:
        """Apply feedback to a source's base weight, or to one domain's weight.

        A domain weight that was never set starts from the base weight.
        Unknown source names are ignored.
        """
        def _apply(config: ReliabilityConfig) -> ReliabilityConfig:
            if domain is not None:
                current = config.weight_for(domain)
                return config.with_domain_weight(
                    domain, self._reliability_model.adjust(current, feedback)
                )
            return config.with_base_weight(
                self._reliability_model.adjust(config.base_weight, feedback)
            )

        updated = self._registry.update_config(name, _apply)
        if updated is None:
            logger.debug(f"Ignoring {feedback.value} feedback for unknown source {name}")
            return

        logger.info(
            f"🔧 Reliability of {name} after {feedback.value} feedback: "
            f"{updated.weight_for(domain):.2f}" + (f" ({domain.value})" if domain else "")
        )

    async def query_all(
        self,
        query: SourceQuery,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ConsolidatedResult:
        """Query every registered source and consolidate the answers.

        Sources are queried concurrently, each bounded by ``query.timeout``.
        Disabled, unavailable, failing and timed-out sources are reported
        in ``unavailable_sources``. Setting ``cancel_event`` abandons the
        sources still in flight; they are reported unavailable and the
        finished ones are consolidated.

        Args:
            query: Statement to verify
            cancel_event: Optional event that stops waiting for sources

        Returns:
            Consolidated verdict; never raises for source failures
        """
        start = time.perf_counter()
        entries = self._registry.snapshot()
        fallback_enabled = self._fallback_enabled
        logger.info(f"🔍 Querying {len(entries)} sources for: {query.statement[:100]}")

        semaphore = asyncio.Semaphore(self._max_concurrent_sources)
        tasks = [
            asyncio.create_task(self._query_source(entry, query, semaphore))
            for entry in entries
        ]
        outcomes = await self._collect(tasks, cancel_event)

        answered: List[Tuple[RegisteredSource, SourceResult]] = []
        available: List[str] = []
        unavailable: List[str] = []
        for entry, outcome in zip(entries, outcomes):
            if outcome is None:
                unavailable.append(entry.name)
            else:
                available.append(entry.name)
                answered.append((entry, outcome))

        if not answered:
            logger.warning(f"⚠️ No external sources answered ({len(unavailable)} unavailable)")
            return ConsolidatedResult(
                evidence=[NO_SOURCES_EVIDENCE] if fallback_enabled else [],
                query_time_ms=_elapsed_ms(start),
                unavailable_sources=unavailable,
            )

        result = self._consolidate(answered, query.domain, start, available, unavailable)
        logger.info(
            f"📊 Consolidated {len(answered)} sources: confidence={result.overall_confidence}, "
            f"supported={result.is_supported}"
        )
        return result

    async def query_best(self, query: SourceQuery) -> ConsolidatedResult:
        """Ask sources one at a time, most reliable first.

        The first source answering with confidence above the short-circuit
        threshold decides alone, with weight 1.0. If none does, every
        source is queried through ``query_all``.
        """
        start = time.perf_counter()
        entries = self._registry.snapshot()
        ranked = sorted(
            entries,
            key=lambda entry: effective_weight(entry.config, query.domain),
            reverse=True,
        )
        semaphore = asyncio.Semaphore(1)

        for entry in ranked:
            result = await self._query_source(entry, query, semaphore)
            if result is None:
                continue
            if result.confidence > BEST_SOURCE_CONFIDENCE_THRESHOLD:
                logger.info(f"✅ {entry.name} answered with confidence {result.confidence:.0f}")
                return ConsolidatedResult(
                    sources=deduplicate_sources(result.sources),
                    overall_confidence=result.confidence,
                    is_supported=result.is_supported,
                    evidence=list(result.evidence),
                    contradictions=list(result.contradictions),
                    source_weights={entry.name: 1.0},
                    query_time_ms=_elapsed_ms(start),
                    available_sources=[entry.name],
                    unavailable_sources=[],
                )

        logger.info("🔄 No single confident source, falling back to full consensus")
        return await self.query_all(query)

    async def _query_source(
        self,
        entry: RegisteredSource,
        query: SourceQuery,
        semaphore: asyncio.Semaphore,
    ) -> Optional[SourceResult]:
        """Ask one source; None means it is unavailable for this call."""
        if entry.config is not None and not entry.config.enabled:
            logger.debug(f"Source {entry.name} is disabled")
            return None

        async with semaphore:
            try:
                return await asyncio.wait_for(
                    self._ask(entry.source, query),
                    timeout=query.timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"⏱️ Source {entry.name} timed out after {query.timeout}s")
            except Exception as e:
                logger.warning(f"⚠️ Source {entry.name} failed: {e}")
        return None

    @staticmethod
    async def _ask(source: KnowledgeSource, query: SourceQuery) -> Optional[SourceResult]:
        if not await source.is_available():
            logger.info(f"🚫 Source {source.name} is unavailable")
            return None
        return await source.query(query)

    @staticmethod
    async def _collect(
        tasks: Sequence["asyncio.Task[Optional[SourceResult]]"],
        cancel_event: Optional[asyncio.Event],
    ) -> List[Optional[SourceResult]]:
        """Wait for source tasks; results stay aligned with ``tasks``."""
        if not tasks:
            return []
        if cancel_event is None:
            return list(await asyncio.gather(*tasks))

        waiter = asyncio.create_task(cancel_event.wait())
        pending = set(tasks)
        try:
            while pending and not waiter.done():
                _, pending = await asyncio.wait(
                    pending | {waiter},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                pending.discard(waiter)
        finally:
            waiter.cancel()

        if pending:
            logger.warning(f"🛑 Abandoning {len(pending)} in-flight sources")
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        return [
            None if task.cancelled() else task.result()
            for task in tasks
        ]

    @staticmethod
    def _consolidate(
        answered: Sequence[Tuple[RegisteredSource, SourceResult]],
        domain: Optional[Domain],
        start: float,
        available: List[str],
        unavailable: List[str],
    ) -> ConsolidatedResult:
        sources = []
        evidence: List[str] = []
        contradictions: List[str] = []
        weights = {}

        weighted_confidence = 0.0
        total_weight = 0.0
        supporting_weight = 0.0

        for entry, result in answered:
            weight = effective_weight(entry.config, domain)
            weights[entry.name] = weight
            sources.extend(result.sources)
            evidence.extend(result.evidence)
            contradictions.extend(result.contradictions)

            weighted_confidence += result.confidence * weight
            total_weight += weight
            if result.is_supported:
                supporting_weight += weight

        overall_confidence = (
            round_half_up(weighted_confidence / total_weight) if total_weight > 0 else 0
        )

        return ConsolidatedResult(
            sources=deduplicate_sources(sources),
            overall_confidence=overall_confidence,
            is_supported=supporting_weight > total_weight / 2,
            evidence=list(dict.fromkeys(evidence)),
            contradictions=list(dict.fromkeys(contradictions)),
            source_weights=weights,
            query_time_ms=_elapsed_ms(start),
            available_sources=available,
            unavailable_sources=unavailable,
        )
