"""Registry of knowledge sources and their reliability configuration."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..models.knowledge import ReliabilityConfig
from ..ports.knowledge_source import KnowledgeSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredSource:
    """A source together with the reliability config captured alongside it."""

    source: KnowledgeSource
    config: Optional[ReliabilityConfig]

    @property
    def name(self) -> str:
        return self.source.name


class SourceRegistry:
    """Keyed collection of knowledge sources and reliability configs.

    Iteration follows registration order. All reads and writes go through
    one re-entrant lock, and ``snapshot`` hands out an immutable copy so a
    consolidation never observes a half-updated weight table. Configs are
    immutable; updates replace them.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._lock = threading.RLock()
        self._sources: Dict[str, KnowledgeSource] = {}
        self._configs: Dict[str, ReliabilityConfig] = {}

    def register(
        self,
        source: KnowledgeSource,
        config: Optional[ReliabilityConfig] = None,
    ) -> ReliabilityConfig:
        """Add a source, or replace the one registered under the same name.

        Args:
            source: The source to register
            config: Reliability config; derived from the source's base
                reliability when omitted

        Returns:
            The config stored for the source
        """
        if config is None:
            config = ReliabilityConfig(
                source_name=source.name,
                base_weight=source.reliability / 100,
                domain_weights={},
                enabled=True,
            )

        with self._lock:
            if source.name in self._sources:
                logger.warning(f"⚠️ Replacing already registered source {source.name}")
            self._sources[source.name] = source
            self._configs[source.name] = config
        return config

    def unregister(self, name: str) -> bool:
        """Remove a source and its config.

        Returns:
            True if something was removed
        """
        with self._lock:
            removed = self._sources.pop(name, None) is not None
            self._configs.pop(name, None)
        return removed

    def get(self, name: str) -> Optional[KnowledgeSource]:
        with self._lock:
            return self._sources.get(name)

    def get_config(self, name: str) -> Optional[ReliabilityConfig]:
        with self._lock:
            return self._configs.get(name)

    def update_config(
        self,
        name: str,
        update: Callable[[ReliabilityConfig], ReliabilityConfig],
    ) -> Optional[ReliabilityConfig]:
        """Replace a source's config with ``update(current)``.

        Returns:
            The new config, or None if the source has no config
        """
        with self._lock:
            current = self._configs.get(name)
            if current is None:
                return None
            updated = update(current)
            self._configs[name] = updated
            return updated

    def snapshot(self) -> List[RegisteredSource]:
        """Consistent view of every source and its config, in registration order."""
        with self._lock:
            return [
                RegisteredSource(source=source, config=self._configs.get(name))
                for name, source in self._sources.items()
            ]

    @property
    def names(self) -> List[str]:
        with self._lock:
            return list(self._sources)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sources)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._sources
