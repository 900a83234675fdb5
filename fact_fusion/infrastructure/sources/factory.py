"""Builds knowledge sources by name and wires them into a source manager."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type

from ...domain.models.knowledge import ReliabilityConfig
from ...domain.ports.knowledge_source import KnowledgeSource
from ...domain.services.source_manager import SourceManager
from .government_source import GovernmentDataSource
from .wikipedia_source import WikipediaKnowledgeSource

logger = logging.getLogger(__name__)

DEFAULT_SOURCES: Mapping[str, Type[KnowledgeSource]] = {
    "wikipedia": WikipediaKnowledgeSource,
    "government": GovernmentDataSource,
}


def reliability_config_for(source: KnowledgeSource) -> ReliabilityConfig:
    """Seed a manager config from the source's own reliability table.

    Weights are the source's 0-100 reliabilities scaled to 0-1, with one
    override per domain the source covers.
    """
    return ReliabilityConfig(
        source_name=source.name,
        base_weight=source.reliability / 100,
        domain_weights={
            domain: source.reliability_for_domain(domain) / 100
            for domain in source.supported_domains
        },
    )


class KnowledgeSourceFactory:
    """Creates knowledge sources from short names and tracks the live ones.

    A short name ("wikipedia", "government") maps to a source class. Each
    name has at most one live instance, which ``shutdown_all`` releases.
    """

    def __init__(self):
        self._classes: Dict[str, Type[KnowledgeSource]] = dict(DEFAULT_SOURCES)
        self._live: Dict[str, KnowledgeSource] = {}

    def register_source(self, name: str, source_class: Type[KnowledgeSource]) -> None:
        """Make ``source_class`` buildable under ``name``.

        Raises:
            ValueError: If ``name`` is taken
        """
        if name in self._classes:
            raise ValueError(f"Source {name} already registered")
        self._classes[name] = source_class

    async def create_source(self, name: str, **config: Any) -> KnowledgeSource:
        """Build and initialize the source registered as ``name``.

        Args:
            name: Short name of the source
            **config: Keyword arguments for the source constructor

        Returns:
            The initialized source, also kept as the live instance for ``name``

        Raises:
            ValueError: If ``name`` is unknown
            RuntimeError: If the source cannot initialize
        """
        source_class = self._classes.get(name)
        if source_class is None:
            raise ValueError(f"Source {name} not registered")

        source = source_class(**config)
        try:
            await source.initialize()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize source {name}: {e}") from e

        self._live[name] = source
        logger.debug(f"Created source {name} as {source.name}")
        return source

    def get_source(self, name: str) -> Optional[KnowledgeSource]:
        return self._live.get(name)

    async def shutdown_source(self, name: str) -> None:
        """Release the live instance for ``name``, if any."""
        source = self._live.pop(name, None)
        if source is not None:
            await source.shutdown()

    async def shutdown_all(self) -> None:
        for name in list(self._live):
            await self.shutdown_source(name)

    def list_sources(self) -> Dict[str, bool]:
        """Registered names and whether each has a live instance."""
        return {name: name in self._live for name in self._classes}

    async def build_source_manager(
        self,
        names: Iterable[str],
        configs: Optional[Dict[str, Dict[str, Any]]] = None,
        **manager_options: Any,
    ) -> SourceManager:
        """Create the named sources and register them with a new manager.

        Every source is registered with its per-domain reliabilities, so
        domain queries are weighted and ranked by them. Sources that fail to
        initialize are logged and left out; unknown names still raise
        ``ValueError``.
        """
        configs = configs or {}
        manager = SourceManager(**manager_options)
        created: List[str] = []

        for name in names:
            try:
                source = await self.create_source(name, **configs.get(name, {}))
            except RuntimeError as e:
                logger.warning(f"⚠️ Skipping source {name}: {e}")
                continue
            manager.register(source, reliability_config_for(source))
            created.append(name)

        logger.info(f"📚 Source manager ready with {len(created)} sources: {created}")
        return manager
