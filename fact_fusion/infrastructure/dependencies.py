"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..domain.services.credibility_scorer import SourceCredibilityScorer
from ..domain.services.fact_verifier import FactVerifier
from ..domain.services.source_manager import SourceManager
from .config import FactFusionConfig
from .extraction.pattern_extractor import PatternClaimExtractor
from .knowledge.in_memory_store import InMemoryKnowledgeStore
from .sources.factory import KnowledgeSourceFactory
from .sources.wikipedia_source import WikipediaSourceConfig

logger = logging.getLogger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()


class ServiceContainer:
    """Service container for dependency injection.

    Synchronous collaborators are built eagerly. The verifier needs
    initialized knowledge sources, so it is created on first request.
    """

    def __init__(self, config: Optional[FactFusionConfig] = None):
        self._config = config or FactFusionConfig.from_env()
        self._source_factory = KnowledgeSourceFactory()
        self._services: Dict[str, Any] = {}
        self._setup_services()

    @property
    def config(self) -> FactFusionConfig:
        return self._config

    @property
    def source_factory(self) -> KnowledgeSourceFactory:
        return self._source_factory

    def _setup_services(self) -> None:
        logger.info("🔧 Setting up service container...")
        self._services = {
            'knowledge_store': InMemoryKnowledgeStore.with_sample_data(),
            'claim_extractor': PatternClaimExtractor(),
            'credibility_scorer': SourceCredibilityScorer(),
            'source_manager': None,  # Created on demand
            'fact_verifier': None,  # Created on demand
        }
        logger.info("✅ Service container setup completed")

    def _source_configs(self) -> Dict[str, Dict[str, Any]]:
        return {
            "wikipedia": {
                "config": WikipediaSourceConfig(
                    language=self._config.wikipedia_language,
                    user_agent=self._config.wikipedia_user_agent,
                    cache_ttl=self._config.cache_ttl,
                    cache_maxsize=self._config.cache_maxsize,
                )
            },
        }

    async def _ensure_source_manager(self) -> SourceManager:
        if self._services['source_manager'] is None:
            logger.info("📚 Setting up knowledge sources...")
            self._services['source_manager'] = await self._source_factory.build_source_manager(
                self._config.enabled_sources,
                configs=self._source_configs(),
                fallback_enabled=self._config.fallback_enabled,
                max_concurrent_sources=self._config.max_concurrent_sources,
            )
        return self._services['source_manager']

    async def _ensure_fact_verifier(self) -> FactVerifier:
        if self._services['fact_verifier'] is None:
            logger.info("🔧 Creating FactVerifier with sources...")
            self._services['fact_verifier'] = FactVerifier(
                knowledge_store=self.get('knowledge_store'),
                claim_extractor=self.get('claim_extractor'),
                source_manager=await self._ensure_source_manager(),
                max_concurrent_claims=self._config.max_concurrent_claims,
                external_max_results=self._config.max_results,
                external_timeout=self._config.query_timeout,
            )
        return self._services['fact_verifier']

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_knowledge_store(self) -> InMemoryKnowledgeStore:
        return self.get('knowledge_store')

    def get_credibility_scorer(self) -> SourceCredibilityScorer:
        return self.get('credibility_scorer')

    async def get_source_manager(self) -> SourceManager:
        return await self._ensure_source_manager()

    async def get_fact_verifier(self) -> FactVerifier:
        """Get the fact verifier, initializing knowledge sources if needed."""
        return await self._ensure_fact_verifier()

    async def shutdown(self) -> None:
        """Shut down every knowledge source created by the container."""
        await self._source_factory.shutdown_all()
        self._services['source_manager'] = None
        self._services['fact_verifier'] = None


@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance."""
    return ServiceContainer()
