"""Knowledge source adapters."""

from .factory import KnowledgeSourceFactory, reliability_config_for
from .government_source import GovernmentDataSource, GovernmentSourceConfig
from .wikipedia_source import WikipediaKnowledgeSource, WikipediaSourceConfig

__all__ = [
    "GovernmentDataSource",
    "GovernmentSourceConfig",
    "KnowledgeSourceFactory",
    "WikipediaKnowledgeSource",
    "WikipediaSourceConfig",
    "reliability_config_for",
]
