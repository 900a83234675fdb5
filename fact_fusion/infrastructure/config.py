"""Runtime configuration for fact checking."""

import logging
import os
from typing import List

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "FACT_FUSION_"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


class FactFusionConfig(BaseModel):
    """Configuration for the fact checking stack."""

    log_level: str = "INFO"
    fallback_enabled: bool = True
    query_timeout: float = Field(5.0, description="Per-source timeout in seconds")
    max_results: int = Field(3, description="Results requested from each source")
    max_concurrent_claims: int = 8
    max_concurrent_sources: int = 4
    enabled_sources: List[str] = Field(default_factory=lambda: ["wikipedia", "government"])
    wikipedia_language: str = "en"
    wikipedia_user_agent: str = "FactFusion/1.0"
    cache_ttl: int = 3600
    cache_maxsize: int = 1000

    @classmethod
    def from_env(cls) -> "FactFusionConfig":
        """Create configuration from ``FACT_FUSION_*`` environment variables."""
        enabled_sources = [
            name.strip()
            for name in _env("ENABLED_SOURCES", "wikipedia,government").split(",")
            if name.strip()
        ]

        config = cls(
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            fallback_enabled=_env("FALLBACK_ENABLED", "true").lower() == "true",
            query_timeout=float(_env("QUERY_TIMEOUT", "5.0")),
            max_results=int(_env("MAX_RESULTS", "3")),
            max_concurrent_claims=int(_env("MAX_CONCURRENT_CLAIMS", "8")),
            max_concurrent_sources=int(_env("MAX_CONCURRENT_SOURCES", "4")),
            enabled_sources=enabled_sources,
            wikipedia_language=_env("WIKIPEDIA_LANGUAGE", "en"),
            wikipedia_user_agent=_env("WIKIPEDIA_USER_AGENT", "FactFusion/1.0"),
            cache_ttl=int(_env("CACHE_TTL", "3600")),
            cache_maxsize=int(_env("CACHE_MAXSIZE", "1000")),
        )

        if not config.enabled_sources:
            logger.warning("⚠️ No external sources enabled - claims are checked against the knowledge store only")
        else:
            logger.info(f"🔧 Enabled sources: {', '.join(config.enabled_sources)}")
        return config


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging in the format used across the package."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
