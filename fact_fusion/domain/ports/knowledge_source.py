"""Port interface for external knowledge sources."""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from ..models.claim import Domain
from ..models.knowledge import SourceQuery, SourceResult


class KnowledgeSource(ABC):
    """Abstract interface for external knowledge providers.

    This port defines how the source manager talks to every provider.
    Concrete implementations live in the infrastructure layer; adding a
    provider means implementing this interface, never special-casing it
    in the manager.

    Contract:
    - ``query`` must not raise for ordinary failures. It returns
      ``SourceResult.empty()`` instead.
    - ``is_available`` is checked before every use. Callers treat any
      exception raised from it as ``False``.
    """

    async def initialize(self) -> None:
        """Prepare the provider for queries (connections, clients)."""
        pass

    async def shutdown(self) -> None:
        """Release resources held by the provider."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique provider name, used as the registry key."""
        pass

    @property
    @abstractmethod
    def reliability(self) -> float:
        """Static base reliability (0-100)."""
        pass

    @property
    def supported_domains(self) -> List[Domain]:
        """Verticals this provider has content for."""
        return list(Domain)

    @abstractmethod
    async def query(self, query: SourceQuery) -> SourceResult:
        """Look up a statement and return this provider's verdict.

        Args:
            query: Statement, domain and limits

        Returns:
            The provider's verdict, or an empty result on failure
        """
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the provider can currently answer queries."""
        pass

    def reliability_for_domain(self, domain: Domain) -> float:
        """Reliability (0-100) for a specific vertical."""
        return self.reliability

    @property
    def capabilities(self) -> Dict[str, bool]:
        """Optional features; ``batch_query`` marks a native ``query_many``."""
        return {"batch_query": False}

    async def query_many(self, queries: Sequence[SourceQuery]) -> List[SourceResult]:
        """Answer several queries, in order.

        Providers without a native batch endpoint inherit this sequential
        implementation.
        """
        results = []
        for query in queries:
            results.append(await self.query(query))
        return results
