"""Port interface for the internal knowledge store."""

from typing import Optional, Protocol

from ..models.claim import Domain
from ..models.knowledge import KnowledgeStoreVerdict
from ..models.source import Feedback


class KnowledgeStore(Protocol):
    """Protocol for the curated internal knowledge base."""

    async def verify(
        self,
        statement: str,
        domain: Optional[Domain] = None,
    ) -> KnowledgeStoreVerdict:
        """Verify a statement against known sources."""
        ...

    async def update_credibility(self, source_id: str, feedback: Feedback) -> None:
        """Adjust a stored source's credibility from user feedback."""
        ...
