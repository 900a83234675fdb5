"""Port interface for claim extraction."""

from typing import List, Optional, Protocol

from ..models.claim import Claim, Domain


class ClaimExtractor(Protocol):
    """Protocol for components that turn document text into claims."""

    async def extract(self, content: str, domain: Optional[Domain] = None) -> List[Claim]:
        """Extract the verifiable claims of a document."""
        ...
