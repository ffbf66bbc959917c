"""Interface definitions for article tagging."""

from dataclasses import dataclass, field
from typing import List, Optional

from ..ingestion.interfaces import NormalizedArticle


@dataclass
class TagWithConfidence:
    """A tag proposed by the LLM together with its probability."""
    tag: str
    probability: float = 0.0


@dataclass
class TaggingResult:
    """Parsed LLM tagging reply."""
    tags: List[TagWithConfidence] = field(default_factory=list)
    comment: Optional[str] = None
    error: Optional[str] = None


class TaggingStrategyInterface:
    """Interface for tagging strategies."""

    async def generate_tags(self, article: NormalizedArticle) -> List[str]:
        """Produce the tag list for one article."""
        raise NotImplementedError
