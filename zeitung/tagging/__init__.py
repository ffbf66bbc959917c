"""Article tagging strategies."""

from .interfaces import TaggingStrategyInterface, TaggingResult, TagWithConfidence
from .strategies import FeedCategoryTaggingStrategy, MockTaggingStrategy
from .llm_client import LLMClient
from .llm_strategy import LLMTaggingStrategy
from .factory import create_tagging_strategy

__all__ = [
    "TaggingStrategyInterface", "TaggingResult", "TagWithConfidence",
    "FeedCategoryTaggingStrategy", "MockTaggingStrategy",
    "LLMClient", "LLMTaggingStrategy", "create_tagging_strategy",
]
