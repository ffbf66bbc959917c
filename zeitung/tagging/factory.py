"""Factory for the configured tagging strategy."""

import structlog

from .interfaces import TaggingStrategyInterface
from .strategies import FeedCategoryTaggingStrategy, MockTaggingStrategy
from .llm_strategy import LLMTaggingStrategy
from ..config.settings import settings

logger = structlog.get_logger()


def create_tagging_strategy(name: str = None, tag_repository=None) -> TaggingStrategyInterface:
    """Build the tagging strategy named in settings.

    Unknown names fall back to the feed-category strategy.
    """
    name = (name or settings.tagging_strategy or "").strip().lower().replace("-", "_")

    if name == "mock":
        strategy = MockTaggingStrategy()
    elif name == "llm":
        strategy = LLMTaggingStrategy(tag_repository=tag_repository)
    else:
        if name not in ("feed_based", "feedbased", ""):
            logger.warning("tagging_strategy_unknown", strategy=name)
        strategy = FeedCategoryTaggingStrategy()

    logger.info("tagging_strategy_selected", strategy=type(strategy).__name__)
    return strategy
