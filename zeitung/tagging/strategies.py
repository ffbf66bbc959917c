"""Tagging strategies that need no external service."""

from typing import List

from .interfaces import TaggingStrategyInterface
from ..ingestion.interfaces import NormalizedArticle


def _unique(values: List[str]) -> List[str]:
    """Deduplicate keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


class FeedCategoryTaggingStrategy(TaggingStrategyInterface):
    """Tags an article with its feed categories plus title/description keywords."""

    MAX_KEYWORDS = 5
    MIN_WORD_LENGTH = 5
    STRIP_CHARS = ",.!?:;"

    def extract_keywords(self, article: NormalizedArticle) -> List[str]:
        # Length is checked before punctuation is stripped
        words = article.title.split() + article.description.split()
        keywords = [
            word.lower().strip(self.STRIP_CHARS)
            for word in words
            if len(word) >= self.MIN_WORD_LENGTH
        ]
        keywords = [k for k in keywords if k]
        return _unique(keywords)[:self.MAX_KEYWORDS]

    async def generate_tags(self, article: NormalizedArticle) -> List[str]:
        return _unique(list(article.categories) + self.extract_keywords(article))


class MockTaggingStrategy(TaggingStrategyInterface):
    """Returns the same tags for every article."""

    TAGS = ["mock-tag-1", "mock-tag-2", "test"]

    async def generate_tags(self, article: NormalizedArticle) -> List[str]:
        return list(self.TAGS)
