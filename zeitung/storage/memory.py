"""In-memory storage, used for tests and bootstrapping without a database."""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import structlog

from .interfaces import (
    ArticleStorageInterface, TagRepositoryInterface, StoredArticle, TagSaveResult,
    canonical_pair, clean_tag_names, pairs_to_increment
)
from ..ingestion.interfaces import NormalizedArticle
from ..config.settings import settings

logger = structlog.get_logger()


class InMemoryArticleStorage(ArticleStorageInterface):
    """Articles kept in a dict keyed by link."""

    def __init__(self):
        self._articles: Dict[str, StoredArticle] = {}
        self._next_id = 1

    def save_article(self, article: NormalizedArticle) -> StoredArticle:
        existing = self._articles.get(article.link)
        if existing:
            return existing

        stored = StoredArticle(
            id=self._next_id,
            title=article.title,
            link=article.link,
            description=article.description,
            published_date=article.published_date,
            feed_source=article.feed_source,
            created_at=datetime.now(timezone.utc),
        )
        self._next_id += 1
        self._articles[article.link] = stored
        logger.debug("article_saved", id=stored.id, url=article.link[:80])

        # Callers see created=True only on the insert itself
        return replace(stored, created=True)

    def get_by_link(self, link: str) -> Optional[StoredArticle]:
        return self._articles.get(link)

    def count(self) -> int:
        return len(self._articles)


class InMemoryTagRepository(TagRepositoryInterface):
    """Tags, associations and pair counts held in plain dicts and sets."""

    def __init__(self, idempotent: bool = None):
        self.idempotent = settings.co_occurrence_idempotent if idempotent is None else idempotent
        self._tags: Dict[str, int] = {}
        self._associations: List[Tuple[int, int]] = []
        self._co_occurrences: Dict[Tuple[int, int], int] = {}

    def save_article_tags(self, article_id: int, tag_names: List[str]) -> TagSaveResult:
        result = TagSaveResult()
        names = clean_tag_names(tag_names)
        if not names:
            return result

        tag_ids = []
        new_tag_ids = set()
        for name in names:
            if name not in self._tags:
                self._tags[name] = len(self._tags) + 1
                result.created_tags.append(name)
            tag_id = self._tags[name]

            if (article_id, tag_id) not in self._associations:
                self._associations.append((article_id, tag_id))
                result.created_associations.append(name)
                new_tag_ids.add(tag_id)
            tag_ids.append(tag_id)

        for pair in pairs_to_increment(tag_ids, new_tag_ids, self.idempotent):
            self._co_occurrences[pair] = self._co_occurrences.get(pair, 0) + 1
            result.incremented_pairs.append(pair)

        return result

    def get_all_tags(self) -> List[str]:
        return sorted(self._tags)

    def get_article_tags(self, article_id: int) -> List[str]:
        names = {tag_id: name for name, tag_id in self._tags.items()}
        return [names[tag_id] for a_id, tag_id in self._associations if a_id == article_id]

    def get_co_occurrence(self, tag_a: str, tag_b: str) -> int:
        if tag_a == tag_b or tag_a not in self._tags or tag_b not in self._tags:
            return 0
        return self._co_occurrences.get(canonical_pair(self._tags[tag_a], self._tags[tag_b]), 0)
