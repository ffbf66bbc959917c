"""Interface definitions for article and tag persistence."""

from dataclasses import dataclass, field
from datetime import datetime
from itertools import combinations
from typing import Iterable, List, Optional, Set, Tuple

from ..ingestion.interfaces import NormalizedArticle, MIN_DATE


@dataclass
class StoredArticle:
    """A persisted article row."""
    id: int
    title: str
    link: str
    description: str = ""
    published_date: datetime = MIN_DATE
    feed_source: str = ""
    created_at: Optional[datetime] = None
    created: bool = False  # False when the link was already stored


@dataclass
class TagSaveResult:
    """What one save_article_tags call changed."""
    created_tags: List[str] = field(default_factory=list)
    created_associations: List[str] = field(default_factory=list)
    incremented_pairs: List[Tuple[int, int]] = field(default_factory=list)


def canonical_pair(tag_a: int, tag_b: int) -> Tuple[int, int]:
    """Order a tag id pair so the smaller id comes first."""
    return (tag_a, tag_b) if tag_a < tag_b else (tag_b, tag_a)


def clean_tag_names(names: Iterable[str]) -> List[str]:
    """Strip names, drop blanks and collapse duplicates keeping input order."""
    seen = set()
    result = []
    for name in names or []:
        name = (name or "").strip()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


def pairs_to_increment(
    tag_ids: List[int],
    new_tag_ids: Set[int],
    idempotent: bool = False
) -> List[Tuple[int, int]]:
    """Canonical pairs whose co-occurrence count should go up by one.

    With idempotent set, a pair counts only if at least one of its two
    article associations was created in this call.
    """
    pairs = []
    for tag_a, tag_b in combinations(tag_ids, 2):
        if tag_a == tag_b:
            continue
        if idempotent and tag_a not in new_tag_ids and tag_b not in new_tag_ids:
            continue
        pairs.append(canonical_pair(tag_a, tag_b))
    return pairs


class ArticleStorageInterface:
    """Interface for article storage."""

    def save_article(self, article: NormalizedArticle) -> StoredArticle:
        """Insert the article, or return the stored row with the same link."""
        raise NotImplementedError

    def get_by_link(self, link: str) -> Optional[StoredArticle]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError


class TagRepositoryInterface:
    """Interface for tags, article/tag associations and co-occurrence counts."""

    def save_article_tags(self, article_id: int, tag_names: List[str]) -> TagSaveResult:
        """Ensure tags and associations exist, then update pair counts."""
        raise NotImplementedError

    def get_all_tags(self) -> List[str]:
        raise NotImplementedError

    def get_article_tags(self, article_id: int) -> List[str]:
        raise NotImplementedError

    def get_co_occurrence(self, tag_a: str, tag_b: str) -> int:
        """Joint count for two tag names, in either order. 0 if never seen."""
        raise NotImplementedError
