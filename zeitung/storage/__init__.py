"""Article and tag persistence."""

from .interfaces import (
    ArticleStorageInterface, TagRepositoryInterface, StoredArticle, TagSaveResult, canonical_pair
)
from .models import ArticleModel, TagModel, ArticleTagModel, TagCoOccurrenceModel, init_db
from .database import ArticleStorage, SqlTagRepository
from .memory import InMemoryArticleStorage, InMemoryTagRepository
from .search_index import SearchIndexInterface, NullSearchIndex, ElasticsearchIndex

__all__ = [
    "ArticleStorageInterface", "TagRepositoryInterface", "StoredArticle", "TagSaveResult",
    "canonical_pair",
    "ArticleModel", "TagModel", "ArticleTagModel", "TagCoOccurrenceModel", "init_db",
    "ArticleStorage", "SqlTagRepository",
    "InMemoryArticleStorage", "InMemoryTagRepository",
    "SearchIndexInterface", "NullSearchIndex", "ElasticsearchIndex",
]
