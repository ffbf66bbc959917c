"""Factory functions to create storage instances.

The database URL comes from DATABASE_URL, then ZEITUNG_DATABASE_URL, then
settings. PostgreSQL and SQLite share the same SQLAlchemy storage; the
engine is created once and shared by both repositories.
"""

import os
from functools import lru_cache

import structlog

from .database import ArticleStorage, SqlTagRepository, create_engine_for
from .search_index import ElasticsearchIndex, NullSearchIndex

logger = structlog.get_logger()


def get_database_url() -> str:
    """Get database URL from environment, with fallback to SQLite."""
    url = os.environ.get('DATABASE_URL') or os.environ.get('ZEITUNG_DATABASE_URL')
    if not url:
        from ..config.settings import settings
        url = settings.database_url

    # SQLAlchemy only accepts the postgresql:// scheme
    if url.startswith('postgres://'):
        url = 'postgresql://' + url[len('postgres://'):]
    return url


def is_postgres() -> bool:
    """Check if we're using PostgreSQL."""
    return get_database_url().startswith('postgresql')


@lru_cache(maxsize=1)
def get_engine():
    url = get_database_url()
    logger.info("using_postgres_storage" if is_postgres() else "using_sqlite_storage", url=url[:40] + "...")
    return create_engine_for(url)


@lru_cache(maxsize=1)
def get_article_storage() -> ArticleStorage:
    return ArticleStorage(engine=get_engine())


@lru_cache(maxsize=1)
def get_tag_repository() -> SqlTagRepository:
    return SqlTagRepository(engine=get_engine())


def get_search_index():
    """Elasticsearch sink when a search index URL is configured."""
    from ..config.settings import settings

    if settings.search_index_url:
        logger.info("search_index_enabled", url=settings.search_index_url, index=settings.search_index_name)
        return ElasticsearchIndex()
    return NullSearchIndex()


def clear_cache():
    """Clear cached instances (useful for testing)."""
    get_article_storage.cache_clear()
    get_tag_repository.cache_clear()
    get_engine.cache_clear()
