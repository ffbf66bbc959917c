"""Optional search indexing sink, called after an article is persisted."""

from datetime import datetime, timezone
from typing import Optional

import aiohttp
import structlog

from ..ingestion.interfaces import NormalizedArticle
from ..config.settings import settings

logger = structlog.get_logger()


class SearchIndexInterface:
    """Interface for search indexing sinks."""

    async def index_article(self, article: NormalizedArticle, article_id: int) -> bool:
        """Index one article. Must never raise."""
        raise NotImplementedError


class NullSearchIndex(SearchIndexInterface):
    """Indexing disabled."""

    async def index_article(self, article: NormalizedArticle, article_id: int) -> bool:
        return False


class ElasticsearchIndex(SearchIndexInterface):
    """Writes article documents to an Elasticsearch index over HTTP."""

    def __init__(
        self,
        url: str = None,
        index_name: str = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: int = None
    ):
        self.url = (url or settings.search_index_url or "").rstrip("/")
        self.index_name = index_name or settings.search_index_name
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds or settings.fetch_timeout_seconds)
        self._session = session

    def document_url(self, article_id: int) -> str:
        return f"{self.url}/{self.index_name}/_doc/{article_id}"

    @staticmethod
    def build_document(article: NormalizedArticle, article_id: int) -> dict:
        return {
            "id": article_id,
            "title": article.title,
            "link": article.link,
            "description": article.description,
            "publishedDate": article.published_date.isoformat(),
            "feedSource": article.feed_source,
            "tags": list(article.tags),
            "indexedAt": datetime.now(timezone.utc).isoformat(),
        }

    async def index_article(self, article: NormalizedArticle, article_id: int) -> bool:
        document = self.build_document(article, article_id)
        try:
            if self._session is not None:
                return await self._put(self._session, article_id, document)
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                return await self._put(session, article_id, document)
        except Exception as e:
            logger.warning("search_index_failed", article_id=article_id, error=str(e))
            return False

    async def _put(self, session: aiohttp.ClientSession, article_id: int, document: dict) -> bool:
        async with session.put(self.document_url(article_id), json=document) as response:
            if response.status >= 300:
                body = await response.text()
                logger.warning(
                    "search_index_rejected",
                    article_id=article_id,
                    status=response.status,
                    body=body[:200]
                )
                return False

        logger.debug("article_indexed", article_id=article_id)
        return True
