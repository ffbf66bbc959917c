"""Feed ingestion orchestration: fetch, parse, tag and persist every feed."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import structlog

from ..config.feeds import load_feeds
from ..ingestion.errors import FetchError
from ..ingestion.expander import expand_feeds
from ..ingestion.fetcher import AiohttpTransport
from ..ingestion.interfaces import FeedConfig, HttpTransport, NormalizedArticle
from ..ingestion.parser_selector import ParserSelector
from ..storage.factory import get_article_storage, get_tag_repository, get_search_index
from ..storage.interfaces import ArticleStorageInterface, TagRepositoryInterface
from ..storage.search_index import NullSearchIndex, SearchIndexInterface
from ..tagging.factory import create_tagging_strategy
from ..tagging.interfaces import TaggingStrategyInterface

logger = structlog.get_logger()


@dataclass
class IngestionStats:
    """Counters for one ingestion run."""
    feeds_total: int = 0
    feeds_processed: int = 0
    feeds_failed: int = 0
    articles_seen: int = 0
    articles_created: int = 0
    cancelled: bool = False
    errors: Dict[str, str] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "feeds_total": self.feeds_total,
            "feeds_processed": self.feeds_processed,
            "feeds_failed": self.feeds_failed,
            "articles_seen": self.articles_seen,
            "articles_created": self.articles_created,
            "cancelled": self.cancelled,
            "duration_seconds": (datetime.now() - self.started_at).total_seconds(),
        }


class FeedIngestPipeline:
    """Processes the configured feeds one after another.

    A failure in one feed is logged and the run moves on to the next feed.
    Cancellation is checked before each feed starts.
    """

    def __init__(
        self,
        feeds: List[FeedConfig],
        transport: HttpTransport,
        tagging_strategy: TaggingStrategyInterface,
        article_storage: ArticleStorageInterface,
        tag_repository: TagRepositoryInterface,
        parser_selector: ParserSelector = None,
        search_index: SearchIndexInterface = None
    ):
        self.feeds = list(feeds)
        self.transport = transport
        self.tagging_strategy = tagging_strategy
        self.article_storage = article_storage
        self.tag_repository = tag_repository
        self.parser_selector = parser_selector or ParserSelector()
        self.search_index = search_index or NullSearchIndex()
        self.last_stats: Optional[IngestionStats] = None

    async def ingest(self, cancel_event: asyncio.Event = None) -> None:
        stats = IngestionStats(feeds_total=len(self.feeds))
        self.last_stats = stats
        logger.info("ingestion_started", feeds=len(self.feeds))

        for feed in self.feeds:
            if cancel_event is not None and cancel_event.is_set():
                stats.cancelled = True
                remaining = stats.feeds_total - stats.feeds_processed - stats.feeds_failed
                logger.info("ingestion_cancelled", remaining=remaining)
                break

            try:
                created = await self.process_feed(feed, stats)
                stats.feeds_processed += 1
                logger.info("feed_processed", feed=feed.name, new_articles=created)
            except Exception as e:
                stats.feeds_failed += 1
                stats.errors[feed.name] = str(e)
                logger.error("feed_ingest_failed", feed=feed.name, url=feed.url, error=str(e))

        logger.info("ingestion_complete", **stats.to_dict())

    async def process_feed(self, feed: FeedConfig, stats: IngestionStats = None) -> int:
        """Fetch, parse, tag and store one feed. Returns the number of new articles."""
        stats = stats or IngestionStats()

        response = await self.transport.fetch(feed.url)
        if not response.ok:
            raise FetchError(feed.url, status=response.status)

        parser = self.parser_selector.select(feed)
        articles = parser.parse(response.body, feed)
        logger.debug("feed_parsed", feed=feed.name, parser=type(parser).__name__, articles=len(articles))

        created = 0
        for article in articles:
            stats.articles_seen += 1
            if await self._store_article(article):
                created += 1
                stats.articles_created += 1
        return created

    async def _store_article(self, article: NormalizedArticle) -> bool:
        article.tags = list(await self.tagging_strategy.generate_tags(article))

        stored = self.article_storage.save_article(article)
        self.tag_repository.save_article_tags(stored.id, article.tags)
        await self.search_index.index_article(article, stored.id)
        return stored.created


def create_pipeline(
    transport: HttpTransport,
    feeds: List[FeedConfig] = None,
    tagging_strategy: TaggingStrategyInterface = None
) -> FeedIngestPipeline:
    """Wire the pipeline from settings: feeds file, database and tagging strategy."""
    if feeds is None:
        feeds = expand_feeds(load_feeds())

    tag_repository = get_tag_repository()
    return FeedIngestPipeline(
        feeds=feeds,
        transport=transport,
        tagging_strategy=tagging_strategy or create_tagging_strategy(tag_repository=tag_repository),
        article_storage=get_article_storage(),
        tag_repository=tag_repository,
        search_index=get_search_index(),
    )


async def run_ingestion(cancel_event: asyncio.Event = None, feeds: List[FeedConfig] = None) -> IngestionStats:
    """Run one ingestion over all configured feeds."""
    async with AiohttpTransport() as transport:
        pipeline = create_pipeline(transport, feeds=feeds)
        await pipeline.ingest(cancel_event)
    return pipeline.last_stats
