"""Integration tests for the feed ingestion pipeline."""

import asyncio
import pytest

from zeitung.ingestion.interfaces import FeedConfig, FetchResponse, HttpTransport
from zeitung.pipeline.ingest import FeedIngestPipeline
from zeitung.storage.database import ArticleStorage, SqlTagRepository
from zeitung.storage.memory import InMemoryArticleStorage, InMemoryTagRepository
from zeitung.tagging.strategies import FeedCategoryTaggingStrategy, MockTaggingStrategy


def _rss(*links):
    items = "".join(
        f"<item><title>Story {i}</title><link>{link}</link><category>News</category></item>"
        for i, link in enumerate(links)
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel><title>T</title>{items}</channel></rss>'.encode()


class FakeTransport(HttpTransport):
    """Serves canned responses by URL; exceptions are raised when fetched."""

    def __init__(self, responses, on_fetch=None):
        self.responses = responses
        self.on_fetch = on_fetch
        self.fetched = []

    async def fetch(self, url):
        self.fetched.append(url)
        if self.on_fetch:
            self.on_fetch(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


def _feeds(*names):
    return [FeedConfig(url=f"https://{name}.example.com/rss", name=name) for name in names]


def _pipeline(feeds, transport, tagging_strategy=None, articles=None, tags=None):
    return FeedIngestPipeline(
        feeds=feeds,
        transport=transport,
        tagging_strategy=tagging_strategy or MockTaggingStrategy(),
        article_storage=articles or InMemoryArticleStorage(),
        tag_repository=tags or InMemoryTagRepository(),
    )


@pytest.mark.asyncio
class TestFeedIngestPipeline:
    """Integration tests for FeedIngestPipeline."""

    async def test_failing_feed_does_not_stop_others(self):
        feeds = _feeds("one", "two", "three")
        transport = FakeTransport({
            feeds[0].url: FetchResponse(200, _rss("https://one.example.com/a")),
            feeds[1].url: ConnectionError("connection refused"),
            feeds[2].url: FetchResponse(200, _rss("https://three.example.com/a", "https://three.example.com/b")),
        })
        articles = InMemoryArticleStorage()
        pipeline = _pipeline(feeds, transport, articles=articles)

        await pipeline.ingest()

        assert transport.fetched == [f.url for f in feeds]
        assert articles.count() == 3
        assert articles.get_by_link("https://three.example.com/b") is not None
        assert pipeline.last_stats.feeds_processed == 2
        assert pipeline.last_stats.feeds_failed == 1
        assert "two" in pipeline.last_stats.errors

    async def test_non_2xx_is_a_feed_failure(self):
        feeds = _feeds("gone", "ok")
        transport = FakeTransport({
            feeds[0].url: FetchResponse(404, b"not found"),
            feeds[1].url: FetchResponse(200, _rss("https://ok.example.com/a")),
        })
        articles = InMemoryArticleStorage()
        pipeline = _pipeline(feeds, transport, articles=articles)

        await pipeline.ingest()

        assert articles.count() == 1
        assert "404" in pipeline.last_stats.errors["gone"]

    async def test_unparseable_and_unsupported_feeds_are_skipped(self):
        feeds = [
            FeedConfig(url="https://broken.example.com/rss", name="broken"),
            FeedConfig(url="https://json.example.com/api", name="json", feed_type="json"),
            FeedConfig(url="https://ok.example.com/rss", name="ok"),
        ]
        transport = FakeTransport({
            feeds[0].url: FetchResponse(200, b"<html><p>oops"),
            feeds[1].url: FetchResponse(200, b"{}"),
            feeds[2].url: FetchResponse(200, _rss("https://ok.example.com/a")),
        })
        articles = InMemoryArticleStorage()
        pipeline = _pipeline(feeds, transport, articles=articles)

        await pipeline.ingest()

        assert articles.count() == 1
        assert set(pipeline.last_stats.errors) == {"broken", "json"}

    async def test_cancel_before_start_processes_nothing(self):
        feeds = _feeds("one")
        transport = FakeTransport({feeds[0].url: FetchResponse(200, _rss("https://one.example.com/a"))})
        cancel_event = asyncio.Event()
        cancel_event.set()
        pipeline = _pipeline(feeds, transport)

        await pipeline.ingest(cancel_event)

        assert transport.fetched == []
        assert pipeline.last_stats.cancelled is True

    async def test_cancel_is_checked_between_feeds(self):
        feeds = _feeds("one", "two")
        cancel_event = asyncio.Event()
        transport = FakeTransport(
            {
                feeds[0].url: FetchResponse(200, _rss("https://one.example.com/a")),
                feeds[1].url: FetchResponse(200, _rss("https://two.example.com/a")),
            },
            on_fetch=lambda url: cancel_event.set(),
        )
        articles = InMemoryArticleStorage()
        pipeline = _pipeline(feeds, transport, articles=articles)

        await pipeline.ingest(cancel_event)

        # The feed already started runs to completion
        assert transport.fetched == [feeds[0].url]
        assert articles.count() == 1

    async def test_tags_are_attached_and_counted(self):
        feeds = _feeds("one")
        transport = FakeTransport({
            feeds[0].url: FetchResponse(200, _rss("https://one.example.com/a", "https://one.example.com/b")),
        })
        articles = InMemoryArticleStorage()
        tags = InMemoryTagRepository()
        pipeline = _pipeline(feeds, transport, articles=articles, tags=tags)

        await pipeline.ingest()

        stored = articles.get_by_link("https://one.example.com/a")
        assert tags.get_article_tags(stored.id) == ["mock-tag-1", "mock-tag-2", "test"]
        assert tags.get_co_occurrence("mock-tag-1", "test") == 2

    async def test_end_to_end_with_sqlite(self, temp_db, load_fixture):
        feed = FeedConfig(url="https://news.example.com/rss.xml", name="Example Tech News")
        transport = FakeTransport({feed.url: FetchResponse(200, load_fixture("sample_rss.xml"))})
        articles = ArticleStorage(temp_db)
        tags = SqlTagRepository(engine=articles.engine)
        pipeline = _pipeline(
            [feed], transport,
            tagging_strategy=FeedCategoryTaggingStrategy(),
            articles=articles, tags=tags
        )

        await pipeline.ingest()
        await pipeline.ingest()

        assert articles.count() == 3
        assert pipeline.last_stats.articles_seen == 3
        assert pipeline.last_stats.articles_created == 0
        stored = articles.get_by_link("https://news.example.com/articles/quantum-chips")
        assert stored.feed_source == "Example Tech News"
        assert tags.get_article_tags(stored.id)[:2] == ["Science", "Hardware"]
