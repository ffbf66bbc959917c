"""Unit tests for tagging strategies."""

import json
import pytest
from unittest.mock import AsyncMock, MagicMock

from zeitung.config.settings import settings
from zeitung.ingestion.errors import ConfigurationError
from zeitung.ingestion.interfaces import NormalizedArticle
from zeitung.storage.memory import InMemoryTagRepository
from zeitung.tagging.factory import create_tagging_strategy
from zeitung.tagging.llm_client import LLMClient
from zeitung.tagging.llm_strategy import LLMTaggingStrategy
from zeitung.tagging.strategies import FeedCategoryTaggingStrategy, MockTaggingStrategy


def _article(title="", description="", categories=None):
    return NormalizedArticle(
        title=title,
        link="https://example.com/a",
        description=description,
        categories=categories or [],
    )


def _llm_client(response=None, error=None):
    client = MagicMock()
    client.complete = AsyncMock(return_value=response, side_effect=error)
    return client


class TestFeedCategoryTaggingStrategy:
    """Tests for FeedCategoryTaggingStrategy."""

    @pytest.mark.asyncio
    async def test_categories_then_keywords(self):
        article = _article(title="Artificial Intelligence Breakthrough", categories=["Tech"])

        tags = await FeedCategoryTaggingStrategy().generate_tags(article)

        assert tags == ["Tech", "artificial", "intelligence", "breakthrough"]

    @pytest.mark.asyncio
    async def test_short_words_dropped_and_punctuation_stripped(self):
        article = _article(title="New chips, faster: really!", description="Is this great?")

        tags = await FeedCategoryTaggingStrategy().generate_tags(article)

        assert tags == ["chips", "faster", "really", "great"]

    @pytest.mark.asyncio
    async def test_at_most_five_distinct_keywords(self):
        article = _article(
            title="Alpha Bravo Charlie Alpha",
            description="Delta Echoes Foxtrot Golfer",
        )

        tags = await FeedCategoryTaggingStrategy().generate_tags(article)

        assert tags == ["alpha", "bravo", "charlie", "delta", "echoes"]

    @pytest.mark.asyncio
    async def test_no_duplicates_between_categories_and_keywords(self):
        article = _article(title="Science news on science", categories=["science", "science"])

        tags = await FeedCategoryTaggingStrategy().generate_tags(article)

        assert tags == ["science"]

    @pytest.mark.asyncio
    async def test_empty_article(self):
        assert await FeedCategoryTaggingStrategy().generate_tags(_article()) == []


class TestMockTaggingStrategy:
    """Tests for MockTaggingStrategy."""

    @pytest.mark.asyncio
    async def test_fixed_tags(self, sample_article):
        strategy = MockTaggingStrategy()
        assert await strategy.generate_tags(sample_article) == ["mock-tag-1", "mock-tag-2", "test"]
        assert await strategy.generate_tags(_article()) == ["mock-tag-1", "mock-tag-2", "test"]


class TestLLMTaggingStrategy:
    """Tests for LLMTaggingStrategy."""

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(settings, "llm_api_key", None)
        with pytest.raises(ConfigurationError):
            LLMTaggingStrategy()

    def test_client_without_key_rejected(self, monkeypatch):
        monkeypatch.setattr(settings, "llm_api_key", None)
        client = LLMClient(api_key=None)

        assert client.has_api_key is False
        with pytest.raises(ConfigurationError):
            LLMTaggingStrategy(llm_client=client)

    @pytest.mark.asyncio
    async def test_json_reply_filtered_and_sorted(self, sample_article):
        reply = json.dumps({
            "tags": [
                {"tag": "science", "probability": 0.8},
                {"tag": "technology", "probability": 0.95},
                {"tag": "misc", "probability": 0.3},
            ],
            "comment": "ok",
            "error": None,
        })
        strategy = LLMTaggingStrategy(llm_client=_llm_client(reply), max_attempts=1, minimum_probability=0.7)

        assert await strategy.generate_tags(sample_article) == ["technology", "science"]

    @pytest.mark.asyncio
    async def test_api_failure_falls_back_to_categories(self, sample_article):
        client = _llm_client(error=RuntimeError("rate limited"))
        strategy = LLMTaggingStrategy(llm_client=client, max_attempts=1)

        assert await strategy.generate_tags(sample_article) == ["Tech"]
        client.complete.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_low_confidence_falls_back_to_categories(self, sample_article):
        reply = json.dumps({"tags": [{"tag": "maybe", "probability": 0.2}]})
        strategy = LLMTaggingStrategy(llm_client=_llm_client(reply), max_attempts=1, minimum_probability=0.7)

        assert await strategy.generate_tags(sample_article) == ["Tech"]

    @pytest.mark.asyncio
    async def test_existing_tags_included_in_prompt(self, sample_article):
        repository = InMemoryTagRepository()
        repository.save_article_tags(1, ["robotics", "energy"])
        client = _llm_client('{"tags": [{"tag": "robotics", "probability": 0.9}]}')
        strategy = LLMTaggingStrategy(
            llm_client=client, tag_repository=repository,
            include_existing_tags=True, max_attempts=1
        )

        assert await strategy.generate_tags(sample_article) == ["robotics"]
        prompt = client.complete.call_args.kwargs["prompt"]
        assert "energy, robotics" in prompt
        assert sample_article.title in prompt

    def test_parse_code_fenced_json(self):
        strategy = LLMTaggingStrategy(llm_client=_llm_client())
        reply = '```json\n{"tags": [{"tag": "ai", "probability": 0.9}], "error": null}\n```'

        result = strategy.parse_response(reply)

        assert [t.tag for t in result.tags] == ["ai"]
        assert result.tags[0].probability == 0.9

    def test_parse_comma_separated(self):
        strategy = LLMTaggingStrategy(llm_client=_llm_client())

        result = strategy.parse_response("AI, Robotics , ,energy")

        assert [t.tag for t in result.tags] == ["ai", "robotics", "energy"]
        assert all(t.probability == 1.0 for t in result.tags)

    def test_parse_broken_json(self):
        strategy = LLMTaggingStrategy(llm_client=_llm_client())
        assert strategy.parse_response('{"tags": [').tags == []


class TestCreateTaggingStrategy:
    """Tests for create_tagging_strategy."""

    def test_default_is_feed_based(self):
        assert isinstance(create_tagging_strategy("feed_based"), FeedCategoryTaggingStrategy)

    def test_mock(self):
        assert isinstance(create_tagging_strategy("mock"), MockTaggingStrategy)

    def test_llm_with_key(self, monkeypatch):
        monkeypatch.setattr(settings, "llm_api_key", "sk-test")
        assert isinstance(create_tagging_strategy("llm"), LLMTaggingStrategy)

    def test_unknown_falls_back_to_feed_based(self):
        assert isinstance(create_tagging_strategy("nonsense"), FeedCategoryTaggingStrategy)
