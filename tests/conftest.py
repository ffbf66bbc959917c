"""Pytest configuration and shared fixtures."""

import pytest
import tempfile
import os
from pathlib import Path

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def temp_db():
    """Provide a temporary database file."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    yield f"sqlite:///{db_path}"
    # Cleanup
    try:
        os.unlink(db_path)
    except FileNotFoundError:
        pass


@pytest.fixture
def load_fixture():
    """Read a sample document from tests/fixtures as bytes."""
    def _load(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()
    return _load


@pytest.fixture
def sample_feed_config():
    """Provide a sample RSS feed configuration."""
    from zeitung.ingestion.interfaces import FeedConfig
    return FeedConfig(
        name="Example Tech News",
        url="https://news.example.com/rss.xml",
        feed_type="rss"
    )


@pytest.fixture
def sample_html_config():
    """Provide a sample HTML scraping configuration."""
    from zeitung.ingestion.interfaces import HtmlExtractionConfig, SelectorConfig
    return HtmlExtractionConfig(
        items_selector="article",
        title=SelectorConfig(selector="h2 a", extractor="text"),
        link=SelectorConfig(selector="h2 a", extractor="href"),
        description=SelectorConfig(selector="p.summary", extractor="text"),
        published_at=SelectorConfig(selector="time", extractor="datetime"),
        category=SelectorConfig(selector="span.category", extractor="text"),
    )


@pytest.fixture
def sample_article():
    """Provide a sample NormalizedArticle."""
    from datetime import datetime, timezone
    from zeitung.ingestion.interfaces import NormalizedArticle
    return NormalizedArticle(
        title="Artificial Intelligence Breakthrough",
        link="https://news.example.com/articles/ai-breakthrough",
        description="A new model beats the benchmark.",
        published_date=datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc),
        categories=["Tech"],
        feed_source="Example Tech News",
    )
