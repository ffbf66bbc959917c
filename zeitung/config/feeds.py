"""Feed configuration loader."""

from pathlib import Path
from typing import List, Optional

import structlog
import yaml

from ..ingestion.errors import ConfigurationError
from ..ingestion.interfaces import FeedConfig, FeedType, HtmlExtractionConfig, SelectorConfig

logger = structlog.get_logger()

KNOWN_TYPES = {t.value for t in FeedType}


def _get(data: dict, camel: str, snake: str, default=None):
    """Read a key accepting both camelCase and snake_case spellings."""
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def _load_selector(data: Optional[dict], field_name: str) -> Optional[SelectorConfig]:
    if data is None:
        return None
    if not isinstance(data, dict) or not data.get("selector"):
        raise ConfigurationError(f"Selector config '{field_name}' needs a 'selector'")
    return SelectorConfig(
        selector=data["selector"],
        extractor=data.get("extractor", "text"),
        attribute=data.get("attribute"),
    )


def _load_html_config(data: Optional[dict]) -> Optional[HtmlExtractionConfig]:
    if data is None:
        return None

    items_selector = _get(data, "itemsSelector", "items_selector")
    if not items_selector:
        raise ConfigurationError("htmlConfig needs an 'itemsSelector'")

    title = _load_selector(data.get("title"), "title")
    link = _load_selector(data.get("link"), "link")
    if title is None or link is None:
        raise ConfigurationError("htmlConfig needs 'title' and 'link' selectors")

    return HtmlExtractionConfig(
        items_selector=items_selector,
        title=title,
        link=link,
        description=_load_selector(data.get("description"), "description"),
        published_at=_load_selector(_get(data, "publishedAt", "published_at"), "publishedAt"),
        category=_load_selector(data.get("category"), "category"),
    )


def parse_feed(feed_data: dict) -> FeedConfig:
    """Build a FeedConfig from one configuration record."""
    if not feed_data.get("url") or not feed_data.get("name"):
        raise ConfigurationError(f"Feed entry needs 'url' and 'name': {feed_data}")

    feed_type = str(feed_data.get("type") or FeedType.RSS.value)
    html_config = _load_html_config(_get(feed_data, "htmlConfig", "html_config"))

    if feed_type.lower() not in KNOWN_TYPES:
        logger.warning("feed_type_unknown", feed=feed_data["name"], type=feed_type)
    elif feed_type.lower() == FeedType.HTML5.value and html_config is None:
        logger.warning("feed_html_config_missing", feed=feed_data["name"])

    url_patterns = _get(feed_data, "urlPatterns", "url_patterns")
    pattern_names = _get(feed_data, "patternNames", "pattern_names")

    return FeedConfig(
        url=feed_data["url"],
        name=feed_data["name"],
        description=feed_data.get("description"),
        feed_type=feed_type,
        url_patterns=[str(p) for p in url_patterns] if url_patterns else None,
        pattern_names={str(k): str(v) for k, v in pattern_names.items()} if pattern_names else None,
        html_config=html_config,
    )


def load_feeds(config_path: str = None) -> List[FeedConfig]:
    """Load feed configurations from a YAML or JSON file.

    JSON goes through the YAML loader, which also accepts ``#`` comments.
    """
    if config_path is None:
        from .settings import settings
        config_path = settings.feeds_config_path

    with open(Path(config_path), encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    feeds = [parse_feed(feed_data) for feed_data in data.get("feeds", []) or []]
    logger.info("feeds_loaded", path=str(config_path), count=len(feeds))
    return feeds
