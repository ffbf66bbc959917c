"""Parser for HTML pages scraped with CSS selectors."""

from typing import List, Optional, Union
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag
import structlog

from .dates import parse_datetime
from .errors import MissingHtmlConfig
from .interfaces import (
    Extractor, FeedConfig, FeedParserInterface, FeedType,
    HtmlExtractionConfig, NormalizedArticle, SelectorConfig, MIN_DATE
)

logger = structlog.get_logger()


def _attribute(element: Tag, name: str) -> Optional[str]:
    """Read an attribute as a string (bs4 returns lists for class-like attributes)."""
    value = element.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def extract_value(element: Tag, selector_config: SelectorConfig) -> Optional[str]:
    """Apply an extractor to an element that already matched the selector."""
    extractor = selector_config.extractor.lower()

    if extractor == Extractor.HREF.value:
        return _attribute(element, "href")
    if extractor == Extractor.SRC.value:
        return _attribute(element, "src")
    if extractor == Extractor.DATETIME.value:
        value = _attribute(element, "datetime")
        return value if value is not None else element.get_text().strip()
    if extractor == Extractor.ATTRIBUTE.value and selector_config.attribute:
        return _attribute(element, selector_config.attribute)
    return element.get_text().strip()


def select_value(item: Tag, selector_config: SelectorConfig) -> Optional[str]:
    """Extract a value from the first descendant matching the selector."""
    element = item.select_one(selector_config.selector)
    if element is None:
        return None
    return extract_value(element, selector_config)


def select_values(item: Tag, selector_config: SelectorConfig) -> List[str]:
    """Extract non-empty values from every descendant matching the selector."""
    values = []
    for element in item.select(selector_config.selector):
        value = extract_value(element, selector_config)
        if value and value.strip():
            values.append(value)
    return values


def resolve_url(url: str, base_url: str) -> str:
    """Make a link absolute against the feed URL, keeping it as-is on failure."""
    if not url or not url.strip():
        return ""

    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return url

    try:
        return urljoin(base_url, url)
    except ValueError:
        return url


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class HtmlFeedParser(FeedParserInterface):
    """Scrapes articles from an HTML page using the feed's extraction rules."""

    def can_handle(self, config: FeedConfig) -> bool:
        return config.normalized_type == FeedType.HTML5.value and config.html_config is not None

    def parse(self, content: Union[str, bytes], config: FeedConfig) -> List[NormalizedArticle]:
        if config.html_config is None:
            raise MissingHtmlConfig(config.name)

        html_config = config.html_config
        soup = BeautifulSoup(content, "html.parser")
        items = soup.select(html_config.items_selector)
        logger.debug("html_items_found", feed=config.name, count=len(items),
                     selector=html_config.items_selector)

        articles = []
        for item in items:
            article = self._parse_item(item, html_config, config)
            if article is not None:
                articles.append(article)

        logger.info("html_feed_parsed", feed=config.name, articles=len(articles))
        return articles

    def _parse_item(
        self,
        item: Tag,
        html_config: HtmlExtractionConfig,
        config: FeedConfig
    ) -> Optional[NormalizedArticle]:
        title = select_value(item, html_config.title)
        link = select_value(item, html_config.link)

        if _is_blank(title) and _is_blank(link):
            return None

        description = ""
        if html_config.description is not None:
            description = select_value(item, html_config.description) or ""

        published_date = MIN_DATE
        if html_config.published_at is not None:
            published_date = parse_datetime(select_value(item, html_config.published_at))

        categories = []
        if html_config.category is not None:
            categories = select_values(item, html_config.category)

        return NormalizedArticle(
            title=title if not _is_blank(title) else "No Title",
            link=resolve_url(link or "", config.url),
            description=description,
            published_date=published_date,
            categories=categories,
            feed_source=config.name,
        )
