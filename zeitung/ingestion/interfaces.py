"""Interface definitions for feed ingestion."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union
from enum import Enum

from .errors import ConfigurationError


# Placeholder replaced by each url pattern value during expansion
PATTERN_PLACEHOLDER = "{pattern}"

# Published date used when a feed gives none or gives one we cannot read
MIN_DATE = datetime(1, 1, 1, tzinfo=timezone.utc)


class FeedType(str, Enum):
    """Declared feed formats."""
    RSS = "rss"
    ATOM = "atom"
    RDF = "rdf"
    HTML5 = "html5"


class Extractor(str, Enum):
    """How a value is read from an element matched by a selector."""
    TEXT = "text"
    HREF = "href"
    SRC = "src"
    DATETIME = "datetime"
    ATTRIBUTE = "attribute"


@dataclass(frozen=True)
class SelectorConfig:
    """CSS selector plus the rule for reading a value from the match."""
    selector: str
    extractor: str = Extractor.TEXT.value
    attribute: Optional[str] = None

    def __post_init__(self):
        valid = {e.value for e in Extractor}
        if self.extractor.lower() not in valid:
            raise ConfigurationError(
                f"Unknown extractor '{self.extractor}' for selector '{self.selector}'"
            )
        if self.extractor.lower() == Extractor.ATTRIBUTE.value and not self.attribute:
            raise ConfigurationError(
                f"Selector '{self.selector}' uses the attribute extractor without an attribute name"
            )


@dataclass(frozen=True)
class HtmlExtractionConfig:
    """Rules for scraping articles out of an HTML page."""
    items_selector: str
    title: SelectorConfig
    link: SelectorConfig
    description: Optional[SelectorConfig] = None
    published_at: Optional[SelectorConfig] = None
    category: Optional[SelectorConfig] = None


@dataclass(frozen=True)
class FeedConfig:
    """Configuration for a single feed source.

    ``url``, ``name`` and ``description`` may contain ``{pattern}`` when
    ``url_patterns`` is set; see :mod:`zeitung.ingestion.expander`.
    """
    url: str
    name: str
    description: Optional[str] = None
    feed_type: str = FeedType.RSS.value
    url_patterns: Optional[List[str]] = None
    pattern_names: Optional[Dict[str, str]] = None
    html_config: Optional[HtmlExtractionConfig] = None

    @property
    def normalized_type(self) -> str:
        return (self.feed_type or "").strip().lower()


@dataclass
class NormalizedArticle:
    """An article produced by a parser, before it is persisted."""
    title: str
    link: str
    description: str = ""
    published_date: datetime = MIN_DATE
    categories: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    feed_source: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "published_date": self.published_date.isoformat(),
            "categories": list(self.categories),
            "tags": list(self.tags),
            "feed_source": self.feed_source,
        }


class FeedParserInterface:
    """Interface for format-specific feed parsers."""

    def can_handle(self, config: FeedConfig) -> bool:
        """Return True if this parser claims the feed configuration."""
        raise NotImplementedError

    def parse(self, content: Union[str, bytes], config: FeedConfig) -> List[NormalizedArticle]:
        """Convert fetched content into normalized articles."""
        raise NotImplementedError


@dataclass
class FetchResponse:
    """Raw result of fetching a feed URL."""
    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpTransport:
    """Interface for the HTTP client used to download feeds."""

    async def fetch(self, url: str) -> FetchResponse:
        """Download a URL and return its status and body."""
        raise NotImplementedError
