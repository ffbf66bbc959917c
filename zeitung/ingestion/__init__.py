"""Feed ingestion - expanding, fetching and parsing configured feeds."""

from .interfaces import (
    FeedConfig, FeedType, HtmlExtractionConfig, SelectorConfig,
    NormalizedArticle, FeedParserInterface, FetchResponse, HttpTransport, MIN_DATE
)
from .errors import (
    IngestionError, ConfigurationError, NoParserFound,
    MissingHtmlConfig, FetchError, FeedParseError
)
from .expander import expand_feed, expand_feeds
from .rss_parser import RssFeedParser
from .rdf_parser import RdfFeedParser
from .html_parser import HtmlFeedParser
from .parser_selector import ParserSelector
from .fetcher import AiohttpTransport

__all__ = [
    "FeedConfig", "FeedType", "HtmlExtractionConfig", "SelectorConfig",
    "NormalizedArticle", "FeedParserInterface", "FetchResponse", "HttpTransport", "MIN_DATE",
    "IngestionError", "ConfigurationError", "NoParserFound",
    "MissingHtmlConfig", "FetchError", "FeedParseError",
    "expand_feed", "expand_feeds",
    "RssFeedParser", "RdfFeedParser", "HtmlFeedParser", "ParserSelector",
    "AiohttpTransport",
]
