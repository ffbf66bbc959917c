"""Exceptions raised by the ingestion pipeline."""

from typing import Optional


class IngestionError(Exception):
    """Base class for ingestion failures."""


class ConfigurationError(IngestionError):
    """Feed or selector configuration is invalid."""


class NoParserFound(ConfigurationError):
    """No registered parser claims a feed configuration."""

    def __init__(self, feed_name: str, feed_type: str):
        super().__init__(f"No parser found for feed '{feed_name}' with type '{feed_type}'")
        self.feed_name = feed_name
        self.feed_type = feed_type


class MissingHtmlConfig(ConfigurationError):
    """An html5 feed was parsed without extraction rules."""

    def __init__(self, feed_name: str):
        super().__init__(f"HTML config is required for HTML5 feed: {feed_name}")
        self.feed_name = feed_name


class FetchError(IngestionError):
    """The feed URL answered with a non-2xx status."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        message = f"Fetching {url} failed"
        if status is not None:
            message += f" with status {status}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.url = url
        self.status = status


class FeedParseError(IngestionError):
    """Fetched content could not be read as a feed."""
