"""Parser for RSS 2.0 and Atom feeds."""

import io
from typing import List, Optional, Union

import feedparser
import structlog

from .dates import from_struct_time
from .errors import FeedParseError
from .interfaces import FeedConfig, FeedParserInterface, FeedType, NormalizedArticle
from .rdf_parser import RdfFeedParser

logger = structlog.get_logger()

# feedparser version strings for RSS 0.90 / 1.0, both RDF based
RDF_VERSIONS = ("rss090", "rss10")


class RssFeedParser(FeedParserInterface):
    """Parses generic syndication feeds with feedparser.

    RDF documents are handed to :class:`RdfFeedParser`, either because
    feedparser identified them as RSS 1.0 or because the XML error it
    reported mentions RDF.
    """

    HANDLED_TYPES = ("", FeedType.RSS.value, FeedType.ATOM.value, FeedType.RDF.value)

    def __init__(self, rdf_parser: Optional[RdfFeedParser] = None):
        self.rdf_parser = rdf_parser or RdfFeedParser()

    def can_handle(self, config: FeedConfig) -> bool:
        return config.normalized_type in self.HANDLED_TYPES

    def parse(self, content: Union[str, bytes], config: FeedConfig) -> List[NormalizedArticle]:
        raw = content.encode("utf-8") if isinstance(content, str) else content
        # A file object is never read as a URL or local path
        parsed = feedparser.parse(io.BytesIO(raw))

        if self._looks_like_rdf(parsed):
            logger.info("rdf_detected", feed=config.name, version=parsed.get("version", ""))
            return self.rdf_parser.parse(raw, config)

        if parsed.bozo and not parsed.entries:
            raise FeedParseError(f"Failed to parse feed {config.name}: {parsed.bozo_exception}")

        articles = [self._parse_entry(entry, config) for entry in parsed.entries]

        logger.info("feed_parsed", feed=config.name, articles=len(articles))
        return articles

    def _looks_like_rdf(self, parsed) -> bool:
        """Detect RSS 1.0 content, including RDF mis-served as RSS 2.0."""
        if parsed.get("version", "") in RDF_VERSIONS:
            return True
        if parsed.bozo and not parsed.entries:
            return "RDF" in str(parsed.get("bozo_exception", ""))
        return False

    def _parse_entry(self, entry, config: FeedConfig) -> NormalizedArticle:
        """Convert a feedparser entry into a NormalizedArticle."""
        link = ""
        links = entry.get("links") or []
        if links:
            link = links[0].get("href", "") or ""
        if not link:
            link = entry.get("link", "") or ""

        published = entry.get("published_parsed") or entry.get("updated_parsed")

        categories = [
            tag.get("term")
            for tag in entry.get("tags", []) or []
            if tag.get("term")
        ]

        return NormalizedArticle(
            title=entry.get("title") or "No Title",
            link=link,
            description=entry.get("summary", "") or "",
            published_date=from_struct_time(published),
            categories=categories,
            feed_source=config.name,
        )
