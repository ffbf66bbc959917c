"""Parser for RDF (RSS 1.0) feeds."""

import io
from typing import List, Optional, Union
from xml.etree import ElementTree as ET

import structlog

from .dates import parse_datetime
from .interfaces import FeedConfig, FeedParserInterface, FeedType, NormalizedArticle, MIN_DATE

logger = structlog.get_logger()


def _local_name(tag: str) -> str:
    """Strip the namespace from an element tag."""
    return tag.rsplit("}", 1)[-1]


class RdfFeedParser(FeedParserInterface):
    """Streams an RDF document and reads every ``item`` element.

    Element names are matched by local name, so RSS 1.0 and Dublin Core
    vocabularies work regardless of prefix.
    """

    def can_handle(self, config: FeedConfig) -> bool:
        return config.normalized_type == FeedType.RDF.value

    def parse(self, content: Union[str, bytes], config: FeedConfig) -> List[NormalizedArticle]:
        if isinstance(content, str):
            content = content.encode("utf-8")

        articles = []
        for _, element in ET.iterparse(io.BytesIO(content), events=("end",)):
            if _local_name(element.tag) != "item":
                continue

            article = self._parse_item(element, config)
            if article is not None:
                articles.append(article)
            element.clear()

        logger.info("rdf_feed_parsed", feed=config.name, articles=len(articles))
        return articles

    def _parse_item(self, item: ET.Element, config: FeedConfig) -> Optional[NormalizedArticle]:
        title = None
        link = None
        description = None
        published_date = MIN_DATE
        categories = []

        for child in item.iter():
            if child is item:
                continue
            name = _local_name(child.tag)
            text = "".join(child.itertext())

            if name == "title":
                title = text
            elif name == "link":
                link = text
            elif name == "description":
                description = text
            elif name in ("date", "pubDate"):
                parsed = parse_datetime(text)
                if parsed != MIN_DATE:
                    published_date = parsed
            elif name in ("category", "subject"):
                if text.strip():
                    categories.append(text)

        if not (title and title.strip()) and not (link and link.strip()):
            logger.debug("rdf_item_skipped", feed=config.name)
            return None

        return NormalizedArticle(
            title=title or "No Title",
            link=link or "",
            description=description or "",
            published_date=published_date,
            categories=categories,
            feed_source=config.name,
        )
