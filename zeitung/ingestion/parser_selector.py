"""Selects the parser responsible for a feed configuration."""

from typing import List, Optional

import structlog

from .errors import NoParserFound
from .html_parser import HtmlFeedParser
from .interfaces import FeedConfig, FeedParserInterface
from .rss_parser import RssFeedParser

logger = structlog.get_logger()


class ParserSelector:
    """Returns the first parser, in registration order, that claims a feed."""

    def __init__(self, parsers: Optional[List[FeedParserInterface]] = None):
        if parsers is None:
            parsers = [RssFeedParser(), HtmlFeedParser()]
        self.parsers = parsers

    def select(self, config: FeedConfig) -> FeedParserInterface:
        if config is None:
            raise ValueError("config must not be None")

        for parser in self.parsers:
            if parser.can_handle(config):
                logger.debug("parser_selected", parser=type(parser).__name__, feed=config.name)
                return parser

        raise NoParserFound(config.name, config.feed_type)
