"""Expansion of templated feed configurations into concrete feeds."""

import dataclasses
from typing import Iterable, List

from .interfaces import FeedConfig, PATTERN_PLACEHOLDER


def expand_feed(feed: FeedConfig) -> List[FeedConfig]:
    """Expand a feed with url patterns into one feed per pattern.

    The URL always receives the pattern value itself. Name and description
    receive the display name from ``pattern_names`` when one is mapped,
    otherwise the pattern value. ``feed_type`` and ``html_config`` are shared
    by reference across all expanded feeds.
    """
    if not feed.url_patterns:
        return [feed]

    display_names = feed.pattern_names or {}
    expanded = []
    for pattern in feed.url_patterns:
        display = display_names.get(pattern, pattern)
        description = feed.description
        if description is not None:
            description = description.replace(PATTERN_PLACEHOLDER, display)

        expanded.append(dataclasses.replace(
            feed,
            url=feed.url.replace(PATTERN_PLACEHOLDER, pattern),
            name=feed.name.replace(PATTERN_PLACEHOLDER, display),
            description=description,
            url_patterns=None,
            pattern_names=None,
        ))

    return expanded


def expand_feeds(feeds: Iterable[FeedConfig]) -> List[FeedConfig]:
    """Expand every feed, preserving input order."""
    expanded = []
    for feed in feeds:
        expanded.extend(expand_feed(feed))
    return expanded
