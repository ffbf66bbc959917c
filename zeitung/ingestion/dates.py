"""Lenient date handling shared by the parsers."""

import time
from calendar import timegm
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as date_parser
import structlog

from .interfaces import MIN_DATE

logger = structlog.get_logger()


def to_utc(value: datetime) -> datetime:
    """Return value in UTC, treating naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Optional[str]) -> datetime:
    """Parse a date string, returning MIN_DATE when it cannot be read."""
    if not value or not value.strip():
        return MIN_DATE

    try:
        return to_utc(date_parser.parse(value.strip()))
    except (ValueError, OverflowError):
        logger.debug("date_parse_failed", value=value[:50])
        return MIN_DATE


def from_struct_time(value: Optional[time.struct_time]) -> datetime:
    """Convert a feedparser UTC struct_time, returning MIN_DATE if absent."""
    if not value:
        return MIN_DATE

    try:
        return datetime.fromtimestamp(timegm(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return MIN_DATE
