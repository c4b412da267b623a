"""Structured model of a podcast RSS feed.

The dataclasses here mirror the RSS 2.0 + iTunes layout a podcast feed uses:
a Feed owns one Channel, a Channel owns its Items in document order, and an
Item carries at most one Enclosure (the actual media file).

Scalar fields that need more than string handling are decoded explicitly by
the parse functions at the bottom of this module rather than by the XML layer.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

# RFC-1123 with a numeric zone, e.g. "Mon, 02 Jan 2006 15:04:05 -0700"
RFC1123Z_FORMAT = "%a, %d %b %Y %H:%M:%S %z"

# Seconds per duration component, least-significant first
DURATION_WEIGHTS = (1, 60, 3600, 86400)

_INTEGER = re.compile(r"[+-]?\d+")


class TimestampError(ValueError):
    """Raised when a timestamp is not in RFC-1123 numeric-zone form."""


class DurationError(ValueError):
    """Raised when a duration string cannot be decoded."""


@dataclass
class Enclosure:
    """Media file attached to a feed item."""

    url: str
    mime_type: str = ""
    length: int = 0


@dataclass
class Guid:
    """Item identifier. Not necessarily a URL."""

    text: str = ""


@dataclass
class Owner:
    """iTunes channel owner."""

    name: str = ""
    email: str = ""


@dataclass
class Item:
    """A single episode entry in a channel."""

    title: str = ""
    author: str = ""
    category: str = ""
    description: str = ""
    pub_date: Optional[datetime] = None
    duration: Optional[timedelta] = None
    guid: Guid = field(default_factory=Guid)
    keywords: List[str] = field(default_factory=list)
    enclosure: Optional[Enclosure] = None


@dataclass
class Channel:
    """Podcast channel metadata plus its items in document order."""

    title: str = ""
    description: str = ""
    owner: Optional[Owner] = None
    items: List[Item] = field(default_factory=list)

    # iTunes / RSS extras
    author: str = ""
    categories: List[str] = field(default_factory=list)
    copyright: str = ""
    explicit: Optional[bool] = None
    image_url: Optional[str] = None
    language: str = ""
    last_build_date: Optional[datetime] = None
    link: str = ""
    pub_date: Optional[datetime] = None
    summary: str = ""


@dataclass
class Feed:
    """Top-level parsed feed document."""

    channel: Channel
    version: str = ""


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC-1123 timestamp with a numeric zone.

    Args:
        value: Timestamp string such as "Mon, 01 Jan 2024 12:00:00 +0000".

    Returns:
        Timezone-aware datetime.

    Raises:
        TimestampError: If the string is not in the expected format.
    """
    try:
        return datetime.strptime(value.strip(), RFC1123Z_FORMAT)
    except (ValueError, AttributeError) as e:
        raise TimestampError(f"can't parse {value!r} as RFC-1123 timestamp: {e}") from e


def format_timestamp(value: datetime) -> str:
    """Render a timestamp in the same wire format parse_timestamp accepts."""
    return value.strftime(RFC1123Z_FORMAT)


def parse_duration(value: str) -> timedelta:
    """Parse an iTunes duration string.

    Components are colon-separated and read right to left as seconds,
    minutes, hours and days:
    - "45" = 45 seconds
    - "02:03" = 123 seconds
    - "1:02:03" = 3723 seconds
    - "1:00:00:00" = 86400 seconds

    Args:
        value: Duration string from the feed.

    Returns:
        Duration as a timedelta.

    Raises:
        DurationError: If a component is not an integer or there are more
            than four components.
    """
    chunks = value.split(":")
    if len(chunks) > len(DURATION_WEIGHTS):
        raise DurationError(
            f"can't parse {value} as duration, too many components ({len(chunks)})"
        )

    seconds = 0
    for weight, chunk in zip(DURATION_WEIGHTS, reversed(chunks)):
        if not _INTEGER.fullmatch(chunk):
            raise DurationError(
                f"can't parse {value} as duration, {chunk!r} not integer"
            )
        seconds += int(chunk) * weight

    return timedelta(seconds=seconds)


def parse_keywords(value: str) -> List[str]:
    """Split a comma-separated keyword list, trimming each entry."""
    if not value or not value.strip():
        return []
    return [keyword.strip(" \n\t") for keyword in value.split(",")]
