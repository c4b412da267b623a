"""RSS feed parser for podcast channels and episodes.

Uses feedparser for structural decoding, then decodes timestamps,
durations and keyword lists explicitly into the feed model.
"""

import io
import logging
import xml.etree.ElementTree as ET
import xml.sax
from typing import Callable, List, Optional, Set, TypeVar

import feedparser
import requests

from .models import (
    Channel,
    DurationError,
    Enclosure,
    Feed,
    Guid,
    Item,
    Owner,
    TimestampError,
    parse_duration,
    parse_keywords,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ITUNES_NS = "http://www.itunes.com/dtds/podcast-1.0.dtd"


class FeedFetchError(Exception):
    """Raised when a feed document cannot be retrieved."""


class FeedParseError(ValueError):
    """Raised when a feed document is malformed."""


class FeedParser:
    """Parser for podcast RSS feeds.

    Example:
        parser = FeedParser()
        feed = parser.parse_url("https://example.com/feed.xml")
        print(f"Podcast: {feed.channel.title}")
        for item in feed.channel.items:
            print(f"  - {item.title}")
    """

    USER_AGENT = "podget/1.0"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the feed parser.

        Args:
            session: Requests session used for fetching. One is created if
                not given.
            user_agent: Custom user agent string for requests
            timeout: Per-request timeout in seconds, None to wait forever
        """
        self.user_agent = user_agent or self.USER_AGENT
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    def fetch(self, feed_url: str) -> bytes:
        """Retrieve a feed document.

        Args:
            feed_url: URL of the RSS feed

        Returns:
            Raw document bytes

        Raises:
            FeedFetchError: On transport failure or an HTTP error status.
        """
        try:
            response = self._session.get(feed_url, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        except requests.RequestException as e:
            raise FeedFetchError(f"can't fetch feed {feed_url}: {e}") from e

    def parse_url(self, feed_url: str) -> Feed:
        """Fetch and parse a podcast feed.

        Raises:
            FeedFetchError: If the feed cannot be retrieved.
            FeedParseError: If the document is malformed.
        """
        logger.info(f"fetching {feed_url}")
        return self.parse_bytes(self.fetch(feed_url))

    def parse_string(self, content: str) -> Feed:
        """Parse a podcast feed from string content."""
        return self.parse_bytes(content.encode("utf-8"))

    def parse_bytes(self, content: bytes) -> Feed:
        """Parse a podcast feed from raw bytes.

        Args:
            content: RSS document

        Returns:
            Feed with channel and item data

        Raises:
            FeedParseError: If the XML is not well formed or is not a feed.
        """
        logger.debug(f"processing channel data [{content[:40]!r}]")
        parsed = feedparser.parse(io.BytesIO(content))

        if parsed.bozo and isinstance(parsed.bozo_exception, xml.sax.SAXException):
            raise FeedParseError(f"error parsing XML: {parsed.bozo_exception}")

        if not parsed.get("version"):
            raise FeedParseError("error parsing XML: not an RSS or Atom document")

        return Feed(
            channel=self._parse_channel(parsed, content),
            version=parsed.get("version", ""),
        )

    def _parse_channel(self, parsed: feedparser.FeedParserDict, content: bytes) -> Channel:
        f = parsed.feed
        keywords = set(parse_keywords(f.get("itunes_keywords", "")))

        channel = Channel(
            title=f.get("title", ""),
            # feedparser files the channel <description> under "subtitle"
            description=f.get("subtitle", ""),
            owner=self._parse_owner(f),
            author=self._channel_author(content, f.get("author", "")),
            categories=self._tag_terms(f, exclude=keywords),
            copyright=f.get("rights", ""),
            image_url=self._extract_image_url(f),
            language=f.get("language", ""),
            link=f.get("link", ""),
            summary=f.get("summary", ""),
        )

        explicit = f.get("itunes_explicit")
        if isinstance(explicit, bool):
            channel.explicit = explicit

        channel.last_build_date = self._decode(
            parse_timestamp, self._last_build_date(f), "lastBuildDate", channel.title
        )
        channel.pub_date = self._decode(
            parse_timestamp, f.get("published"), "pubDate", channel.title
        )

        for entry in parsed.entries:
            channel.items.append(self._parse_item(entry))

        logger.debug(f"parsed channel '{channel.title}' with {len(channel.items)} items")
        return channel

    def _parse_item(self, entry: feedparser.FeedParserDict) -> Item:
        title = entry.get("title", "")
        keywords = self._item_keywords(entry)

        item = Item(
            title=title,
            author=entry.get("author", ""),
            category=next(iter(self._tag_terms(entry, exclude=set(keywords))), ""),
            description=entry.get("description", ""),
            guid=Guid(text=entry.get("id", "")),
            keywords=keywords,
            enclosure=self._extract_enclosure(entry),
        )
        item.pub_date = self._decode(parse_timestamp, entry.get("published"), "pubDate", title)
        item.duration = self._decode(parse_duration, entry.get("itunes_duration"), "duration", title)
        return item

    def _decode(
        self,
        decoder: Callable[[str], T],
        raw: Optional[str],
        field_name: str,
        context: str,
    ) -> Optional[T]:
        """Run a scalar decoder, leaving the field unset on failure."""
        if not raw:
            return None
        try:
            return decoder(raw)
        except (TimestampError, DurationError) as e:
            logger.warning(f"bad {field_name} in '{context}': {e}")
            return None

    def _channel_author(self, content: bytes, fallback: str) -> str:
        """Read the channel author straight from the document.

        feedparser stores <itunes:owner><itunes:name> in the same author
        record as <itunes:author>, so whichever comes last wins there.
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            logger.debug(f"can't re-read channel author, using feedparser's: {e}")
            return fallback

        channel = root.find("channel")
        if channel is None:
            return fallback

        for tag in (f"{{{ITUNES_NS}}}author", "author", "managingEditor"):
            text = channel.findtext(tag)
            if text and text.strip():
                return text.strip()
        return ""

    def _last_build_date(self, feed: feedparser.FeedParserDict) -> Optional[str]:
        # feed.get("updated") falls back to pubDate, so check the key directly
        if dict.__contains__(feed, "updated"):
            return feed["updated"]
        return None

    def _item_keywords(self, entry: feedparser.FeedParserDict) -> List[str]:
        raw = entry.get("itunes_keywords")
        if raw:
            return parse_keywords(raw)
        # feedparser also files iTunes keywords as tags under the iTunes scheme
        return [
            tag.get("term")
            for tag in entry.get("tags", [])
            if tag.get("scheme") == "http://www.itunes.com/" and tag.get("term")
        ]

    def _tag_terms(self, context: feedparser.FeedParserDict, exclude: Set[str]) -> List[str]:
        terms = []
        for tag in context.get("tags", []):
            term = tag.get("term")
            if term and term not in exclude and term not in terms:
                terms.append(term)
        return terms

    def _parse_owner(self, feed: feedparser.FeedParserDict) -> Optional[Owner]:
        detail = feed.get("publisher_detail")
        if not detail:
            return None
        return Owner(name=detail.get("name", ""), email=detail.get("email", ""))

    def _extract_enclosure(self, entry: feedparser.FeedParserDict) -> Optional[Enclosure]:
        for enclosure in entry.get("enclosures", []):
            url = enclosure.get("href") or enclosure.get("url")
            if not url:
                continue
            length = 0
            if enclosure.get("length"):
                try:
                    length = int(enclosure.get("length"))
                except (ValueError, TypeError):
                    pass
            return Enclosure(url=url, mime_type=enclosure.get("type", ""), length=length)
        return None

    def _extract_image_url(self, feed: feedparser.FeedParserDict) -> Optional[str]:
        image = feed.get("image")
        if not image:
            return None
        if isinstance(image, dict):
            return image.get("href") or image.get("url")
        return image

    def close(self):
        """Close the underlying HTTP session."""
        self._session.close()
