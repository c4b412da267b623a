"""Podcast feed handling.

Provides functionality for:
- RSS feed parsing into a structured model
- Filename extraction rules for redirect-wrapped enclosures
- Destination and overwrite decisions per episode
- Episode downloading
"""

from .downloader import DownloadResult, EpisodeDownloader
from .extraction import ExtractionRule, compile_extraction_rule
from .feed_parser import FeedParser
from .models import Channel, Enclosure, Feed, Item
from .resolver import Decision, EpisodeResolver

__all__ = [
    "Channel",
    "Decision",
    "DownloadResult",
    "Enclosure",
    "EpisodeDownloader",
    "EpisodeResolver",
    "ExtractionRule",
    "Feed",
    "FeedParser",
    "Item",
    "compile_extraction_rule",
]
