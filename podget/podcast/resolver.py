"""Destination paths and overwrite decisions for feed items.

Each episode lands at ``<destination>/<sanitized channel title>/<filename>``.
If that file already exists it is only downloaded again when it is older than
the configured maximum age, which catches feeds that rerun an old episode
under the same filename.
"""

import enum
import logging
import posixpath
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

from .extraction import ExtractionRule
from .models import Channel, Item

logger = logging.getLogger(__name__)

_NON_ASCII = re.compile(r"[^\x00-\x7f]")


class ResolveError(ValueError):
    """Raised when an item has no usable destination path."""


class Decision(enum.Enum):
    """What to do with a resolved episode."""

    SKIP = "skip"
    DOWNLOAD_NEW = "download"
    DOWNLOAD_OVERWRITE = "overwrite"

    @property
    def should_download(self) -> bool:
        return self is not Decision.SKIP


@dataclass(frozen=True)
class ResolvedEpisode:
    """Destination and decision for one item."""

    item: Item
    url: str
    destination: Path
    decision: Decision
    age: Optional[timedelta] = None


def sanitize_directory_name(title: str) -> str:
    """Turn a channel title into a directory name.

    Non-ASCII characters are dropped and spaces become underscores.
    """
    return _NON_ASCII.sub("", title).replace(" ", "_")


def decide(exists: bool, age: Optional[timedelta], max_age: timedelta) -> Decision:
    """Apply the overwrite policy.

    Args:
        exists: Whether the destination file exists.
        age: Age of the existing file, ignored when it does not exist.
        max_age: Age beyond which an existing file is replaced. Zero
            disables overwriting.
    """
    if not exists:
        return Decision.DOWNLOAD_NEW
    if max_age > timedelta(0) and age is not None and age > max_age:
        return Decision.DOWNLOAD_OVERWRITE
    return Decision.SKIP


class EpisodeResolver:
    """Resolves destination paths and download decisions for a channel.

    Example:
        resolver = EpisodeResolver("/srv/podcasts", max_age=timedelta(days=30))
        for item in feed.channel.items:
            episode = resolver.resolve(feed.channel, item)
            if episode.decision.should_download:
                queue.enqueue(DownloadJob(episode.url, episode.destination))
    """

    def __init__(
        self,
        destination_directory,
        max_age: timedelta = timedelta(0),
        extraction_rule: Optional[ExtractionRule] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the resolver.

        Args:
            destination_directory: Root directory for all channels.
            max_age: Overwrite threshold, zero to never overwrite.
            extraction_rule: Optional rule used to name files.
            now: Clock returning an aware datetime, for testing.
        """
        self.destination_directory = Path(destination_directory)
        self.max_age = max_age
        self.extraction_rule = extraction_rule
        self._now = now or (lambda: datetime.now(timezone.utc))

    def channel_directory(self, channel: Channel) -> Path:
        return self.destination_directory / sanitize_directory_name(channel.title)

    def filename_for(self, item: Item) -> str:
        """Work out the on-disk filename for an item.

        Raises:
            ResolveError: If the item has no enclosure or its URL yields no
                filename.
            ExtractionError: If the extraction rule does not match.
        """
        enclosure = item.enclosure
        if enclosure is None or not enclosure.url:
            raise ResolveError(f"no enclosure for '{item.title}'")

        try:
            path = urlparse(enclosure.url).path
        except ValueError as e:
            raise ResolveError(f"can't parse URL {enclosure.url}: {e}") from e

        if self.extraction_rule is not None:
            return self.extraction_rule.apply(item, enclosure)

        filename = posixpath.basename(unquote(path))
        if not filename:
            raise ResolveError(f"no filename in URL {enclosure.url}")
        return filename

    def resolve(self, channel: Channel, item: Item) -> ResolvedEpisode:
        """Resolve the destination and decision for one item.

        Raises:
            ResolveError: If no destination path can be computed.
            ExtractionError: If the extraction rule does not match.
        """
        destination = self.channel_directory(channel) / self.filename_for(item)
        age = None

        try:
            stats = destination.stat()
        except FileNotFoundError:
            exists = False
        except OSError as e:
            # Anything other than "not found" is treated the same way
            logger.warning(f"can't stat {destination}, treating as missing: {e}")
            exists = False
        else:
            exists = True
            modified = datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc)
            age = timedelta(seconds=round((self._now() - modified).total_seconds()))

        decision = decide(exists, age, self.max_age)
        if exists and self.max_age > timedelta(0):
            allowed = "" if decision is Decision.DOWNLOAD_OVERWRITE else "not "
            logger.info(f"{allowed}allowing overwrite of {destination}, file is {age} old")

        return ResolvedEpisode(
            item=item,
            url=item.enclosure.url,
            destination=destination,
            decision=decision,
            age=age,
        )
