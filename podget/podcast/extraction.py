"""Filename extraction rules for feeds behind tracking redirects.

Some publishers route every enclosure through a redirector such as Podtrac,
so the URL path ends in the same generic name (``default.mp3``) for every
episode. An extraction rule names one field of the item and a regular
expression whose first capturing group becomes the filename stem, e.g.::

    item.title episode-(\\d+)

Patterns are matched against the field as text. item.duration reads as
H:MM:SS (``1:02:03``, with a ``N day, `` prefix past 24 hours) and
item.pubDate as ``YYYY-MM-DD HH:MM:SS+HH:MM`` (``2024-01-01 12:00:00+00:00``).
Unset fields read as an empty string.

A rule is compiled once at startup and applied to each episode.
"""

import logging
import posixpath
import re
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlparse

from .models import Enclosure, Item

logger = logging.getLogger(__name__)

FIELD_SELECTORS = (
    "item.author",
    "item.category",
    "item.description",
    "item.duration",
    "item.guid",
    "item.pubDate",
    "item.title",
    "enclosure.url",
    "url",
)


class ExtractionRuleError(ValueError):
    """Raised when an extraction instruction cannot be compiled."""


class ExtractionError(ValueError):
    """Raised when a rule does not yield a filename for an episode."""


@dataclass(frozen=True)
class ExtractionRule:
    """A compiled field selector and pattern."""

    field: str
    pattern: re.Pattern

    def select(self, item: Item, enclosure: Enclosure) -> str:
        """Return the string value of the selected field."""
        return field_values(item, enclosure)[self.field]

    def extract_stem(self, item: Item, enclosure: Enclosure) -> str:
        """Extract the filename stem for an episode.

        Returns:
            First non-empty capturing group of the first match.

        Raises:
            ExtractionError: If the pattern does not match or captures nothing.
        """
        value = self.select(item, enclosure)
        match = self.pattern.search(value)
        stem = None
        if match:
            stem = next((group for group in match.groups() if group), None)

        if not stem:
            logger.debug(f"search data: {value}")
            logger.debug(f"     regexp: {self.pattern.pattern}")
            raise ExtractionError(f"failed to extract filename for {enclosure.url}")
        return stem

    def apply(self, item: Item, enclosure: Enclosure) -> str:
        """Build the destination filename for an episode.

        The extracted stem keeps the extension of the enclosure URL path.
        """
        ext = posixpath.splitext(urlparse(enclosure.url).path)[1]
        return self.extract_stem(item, enclosure) + ext


def field_values(item: Item, enclosure: Enclosure) -> Dict[str, str]:
    """Map each field selector to its string value for an episode."""
    return {
        "item.author": item.author,
        "item.category": item.category,
        "item.description": item.description,
        "item.duration": str(item.duration) if item.duration is not None else "",
        "item.guid": item.guid.text,
        "item.pubDate": str(item.pub_date) if item.pub_date is not None else "",
        "item.title": item.title,
        "enclosure.url": enclosure.url,
        "url": urlparse(enclosure.url).geturl(),
    }


def compile_extraction_rule(instruction: Optional[str]) -> Optional[ExtractionRule]:
    """Compile an extraction instruction of the form ``"<field> <pattern>"``.

    Args:
        instruction: Field selector and pattern separated by a space. The
            pattern may be wrapped in slashes, e.g. ``url /ep(\\d+)/``.

    Returns:
        The compiled rule, or None when no instruction is given.

    Raises:
        ExtractionRuleError: If the field is unknown, the pattern is missing,
            does not compile, or has no capturing group.
    """
    if not instruction or not instruction.strip():
        return None

    chunks = instruction.strip().split(" ", 1)
    field_name = chunks[0].strip()
    if field_name not in FIELD_SELECTORS:
        raise ExtractionRuleError(
            f"unknown field '{field_name}', expected one of: {', '.join(FIELD_SELECTORS)}"
        )
    if len(chunks) < 2 or not chunks[1].strip(" /"):
        raise ExtractionRuleError(f"no pattern given for field '{field_name}'")

    source = chunks[1].strip(" /")
    logger.debug(f"compiling {source}")
    try:
        pattern = re.compile(source)
    except re.error as e:
        raise ExtractionRuleError(f"can't compile pattern '{source}': {e}") from e

    if pattern.groups < 1:
        raise ExtractionRuleError(f"pattern '{source}' has no capturing group")

    logger.debug(f"will search field {field_name} for {pattern.pattern}")
    return ExtractionRule(field=field_name, pattern=pattern)
