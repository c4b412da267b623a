"""Tests for the feed model and its scalar decoders."""

from datetime import datetime, timedelta, timezone

import pytest

from podget.podcast.models import (
    Channel,
    DurationError,
    Item,
    TimestampError,
    format_timestamp,
    parse_duration,
    parse_keywords,
    parse_timestamp,
)


class TestParseDuration:
    """Tests for iTunes duration decoding."""

    @pytest.mark.parametrize(
        "value, seconds",
        [
            ("45", 45),
            ("02:03", 123),
            ("1:02:03", 3723),
            ("3723", 3723),
            ("1:00:00:00", 86400),
            ("0", 0),
        ],
    )
    def test_valid_durations(self, value, seconds):
        """Components are read right to left as seconds, minutes, hours, days."""
        assert parse_duration(value) == timedelta(seconds=seconds)

    def test_minutes_above_sixty_are_not_normalized_away(self):
        """Test that out-of-range components still add up."""
        assert parse_duration("90:00") == timedelta(minutes=90)

    def test_non_integer_component(self):
        """Test that a non-numeric chunk is rejected."""
        with pytest.raises(DurationError, match="not integer"):
            parse_duration("1:xx:03")

    def test_fractional_seconds_rejected(self):
        with pytest.raises(DurationError):
            parse_duration("12.5")

    def test_too_many_components(self):
        """Test that more than four components is an error."""
        with pytest.raises(DurationError, match="too many components"):
            parse_duration("1:2:3:4:5")

    def test_empty_string(self):
        with pytest.raises(DurationError):
            parse_duration("")

    def test_renders_as_clock_time(self):
        """Test the textual form used for logging and extraction."""
        assert str(parse_duration("1:02:03")) == "1:02:03"


class TestParseTimestamp:
    """Tests for RFC-1123 timestamp decoding."""

    def test_numeric_zone(self):
        """Test a UTC timestamp."""
        parsed = parse_timestamp("Mon, 01 Jan 2024 12:00:00 +0000")
        assert parsed == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_offset_is_kept(self):
        """Test that a non-UTC offset is preserved."""
        parsed = parse_timestamp("Mon, 02 Jan 2006 15:04:05 -0700")
        assert parsed.utcoffset() == timedelta(hours=-7)
        assert parsed.hour == 15

    def test_surrounding_whitespace(self):
        parsed = parse_timestamp("  Mon, 01 Jan 2024 12:00:00 +0000\n")
        assert parsed.year == 2024

    def test_named_zone_rejected(self):
        """Test that only numeric zones are accepted."""
        with pytest.raises(TimestampError):
            parse_timestamp("Mon, 01 Jan 2024 12:00:00 GMT")

    def test_garbage_rejected(self):
        with pytest.raises(TimestampError):
            parse_timestamp("yesterday")

    def test_format_round_trip(self):
        """Test that format_timestamp produces what parse_timestamp accepts."""
        text = "Mon, 02 Jan 2006 15:04:05 -0700"
        assert format_timestamp(parse_timestamp(text)) == text


class TestParseKeywords:
    """Tests for keyword list splitting."""

    def test_split_and_trim(self):
        assert parse_keywords("a, b ,c") == ["a", "b", "c"]

    def test_tabs_and_newlines_trimmed(self):
        assert parse_keywords("\tnews,\n politics ") == ["news", "politics"]

    def test_blank_input(self):
        """Test that empty or blank input yields no keywords."""
        assert parse_keywords("") == []
        assert parse_keywords("   ") == []

    def test_single_keyword(self):
        assert parse_keywords("solo") == ["solo"]


class TestModelDefaults:
    """Tests for dataclass defaults."""

    def test_item_defaults(self):
        item = Item()
        assert item.pub_date is None
        assert item.duration is None
        assert item.enclosure is None
        assert item.keywords == []
        assert item.guid.text == ""

    def test_channel_items_not_shared(self):
        """Test that each channel gets its own item list."""
        first = Channel(title="a")
        second = Channel(title="b")
        first.items.append(Item(title="x"))
        assert second.items == []
