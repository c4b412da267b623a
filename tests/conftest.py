"""
Pytest configuration and fixtures for podget tests.

PODGET_* variables are cleared for every test so results do not depend on
the environment the suite runs in.
"""

import os

import pytest

SAMPLE_RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd">
  <channel>
    <title>Test Podcast</title>
    <description>A podcast for testing</description>
    <link>https://example.com</link>
    <language>en-us</language>
    <copyright>2024 Example Media</copyright>
    <lastBuildDate>Tue, 09 Jan 2024 08:00:00 +0000</lastBuildDate>
    <itunes:author>Test Author</itunes:author>
    <itunes:owner>
      <itunes:name>Owner Name</itunes:name>
      <itunes:email>owner@example.com</itunes:email>
    </itunes:owner>
    <itunes:image href="https://example.com/artwork.jpg"/>
    <itunes:explicit>yes</itunes:explicit>

    <item>
      <title>Episode 1: Introduction</title>
      <description>The first episode.</description>
      <category>News</category>
      <guid>episode-1-guid</guid>
      <pubDate>Mon, 01 Jan 2024 12:00:00 +0000</pubDate>
      <itunes:author>Host One</itunes:author>
      <itunes:duration>1:02:03</itunes:duration>
      <itunes:keywords>intro, pilot</itunes:keywords>
      <enclosure url="https://cdn.example.com/shows/ep1.mp3"
                 length="54000000"
                 type="audio/mpeg"/>
    </item>

    <item>
      <title>Episode 2: Deep Dive</title>
      <description>A deeper look.</description>
      <guid>episode-2-guid</guid>
      <pubDate>Mon, 08 Jan 2024 12:00:00 +0000</pubDate>
      <itunes:duration>45:30</itunes:duration>
      <enclosure url="https://cdn.example.com/shows/ep2.mp3"
                 length="27000000"
                 type="audio/mpeg"/>
    </item>
  </channel>
</rss>"""

# Every enclosure goes through the same redirector filename
PODTRAC_RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Redirected Show</title>
    <description>Behind a tracker</description>
    <item>
      <title>episode-41: the first one</title>
      <enclosure url="https://dts.podtrac.com/redirect.mp3/cdn.example.com/default.mp3"
                 type="audio/mpeg"/>
    </item>
    <item>
      <title>episode-42: the second one</title>
      <enclosure url="https://dts.podtrac.com/redirect.mp3/cdn.example.com/default.mp3"
                 type="audio/mpeg"/>
    </item>
  </channel>
</rss>"""


@pytest.fixture(autouse=True)
def clean_podget_env(monkeypatch):
    """Remove PODGET_* settings inherited from the outer environment."""
    for name in list(os.environ):
        if name.startswith("PODGET_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_feed_xml():
    return SAMPLE_RSS_FEED


@pytest.fixture
def podtrac_feed_xml():
    return PODTRAC_RSS_FEED
