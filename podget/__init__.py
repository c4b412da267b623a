"""podget: download new podcast episodes from RSS feeds."""

__version__ = "1.0.0"
