"""Episode downloader.

Fetches one media file per call and streams it to disk. A failed download
leaves whatever was written at the destination path; there is no retry and
no resume.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)

# Directories are created with a permissive mode, subject to the umask
DIRECTORY_MODE = 0o777


@dataclass
class DownloadResult:
    """Result of a download operation."""

    url: str
    destination: str
    success: bool
    file_size: Optional[int] = None
    error: Optional[str] = None
    duration_seconds: Optional[float] = None


class EpisodeDownloader:
    """Downloads podcast episodes one at a time.

    Example:
        downloader = EpisodeDownloader(timeout=300)
        result = downloader.download(
            "https://example.com/ep1.mp3",
            "/srv/podcasts/Show/ep1.mp3",
        )
    """

    DEFAULT_USER_AGENT = "podget/1.0"
    DEFAULT_CHUNK_SIZE = 8192

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        user_agent: Optional[str] = None,
    ):
        """Initialize the episode downloader.

        Args:
            session: Requests session to use. One is created if not given.
            timeout: Per-request timeout in seconds, None to wait forever
            chunk_size: Chunk size for streaming downloads
            user_agent: Custom user agent string
        """
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.user_agent = user_agent or self.DEFAULT_USER_AGENT

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    def download(self, url: str, destination) -> DownloadResult:
        """Download a single file.

        Args:
            url: Source URL
            destination: Path to write, truncated if it already exists

        Returns:
            DownloadResult with download status
        """
        start_time = datetime.now(timezone.utc)
        destination = Path(destination)
        logger.debug(f"beginning download {url} -> {destination}")

        try:
            file_size = self._download_file(url, destination)
        except (OSError, requests.RequestException) as e:
            logger.error(f"can't download {url} to {destination}: {e}")
            return DownloadResult(
                url=url,
                destination=str(destination),
                success=False,
                error=str(e),
            )

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(f"{file_size} bytes downloaded to {destination}")
        logger.debug(f"ending download {url} -> {destination}")

        return DownloadResult(
            url=url,
            destination=str(destination),
            success=True,
            file_size=file_size,
            duration_seconds=duration,
        )

    def _download_file(self, url: str, destination: Path) -> int:
        """Create the destination and stream the response body into it.

        Returns:
            Number of bytes written
        """
        os.makedirs(destination.parent, mode=DIRECTORY_MODE, exist_ok=True)

        downloaded = 0
        with open(destination, "wb") as f:
            response = self._session.get(url, stream=True, timeout=self.timeout)
            try:
                response.raise_for_status()
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)
            finally:
                response.close()

        return downloaded

    def close(self):
        """Close the downloader and release resources."""
        self._session.close()
