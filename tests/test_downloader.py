"""Tests for podcast downloader module."""

from unittest.mock import Mock

import pytest
import requests

from podget.podcast.downloader import DownloadResult, EpisodeDownloader


def _response(chunks, status_error=None):
    response = Mock()
    response.iter_content.return_value = iter(chunks)
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


class TestDownloadResult:
    """Tests for DownloadResult dataclass."""

    def test_default_values(self):
        result = DownloadResult(url="https://x/ep.mp3", destination="/tmp/ep.mp3", success=True)
        assert result.file_size is None
        assert result.error is None
        assert result.duration_seconds is None


class TestEpisodeDownloader:
    """Tests for EpisodeDownloader class."""

    def test_successful_download(self, session, tmp_path):
        """Test streaming a response body into a new channel directory."""
        session.get.return_value = _response([b"abc", b"", b"defg"])
        downloader = EpisodeDownloader(session=session, timeout=60, chunk_size=4)
        destination = tmp_path / "Show" / "ep1.mp3"

        result = downloader.download("https://example.com/ep1.mp3", destination)

        assert result.success is True
        assert result.file_size == 7
        assert result.destination == str(destination)
        assert destination.read_bytes() == b"abcdefg"
        session.get.assert_called_once_with(
            "https://example.com/ep1.mp3", stream=True, timeout=60
        )
        session.get.return_value.iter_content.assert_called_once_with(chunk_size=4)
        session.get.return_value.close.assert_called_once()

    def test_overwrites_existing_file(self, session, tmp_path):
        """Test that an existing file is truncated, not appended to."""
        destination = tmp_path / "ep1.mp3"
        destination.write_bytes(b"old contents that are longer")
        session.get.return_value = _response([b"new"])

        EpisodeDownloader(session=session).download("https://example.com/ep1.mp3", destination)

        assert destination.read_bytes() == b"new"

    def test_http_error(self, session, tmp_path, caplog):
        """Test that an error status is reported as a failed result."""
        session.get.return_value = _response(
            [], status_error=requests.HTTPError("404 Client Error")
        )
        downloader = EpisodeDownloader(session=session)
        destination = tmp_path / "Show" / "missing.mp3"

        result = downloader.download("https://example.com/missing.mp3", destination)

        assert result.success is False
        assert "404" in result.error
        assert "can't download https://example.com/missing.mp3" in caplog.text
        session.get.return_value.close.assert_called_once()

    def test_connection_error(self, session, tmp_path):
        session.get.side_effect = requests.ConnectionError("connection reset")
        result = EpisodeDownloader(session=session).download(
            "https://example.com/ep.mp3", tmp_path / "ep.mp3"
        )
        assert result.success is False
        assert "connection reset" in result.error

    def test_partial_file_left_behind(self, session, tmp_path):
        """Test that a transfer failing midway keeps what was written."""

        def chunks():
            yield b"partial"
            raise requests.ConnectionError("dropped")

        response = _response([])
        response.iter_content.return_value = chunks()
        session.get.return_value = response
        destination = tmp_path / "ep.mp3"

        result = EpisodeDownloader(session=session).download("https://example.com/ep.mp3", destination)

        assert result.success is False
        assert destination.read_bytes() == b"partial"

    def test_unwritable_destination(self, session, tmp_path):
        """Test that a filesystem error becomes a failed result."""
        blocker = tmp_path / "Show"
        blocker.write_text("a file where the directory should be")

        result = EpisodeDownloader(session=session).download(
            "https://example.com/ep.mp3", blocker / "ep.mp3"
        )

        assert result.success is False
        session.get.assert_not_called()

    def test_user_agent(self, session):
        EpisodeDownloader(session=session, user_agent="custom/2.0")
        assert session.headers["User-Agent"] == "custom/2.0"

    def test_close(self, session):
        EpisodeDownloader(session=session).close()
        session.close.assert_called_once()
