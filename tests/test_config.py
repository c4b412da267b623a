"""Tests for configuration loading."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from podget.config import ConfigError, PodgetConfig
from podget.podcast.extraction import ExtractionRuleError


class TestPodgetConfig:
    """Tests for PodgetConfig."""

    def test_defaults(self):
        """Test default configuration values."""
        config = PodgetConfig()

        assert config.destination_directory == "."
        assert config.rerun_days == 0
        assert config.max_age == timedelta(0)
        assert config.queue_size == 15
        assert config.pacing_delay_seconds == 2.0
        assert config.request_timeout is None
        assert config.extraction_rule is None
        assert config.user_agent == "podget/1.0"

    def test_extraction_rule_compiled(self):
        config = PodgetConfig(extraction_instruction=r"item.title episode-(\d+)")
        assert config.extraction_rule.field == "item.title"

    def test_invalid_extraction_instruction(self):
        """Test that a bad instruction fails at construction."""
        with pytest.raises(ExtractionRuleError):
            PodgetConfig(extraction_instruction="item.nope (x)")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"rerun_days": -1},
            {"queue_size": 0},
            {"pacing_delay_seconds": -0.5},
            {"request_timeout": 0},
            {"chunk_size": 0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            PodgetConfig(**kwargs)

    def test_max_age(self):
        assert PodgetConfig(rerun_days=30).max_age == timedelta(days=30)

    def test_from_env(self):
        """Test loading configuration from environment variables."""
        with patch("podget.config.load_dotenv"), patch.dict(
            "os.environ",
            {
                "PODGET_DESTINATION_DIRECTORY": "/srv/podcasts",
                "PODGET_RERUN_DAYS": "30",
                "PODGET_EXTRACT": r"url /ep(\d+)/",
                "PODGET_QUEUE_SIZE": "5",
                "PODGET_PACING_DELAY_SECONDS": "0.5",
                "PODGET_REQUEST_TIMEOUT": "120",
                "PODGET_CHUNK_SIZE": "65536",
                "PODGET_USER_AGENT": "custom/2.0",
            },
        ):
            config = PodgetConfig.from_env()

        assert config.destination_directory == "/srv/podcasts"
        assert config.rerun_days == 30
        assert config.extraction_rule.field == "url"
        assert config.queue_size == 5
        assert config.pacing_delay_seconds == 0.5
        assert config.request_timeout == 120.0
        assert config.chunk_size == 65536
        assert config.user_agent == "custom/2.0"

    def test_from_env_defaults(self):
        with patch("podget.config.load_dotenv"):
            config = PodgetConfig.from_env()
        assert config == PodgetConfig()

    def test_from_env_with_env_file(self, tmp_path):
        """Test that an explicit .env file is loaded."""
        env_file = tmp_path / ".env"
        env_file.write_text("PODGET_RERUN_DAYS=7\n")

        with patch.dict("os.environ", {}):
            config = PodgetConfig.from_env(env_file=str(env_file))

        assert config.rerun_days == 7

    @pytest.mark.parametrize(
        "name, value",
        [
            ("PODGET_RERUN_DAYS", "thirty"),
            ("PODGET_RERUN_DAYS", "-1"),
            ("PODGET_QUEUE_SIZE", "0"),
            ("PODGET_PACING_DELAY_SECONDS", "soon"),
        ],
    )
    def test_from_env_invalid(self, name, value):
        with patch("podget.config.load_dotenv"), patch.dict("os.environ", {name: value}):
            with pytest.raises(ConfigError, match=name):
                PodgetConfig.from_env()

    def test_with_overrides(self):
        """Test that only values that were given replace the current ones."""
        config = PodgetConfig(rerun_days=7, queue_size=3)

        updated = config.with_overrides(rerun_days=30, queue_size=None, destination_directory="/tmp")

        assert updated.rerun_days == 30
        assert updated.queue_size == 3
        assert updated.destination_directory == "/tmp"
        assert config.rerun_days == 7

    def test_with_overrides_recompiles_rule(self):
        config = PodgetConfig().with_overrides(extraction_instruction=r"item.guid (\d+)")
        assert config.extraction_rule.field == "item.guid"

    def test_with_no_overrides(self):
        config = PodgetConfig()
        assert config.with_overrides(rerun_days=None) is config
