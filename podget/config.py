"""Configuration for podget.

Settings come from defaults, then environment variables (optionally loaded
from a .env file), then command-line flags. The result is a frozen
PodgetConfig built once at startup and passed to every component.
"""

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv

from podget.podcast.extraction import ExtractionRule, compile_extraction_rule

DEFAULT_USER_AGENT = "podget/1.0"
DEFAULT_QUEUE_SIZE = 15


class ConfigError(ValueError):
    """Raised when a configuration value is invalid."""


def _get_int_env(
    name: str,
    default: int,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """Parse an integer from an environment variable with validation.

    Args:
        name: Environment variable name.
        default: Default value if env var is not set.
        min_val: Minimum allowed value (inclusive), or None for no minimum.
        max_val: Maximum allowed value (inclusive), or None for no maximum.

    Returns:
        The parsed and validated integer value.

    Raises:
        ConfigError: If the value cannot be parsed as an integer or is out of range.
    """
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(
            f"Invalid value for {name}: '{raw}' is not a valid integer"
        )

    if min_val is not None and value < min_val:
        raise ConfigError(
            f"Invalid value for {name}: {value} must be >= {min_val}"
        )

    if max_val is not None and value > max_val:
        raise ConfigError(
            f"Invalid value for {name}: {value} must be <= {max_val}"
        )

    return value


def _get_float_env(
    name: str,
    default: Optional[float],
    min_val: Optional[float] = None,
) -> Optional[float]:
    """Parse a float from an environment variable with validation."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default

    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(
            f"Invalid value for {name}: '{raw}' is not a valid number"
        )

    if min_val is not None and value < min_val:
        raise ConfigError(
            f"Invalid value for {name}: {value} must be >= {min_val}"
        )

    return value


@dataclass(frozen=True)
class PodgetConfig:
    """Immutable run configuration.

    The extraction instruction is compiled when the config is built, so an
    invalid instruction fails before any feed is touched.
    """

    # Where channel directories are created
    destination_directory: str = "."

    # Overwrite files older than this many days, 0 never overwrites
    rerun_days: int = 0

    # "<field> <pattern>" used to name files behind tracking redirects
    extraction_instruction: Optional[str] = None

    # Download pipeline
    queue_size: int = DEFAULT_QUEUE_SIZE
    pacing_delay_seconds: float = 2.0

    # HTTP
    request_timeout: Optional[float] = None  # None waits forever
    chunk_size: int = 8192
    user_agent: str = DEFAULT_USER_AGENT

    extraction_rule: Optional[ExtractionRule] = field(
        init=False, default=None, repr=False, compare=False
    )

    def __post_init__(self):
        """Validate values and compile the extraction rule.

        Raises:
            ConfigError: If a numeric setting is out of range.
            ExtractionRuleError: If the extraction instruction is invalid.
        """
        if self.rerun_days < 0:
            raise ConfigError(f"rerun_days must be >= 0, got {self.rerun_days}")
        if self.queue_size < 1:
            raise ConfigError(f"queue_size must be >= 1, got {self.queue_size}")
        if self.pacing_delay_seconds < 0:
            raise ConfigError(
                f"pacing_delay_seconds must be >= 0, got {self.pacing_delay_seconds}"
            )
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ConfigError(
                f"request_timeout must be > 0, got {self.request_timeout}"
            )
        if self.chunk_size < 1:
            raise ConfigError(f"chunk_size must be >= 1, got {self.chunk_size}")

        object.__setattr__(
            self, "extraction_rule", compile_extraction_rule(self.extraction_instruction)
        )

    @property
    def max_age(self) -> timedelta:
        """Overwrite threshold as a timedelta."""
        return timedelta(days=self.rerun_days)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "PodgetConfig":
        """Create configuration from environment variables.

        Args:
            env_file: Optional path to a .env file. Without it the default
                .env discovery is used.

        Returns:
            PodgetConfig with values from environment or defaults.

        Raises:
            ConfigError: If any environment variable has an invalid value.
            ExtractionRuleError: If PODGET_EXTRACT is invalid.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        return cls(
            destination_directory=os.getenv("PODGET_DESTINATION_DIRECTORY") or ".",
            rerun_days=_get_int_env("PODGET_RERUN_DAYS", 0, min_val=0),
            extraction_instruction=os.getenv("PODGET_EXTRACT") or None,
            queue_size=_get_int_env("PODGET_QUEUE_SIZE", DEFAULT_QUEUE_SIZE, min_val=1),
            pacing_delay_seconds=_get_float_env(
                "PODGET_PACING_DELAY_SECONDS", 2.0, min_val=0
            ),
            request_timeout=_get_float_env("PODGET_REQUEST_TIMEOUT", None, min_val=0),
            chunk_size=_get_int_env("PODGET_CHUNK_SIZE", 8192, min_val=1),
            user_agent=os.getenv("PODGET_USER_AGENT") or DEFAULT_USER_AGENT,
        )

    def with_overrides(self, **overrides) -> "PodgetConfig":
        """Return a copy with the given non-None values replaced."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if not changes:
            return self
        return replace(self, **changes)
