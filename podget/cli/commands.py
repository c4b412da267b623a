"""Command-line entry point for podget.

Example:
    podget -d ~/TAL -r 30 -v http://feed.thisamericanlife.org/talpodcast

The -r 30 means that if a file exists already but is more than 30 days old,
the feed is assumed to be running a rerun and the new version is downloaded.
"""

import logging
import sys
from typing import List, Optional

from podget.argparse_shared import (
    add_destination_argument,
    add_extraction_argument,
    add_feed_arguments,
    add_pipeline_arguments,
    add_rerun_argument,
    add_verbosity_arguments,
    get_base_parser,
)
from podget.config import ConfigError, PodgetConfig
from podget.podcast.extraction import ExtractionRuleError
from podget.workflow.orchestrator import PipelineOrchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """Send progress to stdout and problems to stderr.

    Args:
        verbose: Show INFO messages.
        debug: Show DEBUG messages, implies verbose.
    """
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_BelowWarning())
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[stdout_handler, stderr_handler],
        force=True,
    )
    # urllib3 logs every connection at DEBUG
    if not debug:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_parser():
    """Create the argument parser."""
    parser = get_base_parser()
    add_verbosity_arguments(parser)
    add_destination_argument(parser)
    add_rerun_argument(parser)
    add_extraction_argument(parser)
    add_pipeline_arguments(parser)
    add_feed_arguments(parser)
    return parser


def load_config(args) -> PodgetConfig:
    """Build the run configuration from the environment and CLI flags.

    Raises:
        ConfigError: If a setting is invalid.
        ExtractionRuleError: If the extraction instruction is invalid.
    """
    config = PodgetConfig.from_env(env_file=args.env_file)
    return config.with_overrides(
        destination_directory=args.destination,
        rerun_days=args.rerun_days,
        extraction_instruction=args.podtrac,
        queue_size=args.queue_size,
        pacing_delay_seconds=args.delay,
        request_timeout=args.timeout,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run podget.

    Returns:
        Process exit status: 0 on completion, 1 on a configuration error,
        130 when interrupted.
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, debug=args.debug)

    try:
        config = load_config(args)
    except ExtractionRuleError as e:
        logger.error(f"can't compile podtrac decode instruction: {e}")
        return 1
    except ConfigError as e:
        logger.error(f"invalid configuration: {e}")
        return 1

    if not args.feeds:
        logger.warning("no feed URLs given, nothing to do")
        return 0

    orchestrator = PipelineOrchestrator(config)
    try:
        stats = orchestrator.run(args.feeds)
    except KeyboardInterrupt:
        logger.warning("interrupted, partially written files may remain")
        return 130

    logger.info(
        f"Run complete: "
        f"{stats.feeds_processed} feeds processed, {stats.feeds_failed} failed, "
        f"{stats.downloads_completed} downloaded, {stats.downloads_failed} failed, "
        f"{stats.episodes_skipped} skipped, "
        f"duration={stats.duration_seconds:.1f}s"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
