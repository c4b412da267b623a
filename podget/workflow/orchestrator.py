"""Pipeline orchestrator for one podget run.

Runs the feed worker and the download worker on separate threads connected
by the bounded download queue, and waits for both to finish.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, Iterable, Optional

import requests

from podget.config import PodgetConfig
from podget.podcast.downloader import EpisodeDownloader
from podget.podcast.feed_parser import FeedParser
from podget.podcast.resolver import EpisodeResolver
from podget.workflow.download_queue import DownloadQueue
from podget.workflow.workers.base import WorkerResult
from podget.workflow.workers.download import DownloadWorker
from podget.workflow.workers.feed import FeedWorker

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    """Statistics for a pipeline run."""

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    stopped_at: Optional[datetime] = None

    # Counters
    feeds_processed: int = 0
    feeds_failed: int = 0
    episodes_queued: int = 0
    episodes_skipped: int = 0
    episodes_failed: int = 0
    downloads_completed: int = 0
    downloads_failed: int = 0

    @property
    def duration_seconds(self) -> float:
        """Duration of the run in seconds."""
        end = self.stopped_at or datetime.now(UTC)
        return (end - self.started_at).total_seconds()


class PipelineOrchestrator:
    """Runs feed processing and downloading concurrently.

    Architecture:
    - Feed thread fetches feeds in order and enqueues download jobs
    - Download thread drains the queue one job at a time with a pause
      between jobs
    - The queue is closed once the feed thread finishes, after which the
      download thread exits when the queue is empty

    Example:
        config = PodgetConfig.from_env()
        orchestrator = PipelineOrchestrator(config)
        stats = orchestrator.run(["https://example.com/feed.xml"])
    """

    def __init__(
        self,
        config: PodgetConfig,
        session_factory: Callable[[], requests.Session] = requests.Session,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """Initialize the pipeline orchestrator.

        Args:
            config: Run configuration.
            session_factory: Builds the HTTP session for each worker.
            sleep: Sleep function for download pacing, replaced in tests.
        """
        self.config = config
        self._session_factory = session_factory
        self._sleep = sleep
        self._stats = PipelineStats()

    def run(self, feed_urls: Iterable[str]) -> PipelineStats:
        """Process every feed and download what it needs.

        Blocks until the feed worker has finished and the download queue
        has been drained.

        Args:
            feed_urls: Feeds to process, in order.

        Returns:
            PipelineStats with run statistics.
        """
        logger.debug("starting pipeline")
        self._stats = PipelineStats()

        queue = DownloadQueue(capacity=self.config.queue_size)
        parser = FeedParser(
            session=self._session_factory(),
            user_agent=self.config.user_agent,
            timeout=self.config.request_timeout,
        )
        downloader = EpisodeDownloader(
            session=self._session_factory(),
            timeout=self.config.request_timeout,
            chunk_size=self.config.chunk_size,
            user_agent=self.config.user_agent,
        )
        resolver = EpisodeResolver(
            destination_directory=self.config.destination_directory,
            max_age=self.config.max_age,
            extraction_rule=self.config.extraction_rule,
        )

        feed_worker = FeedWorker(feed_urls, parser=parser, resolver=resolver, queue=queue)
        worker_kwargs = {} if self._sleep is None else {"sleep": self._sleep}
        download_worker = DownloadWorker(
            queue,
            downloader,
            pacing_delay=self.config.pacing_delay_seconds,
            **worker_kwargs,
        )

        feed_result = WorkerResult()
        download_result = WorkerResult()

        def produce():
            nonlocal feed_result
            try:
                feed_result = feed_worker.run()
            except Exception:
                logger.exception("Feed processing failed")
            finally:
                queue.close()

        def consume():
            nonlocal download_result
            try:
                download_result = download_worker.run()
            except Exception:
                logger.exception("Download worker failed")
                # Unblocks a producer waiting on a full queue
                queue.close()

        consumer = threading.Thread(target=consume, name="podget-downloads", daemon=True)
        producer = threading.Thread(target=produce, name="podget-feeds", daemon=True)

        try:
            consumer.start()
            producer.start()
            producer.join()
            consumer.join()
        finally:
            parser.close()
            downloader.close()

        self._stats.feeds_processed = feed_worker.feeds_processed
        self._stats.feeds_failed = feed_worker.feeds_failed
        self._stats.episodes_queued = feed_result.processed
        self._stats.episodes_skipped = feed_result.skipped
        self._stats.episodes_failed = feed_result.failed
        self._stats.downloads_completed = download_result.processed
        self._stats.downloads_failed = download_result.failed
        self._stats.stopped_at = datetime.now(UTC)

        feed_worker.log_result(feed_result)
        download_worker.log_result(download_result)
        return self._stats
