"""Download worker for episode media files.

Drains the download queue one job at a time, pausing between jobs so the
origin server sees a limited request rate.
"""

import enum
import logging
import time
from typing import Callable, Optional

from podget.podcast.downloader import EpisodeDownloader
from podget.workflow.download_queue import DownloadJob, DownloadQueue
from podget.workflow.workers.base import WorkerInterface, WorkerResult

logger = logging.getLogger(__name__)

DEFAULT_PACING_DELAY = 2.0


class WorkerState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"
    TERMINATED = "terminated"


class DownloadWorker(WorkerInterface):
    """Sequential consumer of the download queue.

    Runs until the queue is closed and empty. Each job is followed by the
    pacing delay whether it succeeded or failed.
    """

    def __init__(
        self,
        queue: DownloadQueue,
        downloader: EpisodeDownloader,
        pacing_delay: float = DEFAULT_PACING_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the download worker.

        Args:
            queue: Queue to drain.
            downloader: Performs the individual transfers.
            pacing_delay: Seconds to wait after each job. Must be >= 0.
            sleep: Sleep function, replaced in tests.

        Raises:
            ValueError: If pacing_delay is negative.
        """
        if pacing_delay < 0:
            raise ValueError(f"pacing_delay must be >= 0, got {pacing_delay}")

        self.queue = queue
        self.downloader = downloader
        self.pacing_delay = pacing_delay
        self._sleep = sleep
        self._state = WorkerState.IDLE
        self._current: Optional[DownloadJob] = None

    @property
    def name(self) -> str:
        """Human-readable name for this worker."""
        return "Download"

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def current_job(self) -> Optional[DownloadJob]:
        """The job being transferred, if any."""
        return self._current

    def run(self) -> WorkerResult:
        """Download every queued job until the queue is drained.

        Returns:
            WorkerResult with download statistics.
        """
        result = WorkerResult()
        logger.debug("download task starting")

        while True:
            job = self.queue.dequeue()
            if job is None:
                break
            result += self.process_job(job)
            self._sleep(self.pacing_delay)

        self._state = WorkerState.TERMINATED
        logger.debug("all downloads complete, download task finishing")
        return result

    def process_job(self, job: DownloadJob) -> WorkerResult:
        """Run one job. Failures are recorded, never raised."""
        result = WorkerResult()
        self._state = WorkerState.ACTIVE
        self._current = job
        try:
            download = self.downloader.download(job.url, job.destination)
        finally:
            self._current = None
            self._state = WorkerState.IDLE

        if download.success:
            result.processed = 1
        else:
            result.failed = 1
            result.errors.append(f"{job.url}: {download.error}")
        return result
