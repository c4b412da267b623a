"""Bounded FIFO queue between feed processing and the download worker.

One producer (the feed worker) enqueues jobs and closes the queue when every
feed is done. One consumer (the download worker) dequeues until the queue is
closed and empty.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, Optional

from podget.config import DEFAULT_QUEUE_SIZE

logger = logging.getLogger(__name__)


class QueueClosedError(RuntimeError):
    """Raised when enqueueing into a closed queue."""


@dataclass(frozen=True)
class DownloadJob:
    """A media file to fetch and where to write it."""

    url: str
    destination: Path


class DownloadQueue:
    """Bounded, blocking FIFO of download jobs.

    enqueue() blocks while the queue is full so feed processing cannot run
    arbitrarily far ahead of the downloads. Jobs are never dropped.

    Example:
        queue = DownloadQueue()
        queue.enqueue(DownloadJob(url, path))   # producer
        queue.close()                           # producer, when done
        while (job := queue.dequeue()) is not None:  # consumer
            ...
    """

    def __init__(self, capacity: int = DEFAULT_QUEUE_SIZE):
        if capacity <= 0:
            raise ValueError(f"capacity must be greater than zero, got {capacity}")
        self.capacity = capacity
        self._jobs: Deque[DownloadJob] = deque()
        self._closed = False
        self._lock = threading.Lock()
        self._not_full = threading.Condition(self._lock)
        self._not_empty = threading.Condition(self._lock)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def drained(self) -> bool:
        """True once the queue is closed and every job has been taken."""
        with self._lock:
            return self._closed and not self._jobs

    def enqueue(self, job: DownloadJob, timeout: Optional[float] = None) -> bool:
        """Add a job, blocking while the queue is full.

        Args:
            job: Job to add.
            timeout: Seconds to wait for space, None to wait indefinitely.

        Returns:
            True if the job was accepted, False if the timeout elapsed.

        Raises:
            QueueClosedError: If the queue is closed.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._not_full:
            while not self._closed and len(self._jobs) >= self.capacity:
                if deadline is None:
                    self._not_full.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    self._not_full.wait(remaining)

            if self._closed:
                raise QueueClosedError(f"can't enqueue {job.url}, queue is closed")

            self._jobs.append(job)
            logger.debug(f"queued {job.url} ({len(self._jobs)}/{self.capacity})")
            self._not_empty.notify()
            return True

    def dequeue(self, timeout: Optional[float] = None) -> Optional[DownloadJob]:
        """Take the oldest job, blocking while the queue is empty and open.

        Args:
            timeout: Seconds to wait for a job, None to wait indefinitely.

        Returns:
            The next job, or None when the queue is closed and empty or the
            timeout elapsed.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._not_empty:
            while not self._jobs and not self._closed:
                if deadline is None:
                    self._not_empty.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return None
                    self._not_empty.wait(remaining)
            return self._pop()

    def try_dequeue(self) -> Optional[DownloadJob]:
        """Take the oldest job without blocking, None if nothing is pending."""
        with self._lock:
            return self._pop()

    def close(self) -> None:
        """Stop accepting jobs. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            logger.debug(f"queue closed with {len(self._jobs)} jobs pending")
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def _pop(self) -> Optional[DownloadJob]:
        # Caller holds the lock
        if not self._jobs:
            return None
        job = self._jobs.popleft()
        self._not_full.notify()
        return job
