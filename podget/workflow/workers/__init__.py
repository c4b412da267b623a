"""Workers for the podget pipeline.

- FeedWorker: Fetches feeds and queues episodes that need downloading
- DownloadWorker: Drains the queue, one paced download at a time
"""

from podget.workflow.workers.base import WorkerInterface, WorkerResult

__all__ = [
    "WorkerInterface",
    "WorkerResult",
]
