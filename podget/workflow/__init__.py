"""Download pipeline for podget.

Connects feed processing to downloading through a bounded queue:
feeds → resolve → queue → download.
"""

from podget.workflow.download_queue import DownloadJob, DownloadQueue
from podget.workflow.orchestrator import PipelineOrchestrator, PipelineStats
from podget.workflow.workers.base import WorkerInterface, WorkerResult

__all__ = [
    "DownloadJob",
    "DownloadQueue",
    "PipelineOrchestrator",
    "PipelineStats",
    "WorkerInterface",
    "WorkerResult",
]
