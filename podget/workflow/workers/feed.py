"""Feed worker for the producer side of the pipeline.

Fetches each feed in turn, resolves every item against the files already on
disk and queues a download job for each episode that needs one.
"""

import logging
from typing import Iterable

from podget.podcast.extraction import ExtractionError
from podget.podcast.feed_parser import FeedFetchError, FeedParseError, FeedParser
from podget.podcast.models import Channel
from podget.podcast.resolver import EpisodeResolver, ResolveError, sanitize_directory_name
from podget.workflow.download_queue import DownloadJob, DownloadQueue
from podget.workflow.workers.base import WorkerInterface, WorkerResult

logger = logging.getLogger(__name__)


class FeedWorker(WorkerInterface):
    """Worker that turns feed URLs into queued download jobs.

    Feeds are processed sequentially in the order given, so jobs enter the
    queue in feed-submission order. Counts in the returned WorkerResult are
    per episode; per-feed counts are kept on the worker.
    """

    def __init__(
        self,
        feed_urls: Iterable[str],
        parser: FeedParser,
        resolver: EpisodeResolver,
        queue: DownloadQueue,
    ):
        """Initialize the feed worker.

        Args:
            feed_urls: Feeds to process, in order.
            parser: Fetches and parses feed documents.
            resolver: Decides destination and overwrite policy per item.
            queue: Queue that receives download jobs.
        """
        self.feed_urls = list(feed_urls)
        self.parser = parser
        self.resolver = resolver
        self.queue = queue

        self.feeds_processed = 0
        self.feeds_failed = 0

    @property
    def name(self) -> str:
        """Human-readable name for this worker."""
        return "Feeds"

    def run(self) -> WorkerResult:
        """Process every feed. The queue is left open for the caller to close.

        Returns:
            WorkerResult where processed counts queued episodes.
        """
        result = WorkerResult()
        for feed_url in self.feed_urls:
            result += self.process_feed(feed_url)
        return result

    def process_feed(self, feed_url: str) -> WorkerResult:
        """Fetch, parse and resolve one feed.

        A feed that cannot be fetched or parsed is logged and counted as
        failed; it never stops the remaining feeds.
        """
        try:
            feed = self.parser.parse_url(feed_url)
        except (FeedFetchError, FeedParseError) as e:
            logger.error(f"can't process {feed_url}: {e}")
            self.feeds_failed += 1
            return WorkerResult(errors=[f"{feed_url}: {e}"])

        result = self.process_channel(feed.channel)
        self.feeds_processed += 1
        return result

    def process_channel(self, channel: Channel) -> WorkerResult:
        """Resolve each item and queue the ones that need downloading."""
        result = WorkerResult()
        logger.info(f"{channel.title} {sanitize_directory_name(channel.title)}/")

        for item in channel.items:
            date = item.pub_date.strftime("%Y-%m-%d") if item.pub_date else "----------"
            logger.info(f"  {date} {item.title} {item.duration or ''}")

            try:
                episode = self.resolver.resolve(channel, item)
            except ExtractionError as e:
                logger.error(f"skipping episode: {e}")
                result.failed += 1
                result.errors.append(str(e))
                continue
            except ResolveError as e:
                logger.error(f"skipping episode in {channel.title}: {e}")
                result.failed += 1
                result.errors.append(str(e))
                continue

            if episode.decision.should_download:
                self.queue.enqueue(DownloadJob(url=episode.url, destination=episode.destination))
                result.processed += 1
            else:
                logger.info(f"skipping {episode.destination}, already downloaded")
                result.skipped += 1

        logger.debug("done processing channel data")
        return result
