import argparse

def get_base_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Download podcast episodes from RSS feeds")
    parser.add_argument("-e", "--env-file", help="Path to a custom .env file", default=None)
    return parser

def add_verbosity_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-debug", "--debug", action="store_true", help="Debug mode")

def add_destination_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-d", "--destination", help="Destination directory", default=None)

def add_rerun_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-r", "--rerun-days", type=int, default=None,
                        help="Re-download existing files older than this many days (0 disables)")

def add_extraction_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-podtrac", "--podtrac", default=None, metavar="INSTRUCTION",
                        help="How to extract the episode filename, e.g. 'item.title episode-(\\d+)'. "
                             "item.duration is matched as H:MM:SS and item.pubDate as "
                             "YYYY-MM-DD HH:MM:SS+HH:MM")

def add_pipeline_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--queue-size", type=int, default=None, help="Maximum number of queued downloads")
    parser.add_argument("--delay", type=float, default=None, help="Seconds to wait between downloads")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP request timeout in seconds")

def add_feed_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("feeds", nargs="*", metavar="FEED_URL", help="RSS feed URLs to process")
