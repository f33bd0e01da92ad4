"""
CLI entry point for site-migrator.

Usage:
    python -m site_migrator crawl --max-pages 50
    python -m site_migrator crawl --resume
    python -m site_migrator download-images --concurrency 5
    python -m site_migrator upload-images --bucket thcf-assets
    python -m site_migrator prepare
"""

import argparse
import asyncio
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="site-migrator",
        description="Migrate a website's content into JSON for the rebuilt site",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Crawl the whole site
  python -m site_migrator crawl

  # Continue an interrupted crawl, at most 100 more pages
  python -m site_migrator crawl --resume --max-pages 100

  # Transfer images
  python -m site_migrator download-images --concurrency 5
  python -m site_migrator upload-images --bucket thcf-assets

  # Build the clean content files
  python -m site_migrator prepare

  # Use custom config file
  python -m site_migrator --config /path/to/site.yml crawl
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to site.yml config file",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    crawl = commands.add_parser("crawl", help="Crawl the site and save raw page records")
    crawl.add_argument(
        "--resume",
        action="store_true",
        help="Skip pages recorded in the previous run's site map",
    )
    crawl.add_argument(
        "--max-pages",
        type=int,
        help="Maximum pages to visit in this run (default: from config)",
    )

    download = commands.add_parser("download-images", help="Download images from the manifest")
    download.add_argument(
        "--concurrency",
        type=int,
        help="Parallel downloads (default: from config)",
    )

    upload = commands.add_parser("upload-images", help="Upload downloaded images to R2")
    upload.add_argument(
        "--bucket",
        type=str,
        help="Target bucket (default: from config)",
    )

    commands.add_parser("prepare", help="Build clean content files from raw records")

    args = parser.parse_args(argv)
    if not args.version and not args.command:
        parser.error("a command is required")
    return args


async def run_crawl(args, site) -> int:
    from .core.browser import PlaywrightRenderer
    from .core.storage import FileBlobStore
    from .crawler import CrawlScheduler

    crawl = site.crawl
    async with PlaywrightRenderer(
        user_agent=site.user_agent,
        timeout_ms=crawl.timeout_ms,
        settle_ms=crawl.settle_ms,
    ) as renderer:
        scheduler = CrawlScheduler(
            site,
            renderer,
            FileBlobStore(site.scraped_dir),
            max_pages=args.max_pages,
            resume=args.resume,
        )
        await scheduler.run()

    return 0


async def run_download(args, site) -> int:
    from .assets import ImageDownloader
    from .core.storage import FileBlobStore

    downloader = ImageDownloader(
        FileBlobStore(site.scraped_dir),
        site.scraped_dir,
        concurrency=args.concurrency or site.assets.concurrency,
        checkpoint_every=site.assets.checkpoint_every,
    )
    await downloader.run()
    return 0


def run_upload(args, site) -> int:
    from .assets import ImageUploader
    from .core.storage import FileBlobStore

    uploader = ImageUploader(
        FileBlobStore(site.scraped_dir),
        site.scraped_dir,
        bucket=args.bucket or site.assets.bucket,
        endpoint_url=site.assets.endpoint_url,
        key_prefix=site.assets.key_prefix,
        checkpoint_every=site.assets.checkpoint_every,
    )
    uploader.run()
    return 0


def run_prepare(args, site) -> int:
    from .content import ContentPreparer
    from .core.storage import FileBlobStore

    preparer = ContentPreparer(
        site,
        FileBlobStore(site.scraped_dir),
        FileBlobStore(site.content_dir),
    )
    preparer.run()
    return 0


def run_command(args) -> int:
    """Load the site definition and dispatch the command."""
    from .config import load_site_config

    logger = structlog.get_logger(__name__)
    site = load_site_config(args.config)
    logger.info("starting_site_migrator", command=args.command, site=site.base_url)

    if args.command == "crawl":
        return asyncio.run(run_crawl(args, site))
    if args.command == "download-images":
        return asyncio.run(run_download(args, site))
    if args.command == "upload-images":
        return run_upload(args, site)
    return run_prepare(args, site)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"site-migrator {__version__}")
        sys.exit(0)

    # Setup logging
    setup_logging(args.log_level, args.json_logs)

    try:
        sys.exit(run_command(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
