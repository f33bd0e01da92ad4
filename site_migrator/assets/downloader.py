"""
Image download for the crawl's image manifest.

Downloads run in small concurrent batches. The image map
({original URL: path relative to the crawl output}) is checkpointed
regularly, and URLs already in it are skipped, so an interrupted run
resumes where it stopped.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import urlsplit

import httpx
import structlog

from site_migrator.core.http_client import HttpClient
from site_migrator.core.storage import BlobStore

logger = structlog.get_logger(__name__)


IMAGE_MANIFEST_KEY = "image-manifest"
IMAGE_MAP_KEY = "image-map"
IMAGES_DIR = "images"

MAX_FILENAME_LENGTH = 200


def sanitize_filename(url: str) -> str:
    """
    Flatten an image URL path into one file name.

    "https://www.thcf.org/uploads/2024/logo.png" -> "uploads__2024__logo.png"
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        return "unknown"

    name = path.lstrip("/").replace("/", "__")
    if len(name) > MAX_FILENAME_LENGTH:
        suffix = PurePosixPath(name).suffix
        name = name[: MAX_FILENAME_LENGTH - 10] + suffix
    return name or "unknown"


def is_downloadable(url: str) -> bool:
    """Skip inline data URIs and anything that is not http(s)."""
    return url.startswith("http") and not url.startswith("data:")


@dataclass
class DownloadSummary:
    """Outcome of a download run."""
    downloaded: int = 0
    failed: int = 0
    skipped: int = 0
    mapped: int = 0

    def to_dict(self) -> dict:
        return {
            "downloaded": self.downloaded,
            "failed": self.failed,
            "skipped": self.skipped,
            "mapped": self.mapped,
        }


class ImageDownloader:
    """
    Resumable, bounded-concurrency image downloader.

    Usage:
        downloader = ImageDownloader(FileBlobStore(site.scraped_dir), site.scraped_dir)
        summary = await downloader.run()
    """

    def __init__(
        self,
        store: BlobStore,
        output_dir: str | Path,
        concurrency: int = 3,
        checkpoint_every: int = 10,
        http_client: Optional[HttpClient] = None,
    ):
        """
        Initialize downloader.

        Args:
            store: Store holding the image manifest and image map
            output_dir: Crawl output directory; files go to <output_dir>/images
            concurrency: Downloads per batch
            checkpoint_every: Save the image map every N batches
            http_client: Shared HTTP client (creates own if not provided)
        """
        self.store = store
        self.output_dir = Path(output_dir)
        self.images_dir = self.output_dir / IMAGES_DIR
        self.concurrency = max(1, concurrency)
        self.checkpoint_every = max(1, checkpoint_every)
        self.http_client = http_client

        self.image_map: dict[str, str] = {}
        self._reserved: set[str] = set()

    async def run(self) -> DownloadSummary:
        """
        Download every image of the manifest not yet in the image map.

        Raises:
            FileNotFoundError: If the crawl wrote no image manifest
        """
        if not self.store.exists(IMAGE_MANIFEST_KEY):
            raise FileNotFoundError("No image manifest found. Run the crawl first.")

        manifest = self.store.read(IMAGE_MANIFEST_KEY)
        self.images_dir.mkdir(parents=True, exist_ok=True)

        if self.store.exists(IMAGE_MAP_KEY):
            self.image_map = dict(self.store.read(IMAGE_MAP_KEY))
            logger.info("resuming_downloads", already_downloaded=len(self.image_map))

        summary = DownloadSummary()
        pending = []
        for url in manifest:
            if url in self.image_map or not is_downloadable(url):
                summary.skipped += 1
                continue
            pending.append(url)

        logger.info(
            "starting_downloads",
            manifest=len(manifest),
            pending=len(pending),
            concurrency=self.concurrency,
        )

        if self.http_client is None:
            async with HttpClient() as client:
                await self._download_all(client, pending, summary)
        else:
            await self._download_all(self.http_client, pending, summary)

        self._checkpoint()
        summary.mapped = len(self.image_map)

        logger.info("downloads_complete", **summary.to_dict())
        return summary

    async def _download_all(
        self,
        client: HttpClient,
        pending: list[str],
        summary: DownloadSummary,
    ) -> None:
        for batch_index, start in enumerate(range(0, len(pending), self.concurrency)):
            batch = pending[start:start + self.concurrency]
            results = await asyncio.gather(*(self._download_one(client, url) for url in batch))

            for ok in results:
                if ok:
                    summary.downloaded += 1
                else:
                    summary.failed += 1

            if summary.downloaded and summary.downloaded % 10 == 0:
                logger.info("download_progress", downloaded=summary.downloaded, total=len(pending))

            if batch_index % self.checkpoint_every == 0:
                self._checkpoint()

    def reserve_path(self, url: str) -> Path:
        """Pick a file name not used on disk nor by a running download."""
        name = sanitize_filename(url)
        stem, suffix = PurePosixPath(name).stem, PurePosixPath(name).suffix

        candidate = name
        counter = 1
        while candidate in self._reserved or (self.images_dir / candidate).exists():
            candidate = f"{stem}_{counter}{suffix}"
            counter += 1

        self._reserved.add(candidate)
        return self.images_dir / candidate

    async def _download_one(self, client: HttpClient, url: str) -> bool:
        path = self.reserve_path(url)
        try:
            await client.download(url, path)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, OSError) as e:
            logger.warning("download_failed", url=url, error=str(e))
            self._reserved.discard(path.name)
            return False

        self.image_map[url] = path.relative_to(self.output_dir).as_posix()
        return True

    def _checkpoint(self) -> None:
        self.store.write(IMAGE_MAP_KEY, self.image_map)
