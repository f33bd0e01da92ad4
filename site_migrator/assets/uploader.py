"""
Upload of downloaded images to the R2 bucket.

R2 speaks the S3 API, so uploads go through a boto3 S3 client pointed
at the account's R2 endpoint. Credentials come from the usual AWS
environment variables. Uploaded keys are recorded in image-map-r2;
entries already there are skipped on the next run.
"""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Optional

import boto3
import structlog
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from site_migrator.core.storage import BlobStore

from .downloader import IMAGE_MAP_KEY

logger = structlog.get_logger(__name__)


R2_MAP_KEY = "image-map-r2"

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".avif": "image/avif",
}


def mime_type(path: str) -> str:
    return MIME_TYPES.get(PurePosixPath(path).suffix.lower(), "application/octet-stream")


@dataclass
class UploadSummary:
    """Outcome of an upload run."""
    uploaded: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {"uploaded": self.uploaded, "skipped": self.skipped, "failed": self.failed}


class ImageUploader:
    """
    Sequential, resumable uploader.

    Usage:
        uploader = ImageUploader(FileBlobStore(site.scraped_dir), site.scraped_dir,
                                 bucket="thcf-assets", endpoint_url=site.assets.endpoint_url)
        summary = uploader.run()
    """

    def __init__(
        self,
        store: BlobStore,
        output_dir: str | Path,
        bucket: str,
        endpoint_url: str = "",
        key_prefix: str = "images",
        checkpoint_every: int = 10,
        client: Optional[Any] = None,
    ):
        """
        Initialize uploader.

        Args:
            store: Store holding the image maps
            output_dir: Crawl output directory the image map is relative to
            bucket: Target bucket name
            endpoint_url: S3-compatible endpoint (R2 account URL)
            key_prefix: Key prefix inside the bucket
            checkpoint_every: Save the R2 map every N uploads
            client: S3 client (created from endpoint_url if not provided)
        """
        self.store = store
        self.output_dir = Path(output_dir)
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.key_prefix = key_prefix.strip("/")
        self.checkpoint_every = max(1, checkpoint_every)
        self._client = client

        self.r2_map: dict[str, str] = {}

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("s3", endpoint_url=self.endpoint_url or None)
        return self._client

    def object_key(self, local_path: str) -> str:
        """Bucket key of a downloaded file ("images/logo.png")."""
        name = PurePosixPath(local_path).name
        return f"{self.key_prefix}/{name}" if self.key_prefix else name

    def run(self) -> UploadSummary:
        """
        Upload every mapped image not yet in the R2 map.

        Raises:
            FileNotFoundError: If no image map exists yet
        """
        if not self.store.exists(IMAGE_MAP_KEY):
            raise FileNotFoundError("No image map found. Run the image download first.")

        image_map: dict[str, str] = self.store.read(IMAGE_MAP_KEY)

        if self.store.exists(R2_MAP_KEY):
            self.r2_map = dict(self.store.read(R2_MAP_KEY))
            logger.info("resuming_uploads", already_uploaded=len(self.r2_map))

        logger.info("starting_uploads", bucket=self.bucket, images=len(image_map))
        summary = UploadSummary()

        for original_url, local_path in image_map.items():
            if original_url in self.r2_map:
                summary.skipped += 1
                continue

            if self.upload(original_url, local_path):
                summary.uploaded += 1
                if summary.uploaded % self.checkpoint_every == 0:
                    logger.info("upload_progress", **summary.to_dict())
                    self._checkpoint()
            else:
                summary.failed += 1

        self._checkpoint()
        logger.info("uploads_complete", bucket=self.bucket, **summary.to_dict())
        return summary

    def upload(self, original_url: str, local_path: str) -> bool:
        """Upload one file and record its key; False on failure."""
        path = self.output_dir / local_path
        if not path.exists():
            logger.warning("upload_source_missing", path=local_path)
            return False

        key = self.object_key(local_path)
        try:
            self.client.upload_file(
                str(path),
                self.bucket,
                key,
                ExtraArgs={"ContentType": mime_type(local_path)},
            )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            logger.warning("upload_failed", key=key, error=str(e))
            return False

        self.r2_map[original_url] = key
        return True

    def _checkpoint(self) -> None:
        self.store.write(R2_MAP_KEY, self.r2_map)
