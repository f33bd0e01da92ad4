"""
Asset transfer: image download from the old site and upload to R2.
"""

from .downloader import DownloadSummary, ImageDownloader, sanitize_filename
from .uploader import ImageUploader, UploadSummary, mime_type

__all__ = [
    "ImageDownloader",
    "DownloadSummary",
    "ImageUploader",
    "UploadSummary",
    "sanitize_filename",
    "mime_type",
]
