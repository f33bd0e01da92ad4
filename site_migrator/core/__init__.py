"""
Core layer - stable foundation for the migration pipeline.

Components:
- models: raw page records, field bags, clean content records
- urls: link canonicalization and slugs
- classifier: URL path -> content type
- selectors: CSS querying over a rendered DOM snapshot
- storage: JSON blob store
- browser: render capability (imported directly, it pulls in Playwright)
- http_client: rate-limited, retrying HTTP client for assets
"""

from .models import (
    ContentType,
    CrawlOutcome,
    PageMeta,
    NavItem,
    RawPageRecord,
    NewsArticle,
    Scholarship,
    ScholarshipFields,
    ContentPage,
)
from .urls import normalize_url, slug_from_url
from .classifier import classify_page, output_partition
from .selectors import Selector
from .storage import BlobStore, FileBlobStore

__all__ = [
    "ContentType",
    "CrawlOutcome",
    "PageMeta",
    "NavItem",
    "RawPageRecord",
    "NewsArticle",
    "Scholarship",
    "ScholarshipFields",
    "ContentPage",
    "normalize_url",
    "slug_from_url",
    "classify_page",
    "output_partition",
    "Selector",
    "BlobStore",
    "FileBlobStore",
]
