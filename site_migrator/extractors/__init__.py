"""
Field extractors for crawled pages.

Extractors handle the extraction phase - converting a rendered DOM
snapshot into the raw field bag of its content type.

Strategies:
- NewsExtractor: single news articles
- DetailExtractor: scholarship and grant detail pages
- StaffListingExtractor / BoardListingExtractor: card listings
- GenericPageExtractor: everything else
"""

from site_migrator.core.models import ContentType

from .base import FieldExtractor
from .detail import DetailExtractor
from .generic import GenericPageExtractor
from .listings import BoardListingExtractor, StaffListingExtractor
from .news import NewsExtractor
from .site import extract_images, extract_links, extract_meta, extract_navigation

EXTRACTORS: dict[ContentType, type[FieldExtractor]] = {
    ContentType.NEWS: NewsExtractor,
    ContentType.SCHOLARSHIP: DetailExtractor,
    ContentType.GRANT: DetailExtractor,
    ContentType.STAFF_LISTING: StaffListingExtractor,
    ContentType.BOARD_LISTING: BoardListingExtractor,
}


def get_extractor(content_type: ContentType) -> FieldExtractor:
    """Return the extractor for a content type (generic if none is registered)."""
    return EXTRACTORS.get(content_type, GenericPageExtractor)()


__all__ = [
    "FieldExtractor",
    "NewsExtractor",
    "DetailExtractor",
    "StaffListingExtractor",
    "BoardListingExtractor",
    "GenericPageExtractor",
    "get_extractor",
    "extract_meta",
    "extract_links",
    "extract_images",
    "extract_navigation",
]
