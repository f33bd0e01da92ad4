"""
Content classification by URL path.

PAGE_RULES is evaluated top to bottom and the first match wins, so a
specific pattern must stay above any broader pattern that would also
match it (a single article before the listing it lives under).
"""

import re
from urllib.parse import urlsplit

from .models import ContentType
from .urls import strip_trailing_slash

PAGE_RULES: list[tuple[re.Pattern, ContentType]] = [
    (re.compile(r"^/news/[^/]+$"), ContentType.NEWS),
    (re.compile(r"^/about/news"), ContentType.NEWS_LISTING),
    (re.compile(r"^/scholarships/[^/]+$"), ContentType.SCHOLARSHIP),
    (re.compile(r"^/students/scholarships/scholarship-directory"), ContentType.SCHOLARSHIP_LISTING),
    (re.compile(r"^/students/scholarships"), ContentType.PAGE),
    (re.compile(r"^/students"), ContentType.PAGE),
    (re.compile(r"^/grants/[^/]+$"), ContentType.GRANT),
    (re.compile(r"^/grant-seekers/past-recipients"), ContentType.GRANT_LISTING),
    (re.compile(r"^/about/staff$"), ContentType.STAFF_LISTING),
    (re.compile(r"^/about/board$"), ContentType.BOARD_LISTING),
]

# Storage partition per content type
OUTPUT_PARTITIONS = {
    ContentType.NEWS: "news",
    ContentType.SCHOLARSHIP: "scholarships",
    ContentType.GRANT: "grants",
    ContentType.STAFF_LISTING: "staff",
    ContentType.BOARD_LISTING: "board",
}

DEFAULT_PARTITION = "pages"

PARTITIONS = ["pages", "news", "scholarships", "grants", "staff", "board"]


def classify_page(url: str) -> ContentType:
    """
    Map a URL to its content type.

    Args:
        url: Absolute URL (a bare path is accepted too)

    Returns:
        ContentType of the first matching rule, PAGE if none matches
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url
    path = strip_trailing_slash(path)

    for pattern, content_type in PAGE_RULES:
        if pattern.search(path):
            return content_type

    return ContentType.PAGE


def output_partition(content_type: ContentType) -> str:
    """Return the storage partition for a content type."""
    return OUTPUT_PARTITIONS.get(content_type, DEFAULT_PARTITION)
