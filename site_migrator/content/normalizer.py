"""
Normalization utilities for prepared content.

Handles:
- Titles (body h1, else the document title without the site suffix)
- News categories, authors and excerpts
- Publication dates for sorting
- Page types by URL section
"""

import re
from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog
from dateutil import parser as date_parser

from .cleaner import parse_fragment

logger = structlog.get_logger(__name__)


SITE_TITLE_SUFFIX = re.compile(
    r"\s*\|?\s*Truman Heartland Community Foundation\s*$", re.IGNORECASE
)

# h1 of the hidden navigation dialog, present on some templates
NAVIGATION_HEADING = "Site Navigation"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def clean_meta_title(meta_title: str) -> str:
    """
    Strip the site suffix and a truncation ellipsis from a document title.

    "Annual Report | Truman Heartland Community Foundation" -> "Annual Report"
    """
    if not meta_title:
        return ""
    title = SITE_TITLE_SUFFIX.sub("", meta_title)
    title = title.rstrip()
    if title.endswith("…"):
        title = title[:-1]
    return title.strip()


def extract_title(body: str, meta_title: str) -> str:
    """Body h1 if it is a real heading, else the cleaned document title."""
    if body:
        h1 = parse_fragment(body).find("h1")
        text = h1.get_text().strip() if h1 else ""
        if text and text != NAVIGATION_HEADING:
            return text
    return clean_meta_title(meta_title)


def extract_category(body: str) -> str:
    """Section label shown in a news banner (section.text-banner p.section)."""
    if not body:
        return ""
    label = parse_fragment(body).select_one("section.text-banner p.section")
    return label.get_text().strip() if label else ""


def clean_author(author: str) -> str:
    """
    First non-empty line of a byline.

    "Melanie Adkins\\n   Director of Marketing" -> "Melanie Adkins"
    """
    if not author:
        return ""
    for line in author.splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def make_excerpt(
    body_text: str,
    skip: Iterable[str] = (),
    stop_lines: Iterable[str] = (),
    length: int = 200,
    min_line_length: int = 20,
) -> str:
    """
    Build a plain-text teaser from an article's text.

    The leading banner lines (title, date, category, and anything shorter
    than min_line_length) are skipped; reading stops at the first share,
    footer or navigation line. The result is cut at a word boundary.

    Args:
        body_text: Article text, one block per line
        skip: Exact lines to skip before the content starts
        stop_lines: Lines (or line prefixes) that end the content
        length: Maximum excerpt length before the ellipsis
        min_line_length: Shorter leading lines are treated as banner

    Returns:
        Excerpt, "" if the text has no content lines
    """
    if not body_text:
        return ""

    skip = {s for s in skip if s}
    stops = tuple(stop_lines)

    content = []
    started = False
    for line in body_text.splitlines():
        line = line.strip()
        if not line:
            continue

        if not started:
            if line in skip or len(line) < min_line_length:
                continue
            started = True

        if _is_stop_line(line, stops):
            break
        content.append(line)

    full_text = " ".join(content)
    excerpt = full_text[:length].strip()

    if len(full_text) > length:
        last_space = excerpt.rfind(" ")
        if last_space > length * 3 // 4:
            excerpt = excerpt[:last_space]
        excerpt += "..."

    return excerpt


def _is_stop_line(line: str, stops: tuple[str, ...]) -> bool:
    # Single words are menu entries only when they are the whole line
    for stop in stops:
        if " " in stop:
            if line.startswith(stop):
                return True
        elif line == stop:
            return True
    return False


def parse_date(text: str) -> Optional[datetime]:
    """
    Parse a publication date ("2024-03-01", "March 1, 2024").

    Returns:
        Timezone-aware datetime (UTC when unspecified), None if unparsable
    """
    if not text:
        return None

    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError) as e:
        logger.debug("invalid_date", text=text, error=str(e))
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def date_sort_key(text: str) -> datetime:
    """Sort key for newest-first ordering; undated items sort last."""
    return parse_date(text) or EPOCH


def page_type_for(path: str, sections: Iterable[tuple[str, str]]) -> str:
    """Page type of the first section whose prefix the path starts with."""
    for prefix, page_type in sections:
        if path.startswith(prefix):
            return page_type
    return "page"
