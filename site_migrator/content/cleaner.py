"""
HTML content cleaning for raw page bodies.

The source site wraps every page body in the same chrome: banners, side
navigation, share widgets, newsletter embeds, related-article blocks.
Each profile strips its chrome and keeps the content regions
(section.main-content, plus section.sub-content where callouts matter).

The regions are returned with their wrappers so that cleaned output
is itself valid input: cleaning twice gives the same result as once.
"""

from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup, Tag

import structlog

logger = structlog.get_logger(__name__)


PRIMARY_REGION = "section.main-content"
SUPPLEMENTARY_REGION = "section.sub-content"

# Chrome present on every template
COMMON_STRIP = ("div.share", ".a2a_kit", "script", '[class*="ctct"]')


@dataclass(frozen=True)
class CleanProfile:
    """What to strip and keep for one kind of content."""
    name: str
    strip: tuple[str, ...]
    supplementary: bool = False
    drop_leading_thumbnail: bool = False


NEWS_PROFILE = CleanProfile(
    name="news",
    strip=(
        "section.article-info",
        "section.related",
        "section.text-banner",
    ) + COMMON_STRIP,
    supplementary=True,
    drop_leading_thumbnail=True,
)

SCHOLARSHIP_PROFILE = CleanProfile(
    name="scholarship",
    strip=("section.banner", "section.side-nav") + COMMON_STRIP,
)

PAGE_PROFILE = CleanProfile(
    name="page",
    strip=(
        "section.banner",
        "section.side-nav",
        "section.article-info",
        "section.related",
        "section.sub-content .side-block .sub-nav",
    ) + COMMON_STRIP,
    supplementary=True,
)


def parse_fragment(html: str) -> BeautifulSoup:
    """Parse an HTML fragment without adding html/body wrappers."""
    return BeautifulSoup(html or "", "html.parser")


def _is_thumbnail_paragraph(element: Optional[Tag]) -> bool:
    if element is None or element.name != "p":
        return False
    return any(
        isinstance(child, Tag) and child.name == "img" and "thumbnail" in (child.get("class") or [])
        for child in element.children
    )


def _drop_leading_thumbnail(region: Tag) -> None:
    """Remove the featured images repeated at the top of an article."""
    first = region.find(True, recursive=False)
    while _is_thumbnail_paragraph(first):
        first.decompose()
        first = region.find(True, recursive=False)


def _strip(soup: BeautifulSoup, selectors: tuple[str, ...]) -> None:
    for selector in selectors:
        for element in soup.select(selector):
            element.decompose()


def _inside(element: Tag, container: Tag) -> bool:
    return any(parent is container for parent in element.parents)


def _regions(soup: BeautifulSoup, profile: CleanProfile) -> str:
    primary = soup.select_one(PRIMARY_REGION)
    supplementary = soup.select_one(SUPPLEMENTARY_REGION) if profile.supplementary else None

    if primary is not None and profile.drop_leading_thumbnail:
        _drop_leading_thumbnail(primary)

    # A callout block nested in the main region is already part of it
    if primary is not None and supplementary is not None and _inside(supplementary, primary):
        supplementary = None

    parts = [str(region) for region in (primary, supplementary) if region is not None]
    return "".join(parts).strip()


def clean_html(html: str, profile: CleanProfile) -> str:
    """
    Clean a raw body with the given profile.

    Args:
        html: Raw body HTML
        profile: Content profile

    Returns:
        Content regions as HTML, "" if the body has none
    """
    if not html:
        return ""

    soup = parse_fragment(html)
    _strip(soup, profile.strip)
    return _regions(soup, profile)


def clean_news_body(html: str) -> str:
    return clean_html(html, NEWS_PROFILE)


def clean_scholarship_body(html: str) -> str:
    return clean_html(html, SCHOLARSHIP_PROFILE)


def clean_page_body(html: str) -> str:
    """
    Clean a generic page body.

    Pages built without the content sections keep whatever remains
    after the chrome is stripped.
    """
    if not html:
        return ""

    soup = parse_fragment(html)
    _strip(soup, PAGE_PROFILE.strip)

    body = _regions(soup, PAGE_PROFILE)
    if not body:
        logger.debug("page_without_content_regions")
        body = str(soup).strip()

    return body
