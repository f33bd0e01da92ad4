"""
URL canonicalization and slug helpers.

normalize_url is the single gate every discovered link passes through
before it may enter the crawl frontier.
"""

import re
from typing import Iterable, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

# Links to files are never crawled
SKIPPED_EXTENSIONS = [
    ".pdf", ".xls", ".xlsx", ".doc", ".docx", ".zip",
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp",
    ".mp4", ".mp3",
]


def is_file_link(path: str) -> bool:
    """Check if URL path points to a downloadable file."""
    path_lower = path.lower()
    return any(path_lower.endswith(ext) for ext in SKIPPED_EXTENSIONS)


def strip_trailing_slash(path: str) -> str:
    """Remove exactly one trailing slash; the root path stays '/'."""
    if path.endswith("/"):
        path = path[:-1]
    return path or "/"


def collapse_slashes(path: str) -> str:
    """Collapse runs of slashes: "/about//staff//" -> "/about/staff/"."""
    return re.sub(r"/{2,}", "/", path)


def normalize_url(
    href: str,
    base_url: str,
    allowed_hosts: Iterable[str],
) -> Optional[str]:
    """
    Resolve and canonicalize a discovered link.

    Args:
        href: Possibly relative href
        base_url: Origin the href is resolved against
        allowed_hosts: Host names belonging to the site (apex + www)

    Returns:
        Absolute canonical URL, or None if the link is rejected
    """
    if href is None:
        return None

    try:
        parts = urlsplit(urljoin(base_url, href.strip()))
        hostname = parts.hostname
    except ValueError:
        return None

    if not hostname or parts.scheme not in ("http", "https"):
        return None

    if hostname.lower() not in {h.lower() for h in allowed_hosts}:
        return None

    path = strip_trailing_slash(collapse_slashes(parts.path))
    if is_file_link(path):
        return None

    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))


def slug_from_url(url: str) -> str:
    """
    Derive the storage slug of a crawled URL.

    "https://www.thcf.org/about/staff" -> "about--staff"
    "https://www.thcf.org/" -> "index"
    """
    parts = urlsplit(url)
    path = strip_trailing_slash(parts.path)
    slug = path.lstrip("/").replace("/", "--") or "index"

    if parts.query:
        query = re.sub(r"[^A-Za-z0-9]+", "-", parts.query).strip("-")
        if query:
            slug = f"{slug}--{query}"

    return slug


def url_to_path(href: str, site_domain: str) -> str:
    """
    Reduce a site URL to its path.

    "https://www.thcf.org/about/contact-us" -> "/about/contact-us"
    Foreign URLs and relative paths are returned unchanged.
    """
    if not href:
        return "/"

    try:
        parts = urlsplit(href)
    except ValueError:
        return href

    if parts.hostname and site_domain in parts.hostname:
        return parts.path or "/"

    return href


def last_segment_slug(url: str, site_domain: str = "") -> str:
    """
    Slug of a clean record: the last path segment.

    "https://www.thcf.org/news/2024-annual-report" -> "2024-annual-report"
    """
    path = url_to_path(url, site_domain) if site_domain else urlsplit(url).path
    segments = [s for s in path.split("/") if s]
    return segments[-1] if segments else ""
