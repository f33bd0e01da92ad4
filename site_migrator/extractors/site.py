"""
Site-level extraction shared by every page type.

These functions read the whole rendered document rather than one content
region: document metadata, outgoing links, every image reference and the
primary navigation tree.
"""

import re

from bs4 import Tag

from site_migrator.core.models import NavItem, PageMeta
from site_migrator.core.selectors import Selector, collapse_whitespace

# Root list of the primary navigation (fullscreen modal menu first)
NAV_ROOT_SELECTORS = [
    "#fullScreenMenu .mobile-menu ul.root-group",
    "nav ul.root-group",
    "nav ul",
]

BACKGROUND_URL_PATTERN = re.compile(
    r"background(?:-image)?\s*:[^;]*?url\(\s*['\"]?(.+?)['\"]?\s*\)",
    re.IGNORECASE,
)


def extract_meta(dom: Selector) -> PageMeta:
    """Document title, meta description and Open Graph image."""
    title = dom.first(["title"])
    return PageMeta(
        title=title.get_text().strip() if title else "",
        description=dom.attr(['meta[name="description"]'], "content"),
        og_image=dom.attr(['meta[property="og:image"]'], "content"),
    )


def extract_links(dom: Selector) -> list[str]:
    """Every a[href] of the document, resolved to absolute URLs."""
    links = []
    for anchor in dom.css("a[href]").elements:
        href = anchor.get("href")
        if href:
            links.append(dom.absolute(href))
    return links


def _srcset_candidates(srcset: str) -> list[str]:
    candidates = []
    for entry in srcset.split(","):
        parts = entry.strip().split()
        if parts:
            candidates.append(parts[0])
    return candidates


def extract_images(dom: Selector) -> list[str]:
    """
    Every image referenced by the document.

    Sources: img[src], inline background images and each srcset
    candidate of img/source elements. Absolute and deduplicated, in
    document order per source kind.
    """
    found = []

    for img in dom.css("img[src]").elements:
        found.append(img.get("src"))

    for element in dom.css('[style*="background"]').elements:
        match = BACKGROUND_URL_PATTERN.search(element.get("style") or "")
        if match:
            found.append(match.group(1))

    for element in dom.css("img[srcset], source[srcset]").elements:
        found.extend(_srcset_candidates(element.get("srcset") or ""))

    images = []
    seen = set()
    for src in found:
        if not src or not src.strip():
            continue
        url = dom.absolute(src)
        if url not in seen:
            seen.add(url)
            images.append(url)

    return images


def _nav_link(dom: Selector, anchor: Tag) -> tuple[str, str]:
    label = collapse_whitespace(anchor.get_text())
    href = dom.absolute(anchor.get("href") or "")
    return label, href


def extract_navigation(dom: Selector) -> list[NavItem]:
    """
    Primary navigation tree, two levels deep.

    Items without a label are dropped; children come from the first
    list nested in a top-level item.
    """
    root = dom.first(NAV_ROOT_SELECTORS)
    if root is None:
        return []

    nav = []
    for li in root.find_all("li", recursive=False):
        anchor = li.find("a", recursive=False)
        label, href = _nav_link(dom, anchor) if anchor else ("", "")
        if not label:
            continue

        item = NavItem(label=label, href=href)

        sub_list = li.find("ul")
        if sub_list is not None:
            for sub_li in sub_list.find_all("li", recursive=False):
                sub_anchor = sub_li.find("a", recursive=False)
                if sub_anchor is None:
                    continue
                sub_label, sub_href = _nav_link(dom, sub_anchor)
                if sub_label:
                    item.children.append(NavItem(label=sub_label, href=sub_href))

        nav.append(item)

    return nav
