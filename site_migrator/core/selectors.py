"""
Unified selector interface over a rendered DOM snapshot.

Extractors never touch BeautifulSoup directly; they go through Selector,
which gives CSS querying with prioritized fallback chains and empty
defaults instead of None.
"""

import copy
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

import structlog

logger = structlog.get_logger(__name__)


# Elements removed from captured content HTML
UNSAFE_TAGS = ["script", "style", "noscript"]


@dataclass
class SelectorResult:
    """Result from selector extraction."""
    value: Optional[str] = None
    values: list[str] = None
    element: Optional[Tag] = None
    elements: list[Tag] = None
    found: bool = False

    def __post_init__(self):
        if self.values is None:
            self.values = []
        if self.elements is None:
            self.elements = []


class Selector:
    """
    DOM handle for field extraction.

    Wraps a parsed page (or a single element of it) and resolves
    relative URLs against the page URL.
    """

    def __init__(self, soup: BeautifulSoup | Tag, base_url: str = ""):
        """
        Initialize selector with parsed HTML.

        Args:
            soup: Parsed document or element to scope queries to
            base_url: URL of the page, for resolving relative links
        """
        self.soup = soup
        self.base_url = base_url

    @classmethod
    def from_html(cls, html: str, base_url: str = "") -> "Selector":
        """Parse a rendered page into a selector."""
        return cls(BeautifulSoup(html or "", "lxml"), base_url)

    def scoped(self, element: Tag) -> "Selector":
        """Return a selector limited to one element (e.g. a listing card)."""
        return Selector(element, self.base_url)

    def css(self, selector: str) -> SelectorResult:
        """
        Select elements using CSS selector.

        Args:
            selector: CSS selector string

        Returns:
            SelectorResult with matched elements
        """
        elements = self.soup.select(selector)
        if not elements:
            return SelectorResult(found=False)

        return SelectorResult(
            value=elements[0].get_text(" ", strip=True),
            values=[e.get_text(" ", strip=True) for e in elements],
            element=elements[0],
            elements=list(elements),
            found=True,
        )

    def css_one(self, selector: str) -> SelectorResult:
        """
        Select first element using CSS selector.

        Args:
            selector: CSS selector string

        Returns:
            SelectorResult with first match
        """
        element = self.soup.select_one(selector)
        if not element:
            return SelectorResult(found=False)

        return SelectorResult(
            value=element.get_text(" ", strip=True),
            element=element,
            found=True,
        )

    def try_selectors(self, selectors: list[str]) -> SelectorResult:
        """
        Try multiple CSS selectors in order, return first match.

        Args:
            selectors: List of CSS selectors to try

        Returns:
            First successful SelectorResult
        """
        for selector in selectors:
            result = self.css_one(selector)
            if result.found:
                return result
        return SelectorResult(found=False)

    def first(self, selectors: list[str]) -> Optional[Tag]:
        """Return the element of the first matching selector, or None."""
        return self.try_selectors(selectors).element

    def text(self, selectors: list[str]) -> str:
        """Trimmed text content of the first match ("" if none)."""
        element = self.first(selectors)
        return element.get_text().strip() if element else ""

    def attr(self, selectors: list[str], name: str) -> str:
        """Attribute of the first match ("" if none)."""
        element = self.first(selectors)
        if element is None:
            return ""
        value = element.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        return (value or "").strip()

    def url(self, selectors: list[str], name: str = "src") -> str:
        """URL attribute of the first match resolved to an absolute URL."""
        value = self.attr(selectors, name)
        return self.absolute(value) if value else ""

    def absolute(self, href: str) -> str:
        """Resolve href against the page URL."""
        if not href:
            return ""
        return urljoin(self.base_url, href.strip())


def inner_html(element: Optional[Tag]) -> str:
    """Inner HTML of an element ("" if None)."""
    if element is None:
        return ""
    return element.decode_contents()


def sanitized(element: Optional[Tag]) -> Optional[Tag]:
    """
    Copy of an element with scripts and styles removed.

    The snapshot itself is left untouched for link and image harvesting.
    """
    if element is None:
        return None

    clone = copy.copy(element)
    for unsafe in clone.find_all(UNSAFE_TAGS):
        unsafe.decompose()

    return clone


def element_text(element: Optional[Tag]) -> str:
    """Trimmed text content of an element ("" if None)."""
    if element is None:
        return ""
    return element.get_text().strip()


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    if not text:
        return ""
    return " ".join(text.split())
