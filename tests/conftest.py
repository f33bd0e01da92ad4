"""Shared fixtures: an in-memory renderer and a minimal site definition."""

import re
from typing import Any, Optional

import pytest
from bs4 import BeautifulSoup

from site_migrator.config.site import CrawlSettings, PaginatedSection, SiteConfig
from site_migrator.core.browser import Renderer
from site_migrator.core.storage import FileBlobStore

BASE_URL = "https://www.thcf.org"


def page_html(title: str, body: str = "", links: tuple = ()) -> str:
    """Build a small rendered page."""
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return (
        f"<html><head><title>{title} | Truman Heartland Community Foundation</title></head>"
        f"<body><main><h1>{title}</h1>{body}{anchors}</main></body></html>"
    )


class FakeRenderer(Renderer):
    """
    Renderer serving canned pages.

    pages maps URL -> html (status 200) or (status, html); errors maps
    URL -> exception raised on open; listings maps URL -> links shown on
    each numbered page of a paginated listing.
    """

    def __init__(
        self,
        pages: Optional[dict] = None,
        errors: Optional[dict] = None,
        listings: Optional[dict] = None,
    ):
        self.pages = pages or {}
        self.errors = errors or {}
        self.listings = listings or {}
        self.settle_ms = 0

        self.opened: list[str] = []
        self.clicks: list[str] = []
        self.waits: list[int] = []
        self.current: Optional[str] = None
        self.listing_page = 1

    async def open(self, url: str) -> Optional[int]:
        self.opened.append(url)
        if url in self.errors:
            raise self.errors[url]

        self.current = url
        self.listing_page = 1

        if url in self.listings:
            return 200

        entry = self.pages.get(url)
        if entry is None:
            return 404
        if isinstance(entry, tuple):
            return entry[0]
        return 200

    async def content(self) -> str:
        entry = self.pages.get(self.current, "")
        if isinstance(entry, tuple):
            return entry[1]
        return entry

    async def click(self, selector: str) -> bool:
        self.clicks.append(selector)
        match = re.search(r'normalize-space\(\)="(\d+)"', selector)
        pages = self.listings.get(self.current, [])
        if not match or int(match.group(1)) > len(pages):
            return False
        self.listing_page = int(match.group(1))
        return True

    async def wait(self, ms: int) -> None:
        self.waits.append(ms)

    async def evaluate(self, script: str) -> Any:
        if self.current in self.listings:
            return list(self.listings[self.current][self.listing_page - 1])

        soup = BeautifulSoup(await self.content(), "lxml")
        return [a["href"] for a in soup.select("a[href]")]


@pytest.fixture
def site():
    """Site definition with no delays."""
    return SiteConfig(
        base_url=BASE_URL,
        site_name="Truman Heartland Community Foundation",
        seeds=["/", "/about"],
        paginated_sections=[],
        crawl=CrawlSettings(
            max_pages=50,
            delay_ms=0,
            settle_ms=0,
            pagination_open_wait_ms=0,
            pagination_settle_ms=0,
        ),
    )


@pytest.fixture
def paginated_site(site):
    """Site definition with the news listing paginated."""
    site.paginated_sections = [PaginatedSection(path="/about/news", label="News")]
    return site


@pytest.fixture
def store(tmp_path):
    """Blob store in a temporary directory."""
    return FileBlobStore(tmp_path / "scraped-data")


@pytest.fixture
def renderer_factory():
    """FakeRenderer class, for tests that build their own pages."""
    return FakeRenderer


@pytest.fixture
def make_page():
    """page_html helper."""
    return page_html
