"""
Render capability: fetch the rendered DOM of a URL.

The crawler only talks to the abstract Renderer. PlaywrightRenderer drives
headless Chromium; tests substitute an in-memory renderer.

Usage:
    async with PlaywrightRenderer(user_agent=...) as renderer:
        page = await renderer.fetch("https://www.thcf.org/about")
        if page.ok:
            title = page.dom.text(["h1"])
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog
from playwright.async_api import async_playwright

from .selectors import Selector

logger = structlog.get_logger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; SiteMigrator/1.0; +https://prairiegiraffe.com)"
)


@dataclass
class RenderedPage:
    """Snapshot of a page after navigation settled."""
    url: str
    status: Optional[int]
    html: str = ""
    _dom: Optional[Selector] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        """True when a response arrived with status < 400."""
        return self.status is not None and self.status < 400

    @property
    def dom(self) -> Selector:
        """Parsed DOM handle (parsed lazily, once)."""
        if self._dom is None:
            self._dom = Selector.from_html(self.html, self.url)
        return self._dom


class Renderer(ABC):
    """
    Abstract render capability.

    open() raises on network failure or timeout; a missing response is
    reported as status None.
    """

    settle_ms: int = 0

    @abstractmethod
    async def open(self, url: str) -> Optional[int]:
        """Navigate to url and return the HTTP status (None if no response)."""

    @abstractmethod
    async def content(self) -> str:
        """Return the current rendered HTML."""

    @abstractmethod
    async def click(self, selector: str) -> bool:
        """Click the first element matching selector; False if none matches."""

    @abstractmethod
    async def wait(self, ms: int) -> None:
        """Wait for asynchronous page activity to settle."""

    @abstractmethod
    async def evaluate(self, script: str) -> Any:
        """Evaluate a script in the page and return its result."""

    async def fetch(self, url: str) -> RenderedPage:
        """
        Open url and snapshot its DOM.

        Pages with status >= 400 are returned without content.
        """
        status = await self.open(url)
        page = RenderedPage(url=url, status=status)
        if not page.ok:
            return page

        if self.settle_ms:
            await self.wait(self.settle_ms)

        page.html = await self.content()
        return page


class PlaywrightRenderer(Renderer):
    """Headless Chromium renderer built on Playwright."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_ms: int = 30_000,
        settle_ms: int = 500,
        wait_until: str = "networkidle",
        headless: bool = True,
    ):
        """
        Initialize renderer.

        Args:
            user_agent: User-Agent header sent with every request
            timeout_ms: Navigation timeout
            settle_ms: Extra wait after navigation for dynamic content
            wait_until: Playwright load state to wait for
            headless: Run browser without a window
        """
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms
        self.wait_until = wait_until
        self.headless = headless

        self._playwright = None
        self._browser = None
        self._page = None

    async def __aenter__(self) -> "PlaywrightRenderer":
        """Launch browser and open a page."""
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)
        context = await self._browser.new_context(user_agent=self.user_agent)
        self._page = await context.new_page()
        logger.debug("browser_started", headless=self.headless)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close browser."""
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
        self._page = None

    def _require_page(self):
        if self._page is None:
            raise RuntimeError("Renderer not initialized. Use 'async with' context.")
        return self._page

    async def open(self, url: str) -> Optional[int]:
        page = self._require_page()
        response = await page.goto(url, wait_until=self.wait_until, timeout=self.timeout_ms)
        return response.status if response else None

    async def content(self) -> str:
        return await self._require_page().content()

    async def click(self, selector: str) -> bool:
        page = self._require_page()
        handle = await page.query_selector(selector)
        if handle is None:
            return False
        await handle.click()
        return True

    async def wait(self, ms: int) -> None:
        await self._require_page().wait_for_timeout(ms)

    async def evaluate(self, script: str) -> Any:
        return await self._require_page().evaluate(script)
