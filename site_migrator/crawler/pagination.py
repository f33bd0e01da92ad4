"""
Pagination discovery for listings paged by script-driven controls.

The news index and scholarship directory swap their content when a page
number is clicked; the controls carry no href, so the only way to reach
later pages is to click through them and harvest links after each swap.
"""

from dataclasses import dataclass, field

import structlog

from site_migrator.core.browser import Renderer

logger = structlog.get_logger(__name__)


# Collects the resolved href of every anchor in the live page
HARVEST_LINKS_SCRIPT = "Array.from(document.querySelectorAll('a[href]'), a => a.href)"


def page_control_selector(number: int) -> str:
    """XPath of the control showing page `number` inside a pagination container."""
    text = f'normalize-space()="{number}"'
    return (
        f"xpath=//nav//a[{text}]"
        f' | //div[contains(@class,"pag")]//a[{text}]'
        f' | //ul[contains(@class,"pag")]//a[{text}]'
        f' | //*[contains(@class,"pag")]//button[{text}]'
    )


@dataclass
class PaginationResult:
    """Links harvested from every page of one listing."""
    url: str
    pages: int = 0
    links: list[str] = field(default_factory=list)


class PaginationDiscovery:
    """
    Click-through discovery over numbered listing controls.

    Usage:
        discovery = PaginationDiscovery(renderer, ceiling=20)
        result = await discovery.discover("https://www.thcf.org/about/news")
        frontier.add_all(normalize(link) for link in result.links)
    """

    def __init__(
        self,
        renderer: Renderer,
        ceiling: int = 20,
        open_wait_ms: int = 1000,
        settle_ms: int = 2000,
    ):
        """
        Initialize discovery.

        Args:
            renderer: Render capability, shared with the crawl
            ceiling: Highest page number tried
            open_wait_ms: Wait after opening the listing
            settle_ms: Wait after each click for the content swap
        """
        self.renderer = renderer
        self.ceiling = ceiling
        self.open_wait_ms = open_wait_ms
        self.settle_ms = settle_ms

    async def _harvest(self) -> list[str]:
        links = await self.renderer.evaluate(HARVEST_LINKS_SCRIPT)
        return [link for link in links or [] if isinstance(link, str)]

    async def discover(self, url: str, label: str = "") -> PaginationResult:
        """
        Walk the listing's pages and collect their links.

        Stops at the first page number without a control; a listing
        without page 2 reports a single page.

        Raises:
            Exception: Navigation or click failures propagate to the caller
        """
        log = logger.bind(section=label or url)
        result = PaginationResult(url=url)

        await self.renderer.open(url)
        await self.renderer.wait(self.open_wait_ms)
        result.links.extend(await self._harvest())
        result.pages = 1

        for number in range(2, self.ceiling + 1):
            if not await self.renderer.click(page_control_selector(number)):
                break

            await self.renderer.wait(self.settle_ms)
            links = await self._harvest()
            result.links.extend(links)
            result.pages = number
            log.debug("pagination_page", page=number, links=len(links))

        log.info("pagination_complete", pages=result.pages, links=len(result.links))
        return result
