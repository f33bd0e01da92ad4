"""
Crawl scheduler for the site migration pipeline.

Coordinates:
- Output partition setup and resume state
- Frontier seeding (seed list, primary navigation, paginated listings)
- The breadth-first fetch / classify / extract / persist loop
- Site-level artifacts (site map, navigation tree, image manifest)
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

import structlog

from site_migrator.config.site import SiteConfig
from site_migrator.core.browser import RenderedPage, Renderer
from site_migrator.core.classifier import PARTITIONS, classify_page, output_partition
from site_migrator.core.models import ContentType, CrawlOutcome, NavItem, RawPageRecord
from site_migrator.core.storage import BlobStore
from site_migrator.core.urls import normalize_url, slug_from_url
from site_migrator.extractors import (
    extract_images,
    extract_links,
    extract_meta,
    extract_navigation,
    get_extractor,
)

from .frontier import Frontier
from .pagination import PaginationDiscovery

logger = structlog.get_logger(__name__)


SITE_MAP_KEY = "site-map"
NAV_STRUCTURE_KEY = "nav-structure"
IMAGE_MANIFEST_KEY = "image-manifest"


class CrawlSetupError(RuntimeError):
    """The crawl cannot start: output not writable or site unreachable."""


@dataclass
class CrawlSummary:
    """End-of-run statistics."""
    pages_visited: int = 0
    outcomes: dict[str, int] = field(
        default_factory=lambda: {outcome.value: 0 for outcome in CrawlOutcome}
    )
    by_type: dict[str, int] = field(default_factory=dict)
    images: int = 0

    def record(self, outcome: CrawlOutcome) -> None:
        self.outcomes[outcome.value] += 1

    def to_dict(self) -> dict:
        return {
            "pages_visited": self.pages_visited,
            "outcomes": dict(self.outcomes),
            "by_type": dict(sorted(self.by_type.items(), key=lambda kv: (-kv[1], kv[0]))),
            "images": self.images,
        }


class CrawlScheduler:
    """
    Breadth-first crawler over one site.

    Owns the frontier, the site map and the image manifest for the
    duration of a run. One page is processed at a time; a fixed delay
    follows every fetch, whatever its outcome.

    Usage:
        async with PlaywrightRenderer(user_agent=site.user_agent) as renderer:
            scheduler = CrawlScheduler(site, renderer, FileBlobStore(site.scraped_dir))
            summary = await scheduler.run()
    """

    def __init__(
        self,
        site: SiteConfig,
        renderer: Renderer,
        store: BlobStore,
        max_pages: Optional[int] = None,
        resume: bool = False,
    ):
        """
        Initialize scheduler.

        Args:
            site: Site definition
            renderer: Render capability
            store: Blob store for raw records and artifacts
            max_pages: Page budget for this run (defaults to config)
            resume: Skip URLs recorded in a previous run's site map
        """
        self.site = site
        self.renderer = renderer
        self.store = store
        self.max_pages = max_pages if max_pages is not None else site.crawl.max_pages
        self.resume = resume

        self.frontier = Frontier()
        self.site_map: list[dict] = []
        self.images: dict[str, None] = {}  # Insertion-ordered set
        self.navigation: list[NavItem] = []
        self.summary = CrawlSummary()

    def normalize(self, href: str) -> Optional[str]:
        return normalize_url(href, self.site.base_url, self.site.allowed_hosts)

    async def run(self) -> CrawlSummary:
        """
        Run the crawl.

        Returns:
            CrawlSummary of this run

        Raises:
            CrawlSetupError: If partitions cannot be created or the
                base URL cannot be reached
        """
        logger.info(
            "starting_crawl",
            site=self.site.site_name,
            base_url=self.site.base_url,
            max_pages=self.max_pages,
            resume=self.resume,
        )

        self.setup()
        if self.resume:
            self.load_resume_state()

        queued = self.frontier.add_all(self.normalize(seed) for seed in self.site.seeds)
        logger.info("seeds_queued", count=queued)

        await self.discover_navigation()
        await self.discover_paginated_sections()

        logger.info("frontier_ready", queued=len(self.frontier))

        await self.crawl()
        self.write_artifacts()

        self.summary.images = len(self.images)
        for entry in self.site_map:
            content_type = entry.get("type", ContentType.PAGE.value)
            self.summary.by_type[content_type] = self.summary.by_type.get(content_type, 0) + 1

        logger.info("crawl_complete", **self.summary.to_dict())
        return self.summary

    def setup(self) -> None:
        """Create every output partition."""
        try:
            for partition in PARTITIONS:
                self.store.ensure_partition(partition)
        except OSError as e:
            raise CrawlSetupError(f"Cannot create output partitions: {e}") from e

    def load_resume_state(self) -> None:
        """Pre-seed visited URLs and carry forward the previous artifacts."""
        if not self.store.exists(SITE_MAP_KEY):
            logger.info("resume_no_site_map")
            return

        previous = self.store.read(SITE_MAP_KEY)
        self.site_map.extend(previous)
        self.frontier = Frontier(visited=(entry["url"] for entry in previous))

        if self.store.exists(IMAGE_MANIFEST_KEY):
            for image in self.store.read(IMAGE_MANIFEST_KEY):
                self.images[image] = None

        logger.info(
            "resuming",
            already_scraped=len(self.frontier.visited),
            images=len(self.images),
        )

    async def discover_navigation(self) -> None:
        """Capture the primary navigation from the home page and queue its links."""
        try:
            page = await self.renderer.fetch(self.site.base_url)
        except Exception as e:
            raise CrawlSetupError(f"Cannot reach {self.site.base_url}: {e}") from e

        if not page.ok:
            raise CrawlSetupError(
                f"Cannot reach {self.site.base_url}: status {page.status}"
            )

        self.navigation = extract_navigation(page.dom)

        queued = 0
        for item in self.navigation:
            queued += self.frontier.add(self.normalize(item.href))
            queued += self.frontier.add_all(self.normalize(child.href) for child in item.children)

        logger.info("navigation_extracted", items=len(self.navigation), queued=queued)

    async def discover_paginated_sections(self) -> None:
        """Click through paginated listings and queue every item link."""
        crawl = self.site.crawl
        discovery = PaginationDiscovery(
            self.renderer,
            ceiling=crawl.pagination_ceiling,
            open_wait_ms=crawl.pagination_open_wait_ms,
            settle_ms=crawl.pagination_settle_ms,
        )

        for section in self.site.paginated_sections:
            url = self.normalize(section.path)
            if not url:
                logger.warning("pagination_section_rejected", path=section.path)
                continue

            try:
                result = await discovery.discover(url, section.label)
            except Exception as e:
                logger.error("pagination_failed", section=section.label, error=str(e))
                continue

            queued = self.frontier.add_all(self.normalize(link) for link in result.links)
            logger.info(
                "section_discovered",
                section=section.label,
                pages=result.pages,
                queued=queued,
            )

    async def crawl(self) -> None:
        """Main loop: until the frontier is empty or the budget is spent."""
        delay = self.site.crawl.delay_ms / 1000

        while self.summary.pages_visited < self.max_pages:
            url = self.frontier.pop()
            if url is None:
                break

            self.summary.pages_visited += 1
            outcome = await self.process(url)
            self.summary.record(outcome)

            await asyncio.sleep(delay)

    async def process(self, url: str) -> CrawlOutcome:
        """Fetch, extract and persist one page."""
        content_type = classify_page(url)
        logger.info(
            "crawling",
            index=self.summary.pages_visited,
            budget=self.max_pages,
            type=content_type.value,
            url=url,
        )

        try:
            page = await self.renderer.fetch(url)
            if not page.ok:
                logger.warning("page_skipped", url=url, type=content_type.value, status=page.status)
                return CrawlOutcome.SKIPPED

            record = self.scrape(page, content_type)
            key = self.persist(record)
        except Exception as e:
            logger.error("page_failed", url=url, type=content_type.value, error=str(e))
            return CrawlOutcome.ERROR

        logger.info("page_saved", url=url, type=content_type.value, key=key)
        return CrawlOutcome.SUCCESS

    def scrape(self, page: RenderedPage, content_type: ContentType) -> RawPageRecord:
        """Build the raw record of a fetched page."""
        dom = page.dom
        extractor = get_extractor(content_type)

        return RawPageRecord(
            url=page.url,
            content_type=content_type,
            meta=extract_meta(dom),
            extracted_data=extractor.extract(dom),
            discovered_links=extract_links(dom),
            discovered_images=extract_images(dom),
        )

    def persist(self, record: RawPageRecord) -> str:
        """Write the record, then feed its links and images back. Returns the record key."""
        key = f"{output_partition(record.content_type)}/{slug_from_url(record.url)}"
        self.store.write(key, record.to_dict())

        for image in record.discovered_images:
            self.images[image] = None

        self.frontier.add_all(self.normalize(link) for link in record.discovered_links)
        self.site_map.append(record.site_map_entry())
        return key

    def write_artifacts(self) -> None:
        """Write site map, navigation tree and image manifest."""
        self.store.write(SITE_MAP_KEY, self.site_map)
        self.store.write(NAV_STRUCTURE_KEY, [item.to_dict() for item in self.navigation])
        self.store.write(IMAGE_MANIFEST_KEY, list(self.images))

        logger.info(
            "artifacts_written",
            pages=len(self.site_map),
            nav_items=len(self.navigation),
            images=len(self.images),
        )
