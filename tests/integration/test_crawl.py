"""Integration tests for the crawl scheduler."""

import asyncio

import pytest
from structlog.testing import capture_logs

from site_migrator.crawler import CrawlScheduler, CrawlSetupError
from site_migrator.crawler.scheduler import IMAGE_MANIFEST_KEY, NAV_STRUCTURE_KEY, SITE_MAP_KEY
from site_migrator.core.storage import FileBlobStore

BASE_URL = "https://www.thcf.org"

NAV = (
    '<nav><ul class="root-group">'
    '<li><a href="/donors">Donors</a></li>'
    '<li><a href="/about">About Us</a>'
    '<ul><li><a href="/about/staff">Staff</a></li></ul></li>'
    "</ul></nav>"
)


@pytest.fixture
def pages(make_page):
    """Canned site: home, about, a news article, staff, a 500 and a broken link."""
    home = make_page("Home", NAV + '<img src="/img/hero.jpg">', links=("/broken",))
    return {
        BASE_URL: home,
        BASE_URL + "/": home,
        BASE_URL + "/about": make_page(
            "About Us",
            "<p>Since 1982.</p>",
            links=("/news/gala-recap", "https://facebook.com/thcf", "/files/report.pdf"),
        ),
        BASE_URL + "/news/gala-recap": make_page(
            "Gala Recap",
            '<time datetime="2024-05-01">May 1</time><img src="/uploads/gala.jpg">',
        ),
        BASE_URL + "/about/staff": make_page(
            "Our Staff",
            '<div class="staff-card"><h3>Jane Doe</h3><p class="title">President</p></div>',
        ),
        BASE_URL + "/donors": (500, ""),
    }


@pytest.fixture
def renderer(renderer_factory, pages):
    return renderer_factory(
        pages=pages,
        errors={BASE_URL + "/broken": RuntimeError("net::ERR_CONNECTION_RESET")},
    )


class TestCrawl:
    """End-to-end crawl over canned pages."""

    @pytest.mark.asyncio
    async def test_breadth_first_order(self, site, renderer, store):
        await CrawlScheduler(site, renderer, store).run()

        assert renderer.opened == [
            BASE_URL,
            BASE_URL + "/",
            BASE_URL + "/about",
            BASE_URL + "/donors",
            BASE_URL + "/about/staff",
            BASE_URL + "/broken",
            BASE_URL + "/news/gala-recap",
        ]

    @pytest.mark.asyncio
    async def test_records_persisted_by_partition(self, site, renderer, store):
        await CrawlScheduler(site, renderer, store).run()

        assert store.list_keys("pages") == ["pages/about", "pages/index"]
        assert store.list_keys("news") == ["news/news--gala-recap"]
        assert store.list_keys("staff") == ["staff/about--staff"]
        assert store.list_keys("scholarships") == []

        article = store.read("news/news--gala-recap")
        assert article["type"] == "news"
        assert article["url"] == BASE_URL + "/news/gala-recap"
        assert article["data"]["date"] == "2024-05-01"
        assert article["meta"]["title"] == "Gala Recap | Truman Heartland Community Foundation"

        staff = store.read("staff/about--staff")
        assert staff["data"]["members"][0]["name"] == "Jane Doe"

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_crawl(self, site, renderer, store):
        """Skipped and failed pages are counted, not persisted."""
        summary = await CrawlScheduler(site, renderer, store).run()

        assert summary.pages_visited == 6
        assert summary.outcomes == {"success": 4, "skipped": 1, "error": 1}
        assert not store.exists("pages/donors")
        assert not store.exists("pages/broken")

    @pytest.mark.asyncio
    async def test_artifacts(self, site, renderer, store):
        summary = await CrawlScheduler(site, renderer, store).run()

        site_map = store.read(SITE_MAP_KEY)
        assert [entry["url"] for entry in site_map] == [
            BASE_URL + "/",
            BASE_URL + "/about",
            BASE_URL + "/about/staff",
            BASE_URL + "/news/gala-recap",
        ]
        assert site_map[2] == {
            "url": BASE_URL + "/about/staff",
            "type": "staff-listing",
            "title": "Our Staff | Truman Heartland Community Foundation",
        }

        nav = store.read(NAV_STRUCTURE_KEY)
        assert [item["label"] for item in nav] == ["Donors", "About Us"]
        assert nav[1]["children"] == [
            {"label": "Staff", "href": BASE_URL + "/about/staff", "children": []},
        ]

        assert store.read(IMAGE_MANIFEST_KEY) == [
            BASE_URL + "/img/hero.jpg",
            BASE_URL + "/uploads/gala.jpg",
        ]
        assert summary.images == 2
        assert summary.by_type == {"page": 2, "staff-listing": 1, "news": 1}

    @pytest.mark.asyncio
    async def test_foreign_and_file_links_not_fetched(self, site, renderer, store):
        await CrawlScheduler(site, renderer, store).run()

        assert "https://facebook.com/thcf" not in renderer.opened
        assert BASE_URL + "/files/report.pdf" not in renderer.opened

    @pytest.mark.asyncio
    async def test_page_budget(self, site, renderer, store):
        summary = await CrawlScheduler(site, renderer, store, max_pages=2).run()

        assert summary.pages_visited == 2
        assert renderer.opened == [BASE_URL, BASE_URL + "/", BASE_URL + "/about"]
        assert len(store.read(SITE_MAP_KEY)) == 2


class TestPacing:
    """Tests for the delay between fetches."""

    @pytest.mark.asyncio
    async def test_delay_after_every_fetch(self, site, renderer, store, monkeypatch):
        """Skipped and failed pages are followed by the same delay."""
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr(asyncio, "sleep", fake_sleep)
        site.crawl.delay_ms = 1500

        summary = await CrawlScheduler(site, renderer, store).run()

        assert summary.pages_visited == 6
        assert delays == [1.5] * 6


class TestCrawlLogging:
    """Tests for per-page log events."""

    @pytest.mark.asyncio
    async def test_outcome_per_page(self, site, renderer, store):
        with capture_logs() as logs:
            await CrawlScheduler(site, renderer, store).run()

        outcomes = [
            (entry["event"], entry["url"], entry["type"])
            for entry in logs
            if entry["event"] in ("page_saved", "page_skipped", "page_failed")
        ]
        assert outcomes == [
            ("page_saved", BASE_URL + "/", "page"),
            ("page_saved", BASE_URL + "/about", "page"),
            ("page_skipped", BASE_URL + "/donors", "page"),
            ("page_saved", BASE_URL + "/about/staff", "staff-listing"),
            ("page_failed", BASE_URL + "/broken", "page"),
            ("page_saved", BASE_URL + "/news/gala-recap", "news"),
        ]

        saved = next(entry for entry in logs if entry["event"] == "page_saved")
        assert saved["key"] == "pages/index"

    @pytest.mark.asyncio
    async def test_start_names_site(self, site, renderer, store):
        with capture_logs() as logs:
            await CrawlScheduler(site, renderer, store).run()

        start = next(entry for entry in logs if entry["event"] == "starting_crawl")
        assert start["site"] == "Truman Heartland Community Foundation"


class TestResume:
    """Tests for resuming over a previous crawl's output."""

    @pytest.mark.asyncio
    async def test_previous_pages_not_refetched(self, site, pages, renderer_factory, store):
        await CrawlScheduler(site, renderer_factory(pages=pages), store, max_pages=2).run()

        second = renderer_factory(pages=pages)
        summary = await CrawlScheduler(site, second, store, resume=True).run()

        crawled = second.opened[1:]
        assert BASE_URL + "/" not in crawled
        assert BASE_URL + "/about" not in crawled
        assert crawled == [BASE_URL + "/donors", BASE_URL + "/about/staff"]
        assert summary.pages_visited == 2

    @pytest.mark.asyncio
    async def test_artifacts_carried_forward(self, site, pages, renderer_factory, store):
        await CrawlScheduler(site, renderer_factory(pages=pages), store, max_pages=2).run()
        await CrawlScheduler(site, renderer_factory(pages=pages), store, resume=True).run()

        urls = [entry["url"] for entry in store.read(SITE_MAP_KEY)]
        assert urls == [BASE_URL + "/", BASE_URL + "/about", BASE_URL + "/about/staff"]
        assert store.read(IMAGE_MANIFEST_KEY) == [BASE_URL + "/img/hero.jpg"]

    @pytest.mark.asyncio
    async def test_resume_without_previous_run(self, site, renderer, store):
        summary = await CrawlScheduler(site, renderer, store, resume=True).run()

        assert summary.pages_visited == 6


class TestSetupFailures:
    """Failures that abort the crawl before the loop starts."""

    @pytest.mark.asyncio
    async def test_unreachable_base_url(self, site, renderer_factory, store):
        renderer = renderer_factory(errors={BASE_URL: ConnectionError("refused")})

        with pytest.raises(CrawlSetupError):
            await CrawlScheduler(site, renderer, store).run()

        assert renderer.opened == [BASE_URL]

    @pytest.mark.asyncio
    async def test_base_url_error_status(self, site, renderer_factory, store):
        renderer = renderer_factory(pages={BASE_URL: (503, "")})

        with pytest.raises(CrawlSetupError, match="503"):
            await CrawlScheduler(site, renderer, store).run()

    @pytest.mark.asyncio
    async def test_output_not_writable(self, site, renderer, tmp_path):
        blocked = tmp_path / "blocked"
        blocked.write_text("not a directory")

        with pytest.raises(CrawlSetupError):
            await CrawlScheduler(site, renderer, FileBlobStore(blocked)).run()

        assert renderer.opened == []
