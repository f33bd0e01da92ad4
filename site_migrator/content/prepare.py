"""
Content preparation: raw crawl records -> clean content for the new site.

Reads the persisted partitions of a crawl and writes four documents to
the content store: news, scholarships, pages and nav. The output
depends only on the raw records, so re-running gives identical files.
"""

from typing import Optional

import structlog

from site_migrator.config.site import SiteConfig
from site_migrator.core.models import (
    ContentPage,
    NewsArticle,
    PageMeta,
    Scholarship,
)
from site_migrator.core.storage import BlobStore
from site_migrator.core.urls import last_segment_slug, url_to_path

from .cleaner import clean_news_body, clean_page_body, clean_scholarship_body
from .fields import merge_fields, parse_scholarship_fields
from .normalizer import (
    clean_author,
    date_sort_key,
    extract_category,
    extract_title,
    make_excerpt,
    page_type_for,
)

logger = structlog.get_logger(__name__)


# Raw partitions feeding the pages document
PAGE_PARTITIONS = ["pages", "staff", "board"]

NAV_SOURCE_KEY = "nav-structure"


class ContentPreparer:
    """
    Builds the clean content documents.

    Usage:
        preparer = ContentPreparer(site, FileBlobStore(site.scraped_dir),
                                   FileBlobStore(site.content_dir))
        counts = preparer.run()
    """

    def __init__(self, site: SiteConfig, source: BlobStore, output: BlobStore):
        """
        Initialize preparer.

        Args:
            site: Site definition
            source: Store holding the crawl output
            output: Store receiving the clean documents
        """
        self.site = site
        self.source = source
        self.output = output
        self.domain = site.site_domain

    def run(self) -> dict[str, int]:
        """
        Prepare and write every content document.

        Returns:
            Number of records written per document
        """
        logger.info("preparing_content")

        documents = {
            "news": [a.to_dict() for a in self.prepare_news()],
            "scholarships": [s.to_dict() for s in self.prepare_scholarships()],
            "pages": [p.to_dict() for p in self.prepare_pages()],
            "nav": self.prepare_nav(),
        }

        for key, records in documents.items():
            self.output.write(key, records)

        counts = {key: len(records) for key, records in documents.items()}
        logger.info("content_prepared", **counts)
        return counts

    def read_partition(self, partition: str) -> list[dict]:
        """Load the raw records of a partition, skipping unreadable ones."""
        records = []

        for key in self.source.list_keys(partition):
            try:
                record = self.source.read(key)
            except (ValueError, OSError) as e:
                logger.warning("unparsable_record", key=key, error=str(e))
                continue

            if not isinstance(record, dict) or not record.get("url"):
                logger.warning("invalid_record", key=key)
                continue

            records.append(record)

        logger.debug("partition_loaded", partition=partition, records=len(records))
        return records

    def prepare_news(self) -> list[NewsArticle]:
        """News articles, newest first."""
        settings = self.site.content
        articles = []

        for record in self.read_partition("news"):
            meta = PageMeta.from_dict(record.get("meta"))
            data = record.get("data") or {}
            raw_body = data.get("body") or ""

            title = extract_title(raw_body, meta.title)
            date = data.get("date") or ""
            category = extract_category(raw_body) or data.get("category") or ""

            articles.append(NewsArticle(
                slug=last_segment_slug(record["url"], self.domain),
                title=title,
                date=date,
                author=clean_author(data.get("author") or ""),
                category=category,
                featured_image=data.get("featuredImage") or meta.og_image,
                body=clean_news_body(raw_body),
                excerpt=make_excerpt(
                    data.get("bodyText") or "",
                    skip=(title, date, category),
                    stop_lines=settings.excerpt_stop_lines,
                    length=settings.excerpt_length,
                ),
            ))

        articles.sort(key=lambda a: date_sort_key(a.date), reverse=True)
        logger.info("news_prepared", count=len(articles))
        return articles

    def prepare_scholarships(self) -> list[Scholarship]:
        """Scholarships, alphabetical by name."""
        scholarships = []

        for record in self.read_partition("scholarships"):
            meta = PageMeta.from_dict(record.get("meta"))
            data = record.get("data") or {}
            raw_body = data.get("body") or ""

            parsed = parse_scholarship_fields(raw_body)
            fields = merge_fields(
                parsed,
                data.get("fields"),
                fallback_description=clean_scholarship_body(raw_body),
            )

            scholarships.append(Scholarship(
                slug=last_segment_slug(record["url"], self.domain),
                name=extract_title(raw_body, meta.title),
                fields=fields,
            ))

        scholarships.sort(key=lambda s: (s.name.casefold(), s.slug))
        logger.info("scholarships_prepared", count=len(scholarships))
        return scholarships

    def prepare_pages(self) -> list[ContentPage]:
        """Generic pages (people listings included), ordered by path."""
        pages = []

        for partition in PAGE_PARTITIONS:
            for record in self.read_partition(partition):
                meta = PageMeta.from_dict(record.get("meta"))
                data = record.get("data") or {}
                raw_body = data.get("body") or ""
                path = url_to_path(record["url"], self.domain)

                pages.append(ContentPage(
                    slug=last_segment_slug(record["url"], self.domain),
                    path=path,
                    title=extract_title(raw_body, meta.title),
                    body=clean_page_body(raw_body),
                    page_type=page_type_for(path, self.site.content.page_sections),
                ))

        pages.sort(key=lambda p: (p.path, p.slug))
        logger.info("pages_prepared", count=len(pages))
        return pages

    def prepare_nav(self) -> list[dict]:
        """Navigation tree with site links reduced to paths."""
        if not self.source.exists(NAV_SOURCE_KEY):
            logger.warning("nav_structure_missing")
            return []

        nav = [self._clean_nav_item(item) for item in self.source.read(NAV_SOURCE_KEY) or []]
        logger.info("nav_prepared", items=len(nav))
        return nav

    def _clean_nav_item(self, item: dict) -> dict:
        cleaned = {
            "label": item.get("label") or "",
            "href": url_to_path(item.get("href") or "", self.domain),
        }
        children: Optional[list] = item.get("children")
        if children:
            cleaned["children"] = [self._clean_nav_item(child) for child in children]
        return cleaned
