"""
Site definition: everything that ties the pipeline to one website.

Values come from site.yml; defaults mirror the production settings.
"""

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit


@dataclass
class PaginatedSection:
    """Listing section whose pages are only reachable by clicking."""
    path: str
    label: str


@dataclass
class CrawlSettings:
    """Crawl pacing and limits."""
    max_pages: int = 600
    delay_ms: int = 1500  # Between every fetch, whatever the outcome
    settle_ms: int = 500  # After navigation, for dynamic content
    timeout_ms: int = 30_000
    pagination_ceiling: int = 20  # Highest page number tried
    pagination_open_wait_ms: int = 1000
    pagination_settle_ms: int = 2000  # After clicking a page number

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CrawlSettings":
        data = data or {}
        defaults = cls()
        return cls(**{
            name: int(data.get(name, getattr(defaults, name)))
            for name in cls.__dataclass_fields__
        })


@dataclass
class AssetSettings:
    """Image transfer settings."""
    concurrency: int = 3
    checkpoint_every: int = 10
    bucket: str = "thcf-assets"
    endpoint_url: str = ""
    key_prefix: str = "images"

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "AssetSettings":
        data = data or {}
        return cls(
            concurrency=int(data.get("concurrency") or 3),
            checkpoint_every=int(data.get("checkpoint_every") or 10),
            bucket=data.get("bucket") or "thcf-assets",
            endpoint_url=data.get("endpoint_url") or "",
            key_prefix=data.get("key_prefix") or "images",
        )


@dataclass
class ContentSettings:
    """Content preparation rules."""
    # (path prefix, page type), first match wins
    page_sections: list[tuple[str, str]] = field(default_factory=list)
    excerpt_stop_lines: list[str] = field(default_factory=list)
    excerpt_length: int = 200

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ContentSettings":
        data = data or {}
        sections = [
            (entry["prefix"], entry["type"])
            for entry in data.get("page_sections", [])
        ]
        return cls(
            page_sections=sections,
            excerpt_stop_lines=list(data.get("excerpt_stop_lines", [])),
            excerpt_length=int(data.get("excerpt_length", 200)),
        )


@dataclass
class SiteConfig:
    """Configuration for the migrated site."""

    base_url: str
    site_name: str = ""
    allowed_hosts: list[str] = field(default_factory=list)
    user_agent: str = ""

    # Discovery
    seeds: list[str] = field(default_factory=list)
    paginated_sections: list[PaginatedSection] = field(default_factory=list)

    # Output locations
    scraped_dir: str = "scraped-data"
    content_dir: str = "src/data"

    crawl: CrawlSettings = field(default_factory=CrawlSettings)
    assets: AssetSettings = field(default_factory=AssetSettings)
    content: ContentSettings = field(default_factory=ContentSettings)

    def __post_init__(self):
        if not self.allowed_hosts:
            host = urlsplit(self.base_url).hostname or ""
            apex = host[4:] if host.startswith("www.") else host
            self.allowed_hosts = [apex, f"www.{apex}"]

    @property
    def site_domain(self) -> str:
        """Apex domain, used to recognize site URLs ("thcf.org")."""
        host = urlsplit(self.base_url).hostname or ""
        return host[4:] if host.startswith("www.") else host

    @classmethod
    def from_dict(cls, data: dict) -> "SiteConfig":
        """
        Create from dictionary (e.g., from YAML).

        Raises:
            ValueError: If required fields missing
        """
        site = data.get("site") or {}
        if not site.get("base_url"):
            raise ValueError("Missing required field: site.base_url")

        output = data.get("output") or {}

        return cls(
            base_url=site["base_url"].rstrip("/"),
            site_name=site.get("name", ""),
            allowed_hosts=list(site.get("allowed_hosts") or []),
            user_agent=site.get("user_agent", ""),
            seeds=list(data.get("seeds") or []),
            paginated_sections=[
                PaginatedSection(path=s["path"], label=s.get("label", s["path"]))
                for s in data.get("paginated_sections") or []
            ],
            scraped_dir=output.get("scraped_dir") or "scraped-data",
            content_dir=output.get("content_dir") or "src/data",
            crawl=CrawlSettings.from_dict(data.get("crawl")),
            assets=AssetSettings.from_dict(data.get("assets")),
            content=ContentSettings.from_dict(data.get("content")),
        )
