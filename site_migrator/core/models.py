"""
Data models for the site migrator.

Raw records are what the crawler persists per page; clean records are
what the content preparation step derives from them for the new site.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class ContentType(str, Enum):
    """Content type tag assigned to a crawled URL."""
    NEWS = "news"
    NEWS_LISTING = "news-listing"
    SCHOLARSHIP = "scholarship"
    SCHOLARSHIP_LISTING = "scholarship-listing"
    GRANT = "grant"
    GRANT_LISTING = "grant-listing"
    STAFF_LISTING = "staff-listing"
    BOARD_LISTING = "board-listing"
    PAGE = "page"


class CrawlOutcome(str, Enum):
    """Terminal state of a visited URL."""
    SUCCESS = "success"  # Record persisted, links harvested
    SKIPPED = "skipped"  # HTTP status >= 400 or no response
    ERROR = "error"  # Fetch or extraction raised


@dataclass
class PageMeta:
    """Document-level metadata of a rendered page."""
    title: str = ""
    description: str = ""
    og_image: str = ""

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "ogImage": self.og_image,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "PageMeta":
        data = data or {}
        return cls(
            title=data.get("title") or "",
            description=data.get("description") or "",
            og_image=data.get("ogImage") or "",
        )


@dataclass
class ImageRef:
    """Image found inside the primary content region."""
    src: str
    alt: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PageFields:
    """
    Fields every extractor produces.

    Subclasses add the type-specific attributes. Absent elements are
    represented by empty values, never by None.
    """
    title: str = ""
    body: str = ""
    body_text: str = ""
    images: list[ImageRef] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "body": self.body,
            "bodyText": self.body_text,
            "images": [img.to_dict() for img in self.images],
        }


@dataclass
class NewsFields(PageFields):
    """Raw fields of a single news article."""
    date: str = ""
    author: str = ""
    category: str = ""
    featured_image: str = ""

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "date": self.date,
            "author": self.author,
            "category": self.category,
            "featuredImage": self.featured_image,
        }


@dataclass
class DetailFields(PageFields):
    """Raw fields of a scholarship or grant detail page."""
    fields: dict = field(default_factory=dict)  # label -> value

    def to_dict(self) -> dict:
        return {**super().to_dict(), "fields": dict(self.fields)}


@dataclass
class StaffMember:
    """One staff card."""
    name: str
    job_title: str = ""
    photo: str = ""
    email: str = ""
    phone: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "jobTitle": self.job_title,
            "photo": self.photo,
            "email": self.email,
            "phone": self.phone,
        }


@dataclass
class BoardMember:
    """One board card."""
    name: str
    role: str = ""
    photo: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ListingFields(PageFields):
    """
    Raw fields of a people listing (staff or board).

    degraded is set when no card matched and body holds the whole page.
    """
    members: list = field(default_factory=list)
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "members": [m.to_dict() for m in self.members],
            "degraded": self.degraded,
        }


@dataclass
class GenericFields(PageFields):
    """Raw fields of any other page."""
    sidebar: str = ""

    def to_dict(self) -> dict:
        return {**super().to_dict(), "sidebar": self.sidebar}


@dataclass
class NavItem:
    """Node of the primary navigation tree (depth <= 2)."""
    label: str
    href: str = ""
    children: list["NavItem"] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "href": self.href,
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NavItem":
        return cls(
            label=data.get("label") or "",
            href=data.get("href") or "",
            children=[cls.from_dict(c) for c in data.get("children") or []],
        )


@dataclass
class RawPageRecord:
    """
    Output of one page's fetch + extract step.

    Written once per successfully fetched page and never modified.
    """
    url: str
    content_type: ContentType
    meta: PageMeta
    extracted_data: PageFields
    discovered_links: list[str] = field(default_factory=list)
    discovered_images: list[str] = field(default_factory=list)
    scraped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape."""
        return {
            "url": self.url,
            "type": self.content_type.value,
            "meta": self.meta.to_dict(),
            "data": self.extracted_data.to_dict(),
            "images": list(self.discovered_images),
            "links": list(self.discovered_links),
            "scrapedAt": self.scraped_at.isoformat(),
        }

    def site_map_entry(self) -> dict:
        return {
            "url": self.url,
            "type": self.content_type.value,
            "title": self.meta.title,
        }


@dataclass
class Renewable:
    """Renewability of a scholarship."""
    is_renewable: bool = False
    details: str = ""

    def to_dict(self) -> dict:
        return {"isRenewable": self.is_renewable, "details": self.details}


@dataclass
class ScholarshipFields:
    """Structured fields recovered from a scholarship body."""
    eligibility: list[str] = field(default_factory=list)
    amount: str = ""
    renewable: Renewable = field(default_factory=Renewable)
    deadline: str = ""
    requirements: list[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "eligibility": list(self.eligibility),
            "amount": self.amount,
            "renewable": self.renewable.to_dict(),
            "deadline": self.deadline,
            "requirements": list(self.requirements),
            "description": self.description,
        }


@dataclass
class NewsArticle:
    """Clean news record."""
    slug: str
    title: str
    date: str = ""
    author: str = ""
    category: str = ""
    featured_image: str = ""
    body: str = ""
    excerpt: str = ""

    def to_dict(self) -> dict:
        return {
            "slug": self.slug,
            "title": self.title,
            "date": self.date,
            "author": self.author,
            "category": self.category,
            "featuredImage": self.featured_image,
            "body": self.body,
            "excerpt": self.excerpt,
        }


@dataclass
class Scholarship:
    """Clean scholarship record."""
    slug: str
    name: str
    fields: ScholarshipFields = field(default_factory=ScholarshipFields)

    def to_dict(self) -> dict:
        return {"slug": self.slug, "name": self.name, **self.fields.to_dict()}


@dataclass
class ContentPage:
    """Clean generic page record."""
    slug: str
    path: str
    title: str
    body: str = ""
    page_type: str = "page"

    def to_dict(self) -> dict:
        return {
            "slug": self.slug,
            "path": self.path,
            "title": self.title,
            "body": self.body,
            "type": self.page_type,
        }
