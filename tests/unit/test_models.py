"""Tests for data models."""

from datetime import datetime, timezone

from site_migrator.core.models import (
    BoardMember,
    ContentPage,
    ContentType,
    DetailFields,
    ImageRef,
    ListingFields,
    NavItem,
    NewsFields,
    PageMeta,
    RawPageRecord,
    Renewable,
    Scholarship,
    ScholarshipFields,
    StaffMember,
)


class TestPageFields:
    """Tests for field bags."""

    def test_defaults_are_empty(self):
        """Every field of a fresh bag is empty, never None."""
        data = NewsFields().to_dict()

        assert data == {
            "title": "",
            "body": "",
            "bodyText": "",
            "images": [],
            "date": "",
            "author": "",
            "category": "",
            "featuredImage": "",
        }

    def test_detail_fields(self):
        fields = DetailFields(title="Smith Scholarship", fields={"amount": "$500"})
        data = fields.to_dict()

        assert data["fields"] == {"amount": "$500"}
        assert data["title"] == "Smith Scholarship"

    def test_listing_members(self):
        """Listing bags serialize their members."""
        fields = ListingFields(
            members=[StaffMember(name="Jane Doe", job_title="President")],
        )
        data = fields.to_dict()

        assert data["members"] == [{
            "name": "Jane Doe",
            "jobTitle": "President",
            "photo": "",
            "email": "",
            "phone": "",
        }]
        assert data["degraded"] is False

    def test_board_member(self):
        assert BoardMember(name="John Roe", role="Chair").to_dict() == {
            "name": "John Roe",
            "role": "Chair",
            "photo": "",
        }


class TestRawPageRecord:
    """Tests for RawPageRecord."""

    def test_to_dict(self):
        """Persisted shape uses the record field names."""
        record = RawPageRecord(
            url="https://www.thcf.org/news/gala-recap",
            content_type=ContentType.NEWS,
            meta=PageMeta(title="Gala Recap", og_image="https://www.thcf.org/og.jpg"),
            extracted_data=NewsFields(title="Gala Recap", images=[ImageRef(src="https://www.thcf.org/a.jpg")]),
            discovered_links=["https://www.thcf.org/about"],
            discovered_images=["https://www.thcf.org/a.jpg"],
            scraped_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        )

        data = record.to_dict()

        assert data["url"] == "https://www.thcf.org/news/gala-recap"
        assert data["type"] == "news"
        assert data["meta"] == {"title": "Gala Recap", "description": "", "ogImage": "https://www.thcf.org/og.jpg"}
        assert data["data"]["images"] == [{"src": "https://www.thcf.org/a.jpg", "alt": ""}]
        assert data["links"] == ["https://www.thcf.org/about"]
        assert data["images"] == ["https://www.thcf.org/a.jpg"]
        assert data["scrapedAt"] == "2024-05-01T12:00:00+00:00"

    def test_site_map_entry(self):
        record = RawPageRecord(
            url="https://www.thcf.org/about",
            content_type=ContentType.PAGE,
            meta=PageMeta(title="About Us"),
            extracted_data=DetailFields(),
        )

        assert record.site_map_entry() == {
            "url": "https://www.thcf.org/about",
            "type": "page",
            "title": "About Us",
        }


class TestPageMeta:
    """Tests for PageMeta."""

    def test_round_trip(self):
        meta = PageMeta(title="T", description="D", og_image="O")
        assert PageMeta.from_dict(meta.to_dict()) == meta

    def test_from_missing(self):
        assert PageMeta.from_dict(None) == PageMeta()


class TestNavItem:
    """Tests for NavItem."""

    def test_nested(self):
        item = NavItem(
            label="About",
            href="https://www.thcf.org/about",
            children=[NavItem(label="Staff", href="https://www.thcf.org/about/staff")],
        )

        data = item.to_dict()

        assert data["children"][0]["label"] == "Staff"
        assert data["children"][0]["children"] == []
        assert NavItem.from_dict(data) == item


class TestCleanRecords:
    """Tests for clean content records."""

    def test_scholarship_flattens_fields(self):
        scholarship = Scholarship(
            slug="smith",
            name="Smith Scholarship",
            fields=ScholarshipFields(
                eligibility=["Senior"],
                amount="$1,000",
                renewable=Renewable(is_renewable=True, details="Yes"),
            ),
        )

        data = scholarship.to_dict()

        assert data["slug"] == "smith"
        assert data["name"] == "Smith Scholarship"
        assert data["eligibility"] == ["Senior"]
        assert data["renewable"] == {"isRenewable": True, "details": "Yes"}
        assert data["requirements"] == []
        assert data["description"] == ""

    def test_content_page_type_key(self):
        page = ContentPage(slug="gala", path="/gala", title="Gala", page_type="gala")
        assert page.to_dict()["type"] == "gala"
