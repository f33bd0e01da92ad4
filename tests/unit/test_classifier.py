"""Tests for content classification."""

import pytest

from site_migrator.core.classifier import PAGE_RULES, classify_page, output_partition
from site_migrator.core.models import ContentType


class TestClassifyPage:
    """Tests for classify_page."""

    @pytest.mark.parametrize("path,expected", [
        ("/news/my-article", ContentType.NEWS),
        ("/about/news", ContentType.NEWS_LISTING),
        ("/about/news?page=3", ContentType.NEWS_LISTING),
        ("/scholarships/smith-memorial", ContentType.SCHOLARSHIP),
        ("/students/scholarships/scholarship-directory", ContentType.SCHOLARSHIP_LISTING),
        ("/students/scholarships", ContentType.PAGE),
        ("/students/youth-advisory-council", ContentType.PAGE),
        ("/grants/community-grant", ContentType.GRANT),
        ("/grant-seekers/past-recipients", ContentType.GRANT_LISTING),
        ("/about/staff", ContentType.STAFF_LISTING),
        ("/about/board", ContentType.BOARD_LISTING),
        ("/", ContentType.PAGE),
        ("/donors/make-a-gift", ContentType.PAGE),
    ])
    def test_classification(self, path, expected):
        """Each path maps to its content type."""
        assert classify_page(f"https://www.thcf.org{path}") == expected

    def test_specific_rule_wins(self):
        """An article under the news section is not a listing."""
        assert classify_page("https://www.thcf.org/news/my-article") == ContentType.NEWS
        assert classify_page("https://www.thcf.org/about/news") == ContentType.NEWS_LISTING

    def test_directory_precedes_scholarships_section(self):
        """The directory rule sits above the broader scholarships rule."""
        assert classify_page("https://www.thcf.org/students/scholarships/scholarship-directory/") == \
            ContentType.SCHOLARSHIP_LISTING

    def test_nested_news_path_is_not_article(self):
        """Only one segment below /news/ is an article."""
        assert classify_page("https://www.thcf.org/news/2024/recap") == ContentType.PAGE

    def test_staff_rule_is_exact(self):
        """Pages below /about/staff are generic pages."""
        assert classify_page("https://www.thcf.org/about/staff/jane-doe") == ContentType.PAGE

    def test_trailing_slash_ignored(self):
        assert classify_page("https://www.thcf.org/about/board/") == ContentType.BOARD_LISTING

    def test_rule_order(self):
        """The rule list keeps articles ahead of listings."""
        tags = [content_type for _, content_type in PAGE_RULES]
        assert tags.index(ContentType.NEWS) < tags.index(ContentType.NEWS_LISTING)
        assert tags.index(ContentType.SCHOLARSHIP_LISTING) < tags.index(ContentType.PAGE)


class TestOutputPartition:
    """Tests for output_partition."""

    @pytest.mark.parametrize("content_type,partition", [
        (ContentType.NEWS, "news"),
        (ContentType.SCHOLARSHIP, "scholarships"),
        (ContentType.GRANT, "grants"),
        (ContentType.STAFF_LISTING, "staff"),
        (ContentType.BOARD_LISTING, "board"),
        (ContentType.NEWS_LISTING, "pages"),
        (ContentType.SCHOLARSHIP_LISTING, "pages"),
        (ContentType.PAGE, "pages"),
    ])
    def test_partitions(self, content_type, partition):
        assert output_partition(content_type) == partition
