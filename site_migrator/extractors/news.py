"""
News article extractor.
"""

from site_migrator.core.models import NewsFields
from site_migrator.core.selectors import Selector

from .base import FieldExtractor

DATE_SELECTORS = ["time", ".date", ".post-date", "[datetime]"]
AUTHOR_SELECTORS = [".author", ".byline", '[rel="author"]']
CATEGORY_SELECTORS = [".category", ".tag", ".post-category"]
FEATURED_IMAGE_SELECTORS = ["article img", ".post-content img", ".hero img", "main img"]


class NewsExtractor(FieldExtractor):
    """
    Extractor for single news articles.

    Extracts:
    - Title, body, plain text, images
    - Publication date (datetime attribute preferred)
    - Author byline and category
    - Featured image
    """

    content_selectors = ["article", ".entry-content", ".post-content", "main .content", "main"]

    def extract(self, dom: Selector) -> NewsFields:
        fields = NewsFields()
        self.fill_common(fields, dom)

        fields.date = self._extract_date(dom)
        fields.author = dom.text(AUTHOR_SELECTORS)
        fields.category = dom.text(CATEGORY_SELECTORS)
        fields.featured_image = dom.url(FEATURED_IMAGE_SELECTORS, "src")

        return fields

    def _extract_date(self, dom: Selector) -> str:
        element = dom.first(DATE_SELECTORS)
        if element is None:
            return ""
        return (element.get("datetime") or "").strip() or element.get_text().strip()
