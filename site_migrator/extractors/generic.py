"""
Generic page extractor, used for every type without a dedicated one.
"""

from site_migrator.core.models import GenericFields
from site_migrator.core.selectors import Selector, inner_html, sanitized

from .base import FieldExtractor

SIDEBAR_SELECTORS = ["aside", ".sidebar"]


class GenericPageExtractor(FieldExtractor):
    """Extractor for content pages and listings without cards."""

    content_selectors = ["article", "main .content", ".page-content", "main"]

    def extract(self, dom: Selector) -> GenericFields:
        fields = GenericFields()
        self.fill_common(fields, dom)
        fields.sidebar = inner_html(sanitized(dom.first(SIDEBAR_SELECTORS)))
        return fields
