"""
Detail page extractor for scholarships and grants.

Besides the content region it captures a raw label bag: every
label-like element paired with the text that follows it. The bag is a
low-priority source, consulted only when the structured field parser
finds nothing for a slot.
"""

from bs4 import Tag

from site_migrator.core.models import DetailFields
from site_migrator.core.selectors import Selector

from .base import FieldExtractor

LABEL_SELECTORS = "dt, th, strong, b, label, .field-label"


def _next_element_text(element: Tag) -> str:
    sibling = element.find_next_sibling()
    return sibling.get_text().strip() if sibling is not None else ""


def label_bag(dom: Selector) -> dict[str, str]:
    """
    Collect {label: value} pairs from label-like elements.

    Labels are lowercased with one trailing colon removed. The value is
    the text of the next element sibling, else of the parent's next
    element sibling. Later pairs overwrite earlier ones with the same label.
    """
    fields = {}

    for element in dom.css(LABEL_SELECTORS).elements:
        label = element.get_text().strip().lower()
        if label.endswith(":"):
            label = label[:-1]

        value = _next_element_text(element)
        if not value and isinstance(element.parent, Tag):
            value = _next_element_text(element.parent)

        if label and value:
            fields[label] = value

    return fields


class DetailExtractor(FieldExtractor):
    """Extractor for scholarship and grant detail pages."""

    content_selectors = ["article", "main .content", "main"]

    def extract(self, dom: Selector) -> DetailFields:
        fields = DetailFields()
        self.fill_common(fields, dom)
        fields.fields = label_bag(dom)
        return fields
