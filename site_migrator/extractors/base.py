"""
Base class for field extractors.

Extractors implement the extraction phase - converting a rendered DOM
snapshot into the raw field bag of one content type. They never raise
for missing elements: every field falls back to an empty value.
"""

from abc import ABC, abstractmethod

import structlog

from site_migrator.core.models import ImageRef, PageFields
from site_migrator.core.selectors import Selector, element_text, inner_html, sanitized

logger = structlog.get_logger(__name__)


TITLE_SELECTORS = ["h1"]

# Images inside the content region
CONTENT_IMAGE_SELECTORS = "article img, main img"


class FieldExtractor(ABC):
    """
    Abstract base class for field extractors.

    Each subclass declares its content selector chain and adds the
    fields specific to its content type.
    """

    # Prioritized fallback chain for the primary content region
    content_selectors: list[str] = ["article", "main"]

    def __init__(self):
        self.logger = logger.bind(extractor=self.__class__.__name__)

    @abstractmethod
    def extract(self, dom: Selector) -> PageFields:
        """
        Extract the field bag of a page.

        Args:
            dom: Selector over the rendered page

        Returns:
            Fully defaulted field bag
        """
        pass

    def extract_title(self, dom: Selector) -> str:
        return dom.text(TITLE_SELECTORS)

    def extract_content(self, dom: Selector) -> tuple[str, str]:
        """
        Return (body, body_text) of the primary content region.

        Scripts and styles are dropped from the body HTML.
        """
        content = sanitized(dom.first(self.content_selectors))
        return inner_html(content), element_text(content)

    def extract_images(self, dom: Selector) -> list[ImageRef]:
        """In-content images with absolute src."""
        images = []
        for img in dom.css(CONTENT_IMAGE_SELECTORS).elements:
            src = img.get("src")
            if not src:
                continue
            images.append(ImageRef(src=dom.absolute(src), alt=(img.get("alt") or "").strip()))
        return images

    def fill_common(self, fields: PageFields, dom: Selector) -> PageFields:
        """Populate title, body, body_text and images of a field bag."""
        fields.title = self.extract_title(dom)
        fields.body, fields.body_text = self.extract_content(dom)
        fields.images = self.extract_images(dom)
        return fields

    def get_strategy_name(self) -> str:
        """Return human-readable strategy name."""
        return self.__class__.__name__
