"""
People listing extractors (staff, board).

Listings enumerate repeated card elements and emit one member per card.
When no card yields a member the page is kept whole instead (degraded
mode), so nothing is lost for manual migration.
"""

from abc import abstractmethod
from typing import Optional

from site_migrator.core.models import BoardMember, ListingFields, StaffMember
from site_migrator.core.selectors import Selector, inner_html

from .base import FieldExtractor

NAME_SELECTORS = ["h2, h3, h4, .name"]
JOB_TITLE_SELECTORS = [".title, .position, .role, p"]
PHOTO_SELECTORS = ["img"]
EMAIL_SELECTORS = ['a[href^="mailto:"]']
PHONE_SELECTORS = ['a[href^="tel:"]']

# Containers for the degraded-mode body
PAGE_SELECTORS = ["main", "body"]


class ListingExtractor(FieldExtractor):
    """
    Base extractor for card-based listings.

    Subclasses set card_selector and build members from single cards.
    """

    card_selector: str = ".card"
    content_selectors = ["main"]

    def extract(self, dom: Selector) -> ListingFields:
        fields = ListingFields()
        self.fill_common(fields, dom)

        seen = set()
        for card in dom.css(self.card_selector).elements:
            member = self.extract_member(dom.scoped(card))
            if member is None:
                continue
            key = tuple(member.to_dict().values())
            if key in seen:
                continue
            seen.add(key)
            fields.members.append(member)

        if not fields.members:
            fields.degraded = True
            fields.body = inner_html(dom.first(PAGE_SELECTORS))
            self.logger.warning("listing_degraded", title=fields.title)

        return fields

    @abstractmethod
    def extract_member(self, card: Selector) -> Optional[object]:
        """Build a member from one card, or None if it has no name."""


class StaffListingExtractor(ListingExtractor):
    """Extractor for the staff directory."""

    card_selector = '.staff-card, .team-member, .card, [class*="staff"], [class*="team"]'

    def extract_member(self, card: Selector) -> Optional[StaffMember]:
        name = card.text(NAME_SELECTORS)
        if not name:
            return None

        return StaffMember(
            name=name,
            job_title=card.text(JOB_TITLE_SELECTORS),
            photo=card.url(PHOTO_SELECTORS, "src"),
            email=card.text(EMAIL_SELECTORS),
            phone=card.text(PHONE_SELECTORS),
        )


class BoardListingExtractor(ListingExtractor):
    """Extractor for the board of directors."""

    card_selector = '.board-card, .team-member, .card, [class*="board"], [class*="director"]'

    def extract_member(self, card: Selector) -> Optional[BoardMember]:
        name = card.text(NAME_SELECTORS)
        if not name:
            return None

        return BoardMember(
            name=name,
            role=card.text(JOB_TITLE_SELECTORS),
            photo=card.url(PHOTO_SELECTORS, "src"),
        )
