"""
Structured field recovery for scholarship bodies.

Scholarship pages mark their fields only with emphasized labels
("<strong>Eligibility:</strong>") followed by a list, the rest of the
paragraph or the next paragraph. There is no consistent container
structure, so recovery works label by label:

1. Description - top-level blocks before the first labelled block,
   plus any prose preceding the label inside that block.
2. Fields - every label occurrence is located, then a per-label
   strategy recovers its value (following list or inline text). The
   first occurrence that yields a value wins.
3. Merge - values from the extractor's raw label bag fill the slots
   the parser left empty.

Nothing here raises on odd markup; unrecoverable fields stay empty.
"""

import copy
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from bs4 import Comment, NavigableString, Tag

import structlog

from site_migrator.core.models import Renewable, ScholarshipFields
from site_migrator.core.selectors import collapse_whitespace

from .cleaner import PRIMARY_REGION, parse_fragment

logger = structlog.get_logger(__name__)


LABELS = ("eligibility", "amount", "renewable", "deadline", "requirements", "apply")
EMPHASIS_TAGS = ["strong", "b"]
LIST_TAGS = ["ul", "ol"]

_LABEL_ALTERNATION = "|".join(LABELS)

# Emphasis whose whole text is a label, e.g. "Amount:" or "amount"
LABEL_TEXT = re.compile(rf"^\s*({_LABEL_ALTERNATION})\s*:?\s*$", re.IGNORECASE)

# Text opening with a label and its colon
LEADING_LABEL = re.compile(rf"^\s*({_LABEL_ALTERNATION})\s*:", re.IGNORECASE)

# Elements kept as-is when left empty by truncation
VOID_TAGS = {"img", "hr", "iframe", "video", "audio", "embed", "input", "source"}


@dataclass
class LabelMarker:
    """
    One label occurrence.

    node is the emphasis element, or for a plain "Label: value"
    paragraph the paragraph itself (inline=True).
    """
    label: str
    node: Tag
    inline: bool = False


def label_of(element) -> Optional[str]:
    """Label named by an emphasis element, or None."""
    if not isinstance(element, Tag) or element.name not in EMPHASIS_TAGS:
        return None
    match = LABEL_TEXT.match(element.get_text())
    return match.group(1).lower() if match else None


def leading_label(text: str) -> Optional[str]:
    """Label the text starts with ("Deadline: May 1" -> "deadline")."""
    match = LEADING_LABEL.match(text or "")
    return match.group(1).lower() if match else None


def carried_label(element) -> Optional[str]:
    """Label an element carries: leading "Label:" text or a label emphasis."""
    if not isinstance(element, Tag):
        return None

    label = leading_label(element.get_text()) or label_of(element)
    if label:
        return label

    for emphasis in element.find_all(EMPHASIS_TAGS):
        label = label_of(emphasis)
        if label:
            return label

    return None


def starts_with_label(element) -> Optional[str]:
    """Label at the very start of an element, by text or by emphasis."""
    if not isinstance(element, Tag):
        return None

    label = leading_label(element.get_text())
    if label:
        return label

    for child in element.children:
        if isinstance(child, NavigableString) and not child.strip():
            continue
        return label_of(child)

    return None


@lru_cache(maxsize=None)
def _trailing_label_pattern(own: Optional[str]) -> re.Pattern:
    others = "|".join(label for label in LABELS if label != own)
    # A leaked label either has its colon or is glued to the previous sentence
    return re.compile(
        rf"(?:\s*\b(?:{others})\s*:|(?<=[.!?;,)])(?:{others}))\s*$",
        re.IGNORECASE,
    )


def scrub_trailing_labels(text: str, own: Optional[str] = None) -> str:
    """
    Remove labels of other fields leaked onto the end of a value.

    "Must maintain a GPA of 2.5.Deadline:" -> "Must maintain a GPA of 2.5."
    """
    pattern = _trailing_label_pattern(own)
    text = (text or "").strip()

    while True:
        scrubbed = pattern.sub("", text).strip()
        if scrubbed == text:
            return text
        text = scrubbed


# ---------------------------------------------------------------------------
# Description
# ---------------------------------------------------------------------------


def _trim_trailing(element: Tag) -> None:
    """Drop trailing <br>, whitespace and emptied wrappers."""
    while element.contents:
        last = element.contents[-1]

        if isinstance(last, Comment):
            last.extract()
        elif isinstance(last, NavigableString):
            stripped = last.rstrip()
            if stripped:
                last.replace_with(NavigableString(stripped))
                return
            last.extract()
        elif last.name == "br":
            last.extract()
        elif last.name in VOID_TAGS:
            return
        else:
            _trim_trailing(last)
            if last.contents:
                return
            last.extract()


def _prose_before_label(block: Tag) -> str:
    """
    HTML of the block truncated at its first label emphasis.

    "" when the label opens the block.
    """
    if label_of(block):
        return ""

    clone = copy.copy(block)
    marker = next((e for e in clone.find_all(EMPHASIS_TAGS) if label_of(e)), None)
    if marker is None:
        return ""

    node = marker
    while node is not clone:
        for sibling in list(node.next_siblings):
            sibling.extract()
        node = node.parent
    marker.extract()

    _trim_trailing(clone)
    if not clone.get_text().strip() and not clone.find(list(VOID_TAGS)):
        return ""

    return str(clone)


def extract_description(root: Tag) -> str:
    """Top-level blocks preceding the first labelled block."""
    parts = []

    for block in root.find_all(True, recursive=False):
        if carried_label(block):
            prose = _prose_before_label(block)
            if prose:
                parts.append(prose)
            break

        if block.name == "script":
            continue

        parts.append(str(block))

    return "".join(parts).strip()


# ---------------------------------------------------------------------------
# Field strategies
# ---------------------------------------------------------------------------


def find_markers(root: Tag) -> list[LabelMarker]:
    """
    Every label occurrence in document order.

    Emphasized labels are the norm; paragraphs written as plain
    "Label: value" text count too.
    """
    markers = []

    for element in root.find_all(EMPHASIS_TAGS + ["p"]):
        if element.name == "p":
            if any(label_of(e) for e in element.find_all(EMPHASIS_TAGS)):
                continue
            label = leading_label(element.get_text())
            if label:
                markers.append(LabelMarker(label, element, inline=True))
        else:
            label = label_of(element)
            if label:
                markers.append(LabelMarker(label, element))

    return markers


def list_items(list_element: Tag) -> list[str]:
    items = (li.get_text().strip() for li in list_element.find_all("li"))
    return [item for item in items if item]


def following_list(marker: LabelMarker, root: Tag) -> list[str]:
    """
    Items of the nearest list after the label.

    Siblings of the label are searched first, then the siblings of each
    ancestor up to root. A sibling carrying another label ends the search.
    """
    node = marker.node
    while node is not None and node is not root:
        for sibling in node.find_next_siblings(True):
            if sibling.name in LIST_TAGS:
                return list_items(sibling)
            other = carried_label(sibling)
            if other and other != marker.label:
                return []
        node = node.parent
    return []


def _container(marker: LabelMarker, root: Tag) -> Tag:
    if marker.inline:
        return marker.node
    paragraph = marker.node.find_parent("p")
    if paragraph is not None and (paragraph is root or _inside(paragraph, root)):
        return paragraph
    return marker.node.parent or root


def _inside(element: Tag, container: Tag) -> bool:
    return any(parent is container for parent in element.parents)


def _contains_label(element: Tag) -> bool:
    return bool(label_of(element)) or any(label_of(e) for e in element.find_all(EMPHASIS_TAGS))


def trailing_text(marker: LabelMarker, container: Tag) -> str:
    """Text after the label in its paragraph, up to the next label emphasis."""
    if marker.inline:
        text = collapse_whitespace(container.get_text())
        return LEADING_LABEL.sub("", text, count=1).strip()

    parts = []
    node = marker.node
    while node is not None and node is not container:
        for sibling in node.next_siblings:
            if isinstance(sibling, Comment):
                continue
            if isinstance(sibling, Tag):
                if _contains_label(sibling):
                    return collapse_whitespace("".join(parts))
                parts.append(sibling.get_text())
            else:
                parts.append(str(sibling))
        node = node.parent

    return collapse_whitespace("".join(parts))


def inline_value(marker: LabelMarker, root: Tag) -> str:
    """
    Value written after the label.

    Same paragraph first; when that is empty or opens with another
    label, the next paragraph unless it opens with another label.
    """
    container = _container(marker, root)
    text = trailing_text(marker, container)

    other = leading_label(text)
    if text and not (other and other != marker.label):
        return text

    next_paragraph = container.find_next_sibling("p")
    if next_paragraph is None:
        return ""

    other = starts_with_label(next_paragraph)
    if other and other != marker.label:
        return ""

    return collapse_whitespace(next_paragraph.get_text())


def after_last_deadline(text: str) -> str:
    """Text after the last "Deadline:" ("Yes. Deadline: May 1" -> "May 1")."""
    index = text.lower().rfind("deadline:")
    if index == -1:
        return text
    return text[index + len("deadline:"):].strip()


def recover_list(marker: LabelMarker, root: Tag) -> list[str]:
    return following_list(marker, root)


def recover_amount(marker: LabelMarker, root: Tag) -> str:
    return scrub_trailing_labels(inline_value(marker, root), own="amount")


def recover_renewable(marker: LabelMarker, root: Tag) -> Renewable:
    details = scrub_trailing_labels(inline_value(marker, root), own="renewable")
    return parse_renewable(details)


def recover_deadline(marker: LabelMarker, root: Tag) -> str:
    text = after_last_deadline(inline_value(marker, root))
    return scrub_trailing_labels(text, own="deadline")


def parse_renewable(details: str) -> Renewable:
    """Renewable iff the text opens with "yes"."""
    details = (details or "").strip()
    return Renewable(is_renewable=details.lower().startswith("yes"), details=details)


# label -> (field attribute, strategy)
STRATEGIES: dict[str, tuple[str, Callable]] = {
    "eligibility": ("eligibility", recover_list),
    "requirements": ("requirements", recover_list),
    "amount": ("amount", recover_amount),
    "renewable": ("renewable", recover_renewable),
    "deadline": ("deadline", recover_deadline),
}


def _has_value(value) -> bool:
    if isinstance(value, Renewable):
        return bool(value.details)
    return bool(value)


def parse_scholarship_fields(html: str) -> ScholarshipFields:
    """
    Recover structured fields from a scholarship body.

    Args:
        html: Raw or cleaned body HTML

    Returns:
        ScholarshipFields, empty where nothing was recovered
    """
    result = ScholarshipFields()
    if not html:
        return result

    soup = parse_fragment(html)
    root = soup.select_one(PRIMARY_REGION) or soup

    result.description = extract_description(root)

    for marker in find_markers(root):
        if marker.label not in STRATEGIES:
            continue

        attribute, strategy = STRATEGIES[marker.label]
        if _has_value(getattr(result, attribute)):
            continue

        value = strategy(marker, root)
        if _has_value(value):
            setattr(result, attribute, value)

    return result


# ---------------------------------------------------------------------------
# Merge with the raw label bag
# ---------------------------------------------------------------------------


def split_eligibility(text: str) -> list[str]:
    parts = (scrub_trailing_labels(part, own="eligibility") for part in text.split(";"))
    return [part for part in parts if part]


def split_requirements(text: str) -> list[str]:
    """Split run-together sentences ("Essay.Transcript." -> ["Essay", "Transcript"])."""
    parts = []
    for part in re.split(r"\.(?=[A-Z])", text):
        part = scrub_trailing_labels(part, own="requirements")
        if part.endswith("."):
            part = part[:-1].strip()
        if part:
            parts.append(part)
    return parts


def merge_fields(
    parsed: ScholarshipFields,
    raw: Optional[dict],
    fallback_description: str = "",
) -> ScholarshipFields:
    """
    Fill empty parsed slots from the raw label bag.

    Parsed values always win. Raw amount and renewable values that open
    with another field's label are leaks and are ignored.
    """
    raw = raw or {}
    merged = ScholarshipFields(
        eligibility=list(parsed.eligibility),
        amount=parsed.amount,
        renewable=Renewable(parsed.renewable.is_renewable, parsed.renewable.details),
        deadline=parsed.deadline,
        requirements=list(parsed.requirements),
        description=parsed.description,
    )

    raw_eligibility = str(raw.get("eligibility") or "")
    if not merged.eligibility and raw_eligibility:
        merged.eligibility = split_eligibility(raw_eligibility)

    raw_amount = str(raw.get("amount") or "")
    if not merged.amount and raw_amount and not leading_label(raw_amount):
        merged.amount = scrub_trailing_labels(raw_amount, own="amount")

    raw_renewable = str(raw.get("renewable") or "")
    if not merged.renewable.details and raw_renewable and not leading_label(raw_renewable):
        merged.renewable = parse_renewable(scrub_trailing_labels(raw_renewable, own="renewable"))

    raw_deadline = str(raw.get("deadline") or "")
    if not merged.deadline and raw_deadline:
        merged.deadline = scrub_trailing_labels(raw_deadline, own="deadline")

    raw_requirements = str(raw.get("requirements") or "")
    if not merged.requirements and raw_requirements:
        merged.requirements = split_requirements(raw_requirements)

    if not merged.description:
        merged.description = fallback_description

    return merged
