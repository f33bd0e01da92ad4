"""Tests for scholarship field recovery."""

import pytest

from site_migrator.content.fields import (
    after_last_deadline,
    label_of,
    leading_label,
    merge_fields,
    parse_renewable,
    parse_scholarship_fields,
    scrub_trailing_labels,
    split_eligibility,
    split_requirements,
)
from site_migrator.content.cleaner import parse_fragment
from site_migrator.core.models import Renewable, ScholarshipFields


class TestParseScholarshipFields:
    """Tests for parse_scholarship_fields."""

    def test_labelled_body(self):
        """Description, list and inline fields from one body."""
        html = (
            "<p>Intro text.<br><br><strong>Eligibility:</strong></p>"
            "<ul><li>GPA 3.0</li><li>Resident</li></ul>"
            "<p><strong>Amount:</strong> $1,000</p>"
            "<p><strong>Deadline:</strong> March 1</p>"
        )

        fields = parse_scholarship_fields(html)

        assert "Intro text." in fields.description
        assert "Eligibility" not in fields.description
        assert "<br" not in fields.description
        assert fields.eligibility == ["GPA 3.0", "Resident"]
        assert fields.amount == "$1,000"
        assert fields.deadline == "March 1"

    def test_description_stops_at_labelled_block(self):
        html = (
            "<p>Established in 1998.</p>"
            "<p>Honors a local educator.</p>"
            "<p><strong>Amount:</strong> $500</p>"
            "<p>After the fields.</p>"
        )

        fields = parse_scholarship_fields(html)

        assert fields.description == "<p>Established in 1998.</p><p>Honors a local educator.</p>"

    @pytest.mark.parametrize("html,is_renewable,details", [
        ("<p><strong>Renewable:</strong> Yes, up to 3 years.</p>", True, "Yes, up to 3 years."),
        ("<p><strong>Renewable:</strong> No.</p>", False, "No."),
        ("<p>Renewable: yes</p>", True, "yes"),
    ])
    def test_renewable(self, html, is_renewable, details):
        fields = parse_scholarship_fields(html)

        assert fields.renewable == Renewable(is_renewable=is_renewable, details=details)

    def test_value_in_next_paragraph(self):
        html = "<p><strong>Amount:</strong></p><p>$2,500</p>"

        assert parse_scholarship_fields(html).amount == "$2,500"

    def test_next_paragraph_with_other_label(self):
        """A following paragraph that opens with another label is not a value."""
        html = (
            "<p><strong>Amount:</strong></p>"
            "<p><strong>Deadline:</strong> May 1</p>"
        )

        fields = parse_scholarship_fields(html)

        assert fields.amount == ""
        assert fields.deadline == "May 1"

    def test_text_after_last_deadline(self):
        html = "<p><strong>Deadline:</strong> Varies. Deadline: April 15</p>"

        assert parse_scholarship_fields(html).deadline == "April 15"

    def test_other_label_ends_list_search(self):
        """A list after another field's label belongs to that field."""
        html = (
            "<p><strong>Eligibility:</strong></p>"
            "<p><strong>Requirements:</strong></p>"
            "<ol><li>Essay</li><li>Transcript</li></ol>"
        )

        fields = parse_scholarship_fields(html)

        assert fields.eligibility == []
        assert fields.requirements == ["Essay", "Transcript"]

    def test_first_occurrence_wins(self):
        html = (
            "<p><b>Amount:</b> $500</p>"
            "<p><b>Amount:</b> $700</p>"
        )

        assert parse_scholarship_fields(html).amount == "$500"

    def test_leaked_label_scrubbed(self):
        """Text of the next label glued onto a value is removed."""
        html = "<p><strong>Renewable:</strong> Yes, with a GPA of 2.5.Deadline:</p>"

        assert parse_scholarship_fields(html).renewable.details == "Yes, with a GPA of 2.5."

    def test_main_content_region(self):
        """Only the main content region is parsed when present."""
        html = (
            '<section class="banner"><p><strong>Amount:</strong> $9</p></section>'
            '<section class="main-content"><p>About the award.</p>'
            "<p><strong>Amount:</strong> $1</p></section>"
        )

        fields = parse_scholarship_fields(html)

        assert fields.amount == "$1"
        assert fields.description == "<p>About the award.</p>"

    def test_empty_body(self):
        fields = parse_scholarship_fields("")

        assert fields.eligibility == []
        assert fields.amount == ""
        assert fields.renewable == Renewable()
        assert fields.description == ""

    def test_unlabelled_body(self):
        """Without labels the whole body is description."""
        fields = parse_scholarship_fields("<p>Contact us for details.</p>")

        assert fields.description == "<p>Contact us for details.</p>"
        assert fields.amount == ""


class TestLabelHelpers:
    """Tests for label recognition."""

    def test_label_of(self):
        soup = parse_fragment("<strong> Amount: </strong><b>Deadline</b><strong>Note:</strong><em>Amount:</em>")
        strong, b, note, em = soup.find_all(True)

        assert label_of(strong) == "amount"
        assert label_of(b) == "deadline"
        assert label_of(note) is None
        assert label_of(em) is None

    def test_leading_label(self):
        assert leading_label("Deadline: May 1") == "deadline"
        assert leading_label("  APPLY : online") == "apply"
        assert leading_label("Apply online") is None
        assert leading_label("") is None

    @pytest.mark.parametrize("text,own,expected", [
        ("Must maintain a GPA of 2.5.Deadline:", None, "Must maintain a GPA of 2.5."),
        ("Open to seniors.Apply", None, "Open to seniors."),
        ("$1,000 Renewable: Deadline:", "amount", "$1,000"),
        ("Students may apply", None, "Students may apply"),
        ("Deadline:", "deadline", "Deadline:"),
    ])
    def test_scrub_trailing_labels(self, text, own, expected):
        assert scrub_trailing_labels(text, own=own) == expected

    def test_after_last_deadline(self):
        assert after_last_deadline("Yes. Deadline: May 1") == "May 1"
        assert after_last_deadline("March 1") == "March 1"

    def test_parse_renewable(self):
        assert parse_renewable("  Yes ") == Renewable(is_renewable=True, details="Yes")
        assert parse_renewable("") == Renewable(is_renewable=False, details="")


class TestMergeFields:
    """Tests for merging the raw label bag."""

    def test_parsed_values_win(self):
        parsed = ScholarshipFields(amount="$1,000", eligibility=["Senior"])
        merged = merge_fields(parsed, {"amount": "$5", "eligibility": "Junior"})

        assert merged.amount == "$1,000"
        assert merged.eligibility == ["Senior"]

    def test_fills_empty_slots(self):
        raw = {
            "eligibility": "Senior; GPA 3.0;",
            "amount": "$750",
            "renewable": "Yes, 4 years",
            "deadline": "March 1",
            "requirements": "Essay.Transcript.",
        }

        merged = merge_fields(ScholarshipFields(), raw)

        assert merged.eligibility == ["Senior", "GPA 3.0"]
        assert merged.amount == "$750"
        assert merged.renewable == Renewable(is_renewable=True, details="Yes, 4 years")
        assert merged.deadline == "March 1"
        assert merged.requirements == ["Essay", "Transcript"]

    def test_ignores_leaked_raw_values(self):
        """Raw values that open with another label are leaks."""
        raw = {"amount": "Deadline: May 1", "renewable": "Deadline:May 1"}

        merged = merge_fields(ScholarshipFields(), raw)

        assert merged.amount == ""
        assert merged.renewable == Renewable()

    def test_fallback_description(self):
        merged = merge_fields(ScholarshipFields(), None, fallback_description="<p>Body</p>")
        kept = merge_fields(ScholarshipFields(description="<p>Intro</p>"), {}, "<p>Body</p>")

        assert merged.description == "<p>Body</p>"
        assert kept.description == "<p>Intro</p>"

    def test_parsed_not_mutated(self):
        parsed = ScholarshipFields()
        merge_fields(parsed, {"eligibility": "Senior"})

        assert parsed.eligibility == []

    def test_split_helpers(self):
        assert split_eligibility("A; ;B") == ["A", "B"]
        assert split_requirements("Essay.Two letters.") == ["Essay", "Two letters"]
