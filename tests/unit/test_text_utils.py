"""
Unit tests for the text sanitizers.

Run: pytest tests/unit/test_text_utils.py -v
"""

import pytest

from utils.text_utils import sanitize_file_name, sanitize_key, sanitize_text_field


class TestSanitizeKey:

    @pytest.mark.parametrize("raw, expected", [
        ("Color", "color"),
        ("Size (cm)", "sizecm"),
        ("shelf-life_days", "shelf-life_days"),
        ("Größe", "gre"),
        ("  weight  ", "weight"),
    ])
    def test_keeps_only_safe_characters(self, raw, expected):
        assert sanitize_key(raw) == expected

    def test_all_unsafe_becomes_empty(self):
        assert sanitize_key("!!! ???") == ""

    def test_none_becomes_empty(self):
        assert sanitize_key(None) == ""


class TestSanitizeTextField:

    def test_script_block_removed_with_content(self):
        """Script contents must not survive as text."""
        assert sanitize_text_field("  <script>x</script> foo  ") == "foo"

    def test_tags_stripped_text_kept(self):
        assert sanitize_text_field("<b>Bold</b> and <i>italic</i>") == "Bold and italic"

    def test_style_block_removed_with_content(self):
        assert sanitize_text_field("<style>p { color: red }</style>Blue") == "Blue"

    @pytest.mark.parametrize("raw, expected", [
        ("Size < 10cm", "Size &lt; 10cm"),
        ("Voltage 3<5V range", "Voltage 3&lt;5V range"),
        ("a <= b", "a &lt;= b"),
    ])
    def test_lone_less_than_keeps_following_text(self, raw, expected):
        """A '<' that opens no tag is escaped, not treated as markup."""
        assert sanitize_text_field(raw) == expected

    def test_whitespace_collapsed(self):
        assert sanitize_text_field("a\r\n\tb    c") == "a b c"

    def test_control_characters_removed(self):
        assert sanitize_text_field("ab\x00c\x07d") == "abcd"

    def test_percent_octets_removed(self):
        assert sanitize_text_field("50%20off") == "50off"

    def test_plain_text_unchanged(self):
        assert sanitize_text_field("red") == "red"

    def test_empty_and_none(self):
        assert sanitize_text_field("") == ""
        assert sanitize_text_field(None) == ""


class TestSanitizeFileName:

    def test_spaces_become_dashes(self):
        assert sanitize_file_name("Spec Sheet v2.pdf") == "Spec-Sheet-v2.pdf"

    def test_special_characters_removed(self):
        assert sanitize_file_name("a<b>c?d.pdf") == "abcd.pdf"

    def test_leading_and_trailing_punctuation_trimmed(self):
        assert sanitize_file_name("..-_sheet.pdf_-") == "sheet.pdf"

    def test_html_entities_unescaped_then_cleaned(self):
        assert sanitize_file_name("a&amp;b.pdf") == "ab.pdf"

    def test_empty(self):
        assert sanitize_file_name("") == ""
        assert sanitize_file_name(None) == ""
