"""
Tests for body extraction and cleanup.
"""

import pytest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.content import clean_body, extract_body, parse_content


class TestExtractBody:
    """Test choosing between the text and HTML parts."""

    def test_text_returned_verbatim(self):
        """Test plain text is returned unchanged, whitespace included."""
        text = "  Hello https://example.com  \n\n\n\nBye "

        assert extract_body(text, None) == text

    def test_text_preferred_over_html(self):
        """Test the HTML path is not taken when text is present."""
        assert extract_body("Plain", "<p>HTML</p>") == "Plain"

    def test_html_fallback(self):
        """Test HTML is converted when there is no text part."""
        result = extract_body(None, "<p>Hello <b>world</b></p>")

        assert result == "Hello world"

    def test_empty_text_falls_back_to_html(self):
        """Test an empty text part is treated as missing."""
        assert extract_body("", "<p>From HTML</p>") == "From HTML"

    def test_html_links_and_images_removed(self):
        """Test link targets and images never reach the body."""
        html = (
            '<p>Read <a href="https://example.com/track?id=1">the docs</a> now.</p>'
            '<img src="https://cdn.example.com/logo.png" alt="Company logo">'
        )

        result = extract_body(None, html)

        assert "the docs" in result
        assert "href" not in result
        assert "https://" not in result
        assert "Company logo" not in result
        assert "logo.png" not in result

    @pytest.mark.parametrize("text,html", [(None, None), ("", None), (None, ""), ("", "")])
    def test_nothing_usable(self, text, html):
        """Test None is returned when neither part is usable."""
        assert extract_body(text, html) is None


class TestCleanBody:
    """Test artifact removal rules."""

    def test_url_in_brackets_removed(self):
        """Test URL and the empty brackets it leaves are both removed."""
        assert clean_body("Check this [https://example.com/x]") == "Check this"

    def test_urls_removed(self):
        result = clean_body("Visit http://example.com and https://example.org/a?b=c today")

        assert result == "Visit  and  today"

    def test_url_stops_at_closing_bracket(self):
        """Test the URL match ends at a literal ]."""
        assert clean_body("x https://a.example/b]c") == "x ]c"

    def test_markdown_link_target_removed(self):
        assert clean_body("[link](https://example.com/docs) end") == "[link]( end"

    def test_empty_brackets_with_whitespace_removed(self):
        assert clean_body("a [ ] b [\t\n] c") == "a  b  c"

    def test_nested_brackets_removed(self):
        """Test brackets left empty by removing inner brackets are removed too."""
        assert clean_body("x [[https://example.com]] y") == "x  y"

    def test_blank_lines_collapsed(self):
        """Test three or more blank lines between paragraphs collapse to one."""
        body = "First paragraph\n\n\n\nSecond paragraph\n \n\t\n\nThird"

        assert clean_body(body) == "First paragraph\n\nSecond paragraph\n\nThird"

    def test_single_blank_line_kept(self):
        assert clean_body("One\n\nTwo") == "One\n\nTwo"

    def test_trimmed(self):
        assert clean_body("\n\n  Hello  \n") == "Hello"

    def test_only_urls_and_brackets(self):
        """Test a body of only artifacts cleans to an empty string."""
        assert clean_body("[https://a.example] https://b.example\n[ ]") == ""

    @pytest.mark.parametrize("body", [
        "Check this [https://example.com/x]",
        "a\n\n\n\nb",
        "x [[https://example.com]] y",
        "http[]://example.com",
        "  text with   spaces \n \n \n more  ",
        "[ [ ] ]\n\n\n[]",
        "",
    ])
    def test_idempotent(self, body):
        """Test cleaning a cleaned body changes nothing."""
        once = clean_body(body)

        assert clean_body(once) == once


class TestParseContent:
    """Test extract and clean combined."""

    def test_text_cleaned(self):
        assert parse_content("Hi [https://x.example]\n\n\n\nBye", None) == "Hi \n\nBye"

    def test_html_cleaned(self):
        result = parse_content(None, "<p>See https://example.com</p><p>Thanks</p>")

        assert result == "See \n\nThanks"

    def test_none_when_nothing_extractable(self):
        assert parse_content(None, None) is None
