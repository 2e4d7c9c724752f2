"""
Unit tests for PDF helper functions.

Tests CSS length parsing, filename sanitization and CSS injection.
"""

import pytest

from html2pdf_service.pdf_helpers import (
    format_px,
    inject_css,
    parse_css_length,
    sanitize_filename,
)


class TestParseCssLength:
    """Tests for parse_css_length function."""

    def test_numbers_are_pixels(self):
        assert parse_css_length(800) == 800.0
        assert parse_css_length(12.5) == 12.5

    def test_pixel_strings(self):
        assert parse_css_length("800px") == 800.0
        assert parse_css_length(" 640 ") == 640.0

    def test_absolute_units(self):
        assert parse_css_length("1in") == 96.0
        assert parse_css_length("2.54cm") == pytest.approx(96.0)
        assert parse_css_length("25.4mm") == pytest.approx(96.0)
        assert parse_css_length("72pt") == pytest.approx(96.0)

    def test_units_are_case_insensitive(self):
        assert parse_css_length("1IN") == 96.0

    @pytest.mark.parametrize("value", ["", "px", "-5px", "10em", "abc", "1.2.3in"])
    def test_rejects_invalid_strings(self, value):
        with pytest.raises(ValueError):
            parse_css_length(value)

    def test_rejects_negative_numbers(self):
        with pytest.raises(ValueError):
            parse_css_length(-1)

    def test_rejects_booleans(self):
        with pytest.raises(ValueError):
            parse_css_length(True)


class TestFormatPx:
    """Tests for format_px function."""

    def test_integer_values(self):
        assert format_px(800) == "800px"
        assert format_px(800.0) == "800px"

    def test_rounds_to_two_decimals(self):
        assert format_px(793.7007874) == "793.7px"
        assert format_px(37.795275) == "37.8px"

    def test_zero(self):
        assert format_px(0) == "0px"


class TestSanitizeFilename:
    """Tests for sanitize_filename function."""

    def test_collapses_special_chars(self):
        assert sanitize_filename("Invoice #42 (final)") == "Invoice_42_final.pdf"

    def test_keeps_existing_extension(self):
        assert sanitize_filename("report.pdf") == "report.pdf"
        assert sanitize_filename("Report.PDF") == "Report.pdf"

    def test_preserves_hyphens_and_dots(self):
        assert sanitize_filename("q3-2026.summary") == "q3-2026.summary.pdf"

    def test_strips_path_components(self):
        assert sanitize_filename("../../etc/passwd") == "etc_passwd.pdf"

    def test_strips_leading_and_trailing_dots(self):
        assert sanitize_filename(".hidden") == "hidden.pdf"
        assert sanitize_filename("notes.") == "notes.pdf"
        assert sanitize_filename("..") == "document.pdf"

    def test_removes_quotes(self):
        assert '"' not in sanitize_filename('a"b')

    def test_empty_falls_back(self):
        assert sanitize_filename("") == "document.pdf"
        assert sanitize_filename("###") == "document.pdf"


class TestInjectCss:
    """Tests for inject_css function."""

    def test_no_css_returns_html_unchanged(self):
        assert inject_css("<p>x</p>", "") == "<p>x</p>"

    def test_inserts_before_head_close(self):
        html = "<html><HEAD><title>t</title></HEAD><body>x</body></html>"
        result = inject_css(html, "p { margin: 0; }")
        assert "<title>t</title><style>p { margin: 0; }</style></HEAD>" in result

    def test_wraps_fragment(self):
        result = inject_css("<h1>Hi</h1>", "h1 { color: red; }")
        assert result.startswith("<!DOCTYPE html>")
        assert "<style>h1 { color: red; }</style>" in result
        assert "<h1>Hi</h1>" in result
