"""Unit tests for the placeholder scanner."""

import pytest

from smartdoc.interfaces.errors import MalformedPackageError
from smartdoc.strategies.template_engine import PackageCodec, PlaceholderScanner

from docx_helpers import build_docx, document_xml, paragraph


class TestPlaceholderScanner:
    """Test suite for PlaceholderScanner."""

    @pytest.fixture
    def scanner(self):
        return PlaceholderScanner()

    # =========================================================================
    # Pattern Matching Tests
    # =========================================================================

    def test_scan_invoice_scenario(self, scanner):
        assert scanner.scan("Hello {name}, invoice {invoice_id}.") == ("name", "invoice_id")

    def test_duplicates_collapse_first_occurrence_wins(self, scanner):
        """Test that order follows the first occurrence of each identifier."""
        text = "{b} {a} {b} {c} {a}"
        assert scanner.scan(text) == ("b", "a", "c")

    def test_no_placeholders(self, scanner):
        assert scanner.scan("<w:t>Plain text only</w:t>") == ()

    def test_identifier_character_set(self, scanner):
        """Test that only [A-Za-z0-9_] identifiers are recognised."""
        text = "{Valid_1} {2nd} {with-dash} {with space} {} {dot.name} {ÜMLAUT}"
        assert scanner.scan(text) == ("Valid_1", "2nd")

    def test_nested_braces_match_innermost(self, scanner):
        assert scanner.scan("{{name}}") == ("name",)

    def test_scan_spans_xml_markup(self, scanner):
        """Test that placeholders are found anywhere in the body text."""
        body = document_xml(
            paragraph("Dear {first_name}"),
            paragraph("Ref: {ref}", bold=True),
        )
        assert scanner.scan(body) == ("first_name", "ref")

    def test_split_run_placeholder_not_detected(self, scanner):
        """Test the documented caveat: a placeholder split across runs is missed."""
        body = document_xml(
            '<w:p><w:r><w:t>{na</w:t></w:r><w:r><w:rPr><w:b/></w:rPr>'
            "<w:t>me}</w:t></w:r></w:p>"
        )
        assert scanner.scan(body) == ()

    def test_scan_is_idempotent(self, scanner):
        text = "{z} {y} {x} {y}"
        results = {scanner.scan(text) for _ in range(5)}
        assert results == {("z", "y", "x")}

    # =========================================================================
    # Package Tests
    # =========================================================================

    def test_scan_bytes(self, scanner, invoice_docx):
        assert scanner.scan_bytes(invoice_docx) == ("name", "invoice_id", "due_date")

    def test_scan_bytes_repeatable(self, scanner, invoice_docx):
        assert scanner.scan_bytes(invoice_docx) == scanner.scan_bytes(invoice_docx)

    def test_scan_package(self, scanner, invoice_docx):
        package = PackageCodec().open(invoice_docx)
        assert scanner.scan_package(package) == ("name", "invoice_id", "due_date")

    def test_scan_bytes_plain_document(self, scanner, plain_docx):
        assert scanner.scan_bytes(plain_docx) == ()

    def test_scan_bytes_malformed(self, scanner):
        with pytest.raises(MalformedPackageError):
            scanner.scan_bytes(b"PK\x03\x04 truncated")

    def test_scan_bytes_missing_body(self, scanner):
        with pytest.raises(MalformedPackageError):
            scanner.scan_bytes(build_docx("", include_body=False))
