"""Shared fixtures for unit tests."""

import pytest

from docx_helpers import INVOICE_BODY, build_docx, document_xml, paragraph


@pytest.fixture
def invoice_docx() -> bytes:
    """A template with three distinct placeholders, one repeated."""
    return build_docx(INVOICE_BODY)


@pytest.fixture
def plain_docx() -> bytes:
    """A readable template without any placeholders."""
    return build_docx(document_xml(paragraph("Nothing to fill here.")))
