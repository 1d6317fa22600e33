"""Plain-text preview of filled documents.

Loads a rendered .docx with python-docx, the same consumer-side view a
word processor would have, and returns its visible paragraph text.
"""

import io
import logging

from smartdoc.interfaces.errors import MalformedPackageError

logger = logging.getLogger(__name__)


def extract_paragraphs(document_bytes: bytes) -> list[str]:
    """Return the text of every body and table paragraph, in order.

    Args:
        document_bytes: A complete .docx document.

    Returns:
        Paragraph texts. Empty paragraphs are kept so spacing is visible.

    Raises:
        MalformedPackageError: If python-docx cannot load the document.
    """
    from docx import Document

    try:
        doc = Document(io.BytesIO(document_bytes))
    except Exception as e:
        logger.warning(f"Preview load failed: {e}")
        raise MalformedPackageError(f"Document could not be loaded: {e}") from e

    paragraphs = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                paragraphs.extend(p.text for p in cell.paragraphs)

    logger.debug(f"Preview extracted {len(paragraphs)} paragraphs")
    return paragraphs
