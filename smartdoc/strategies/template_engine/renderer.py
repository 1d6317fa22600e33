"""Template renderer strategy.

Substitutes field values for ``{identifier}`` placeholders directly in the
document body XML, preserving every run, style and non-body part.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any
from xml.sax.saxutils import escape

from smartdoc.interfaces.errors import MalformedPackageError, RenderError
from smartdoc.interfaces.template import BaseTemplateRenderer, TemplatePackage
from smartdoc.strategies.template_engine.codec import PackageCodec
from smartdoc.strategies.template_engine.scanner import PLACEHOLDER_PATTERN

logger = logging.getLogger(__name__)

XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}

# Closes the current text element, emits a Word line break and reopens it.
LINE_BREAK_XML = '</w:t><w:br/><w:t xml:space="preserve">'

_NEWLINE_PATTERN = re.compile(r"\r\n|\r|\n")

# Start tag of a run text element, with or without attributes.
_TEXT_START_TAG = re.compile(r"<w:t(?:\s[^>]*)?>")


def in_text_element(body_text: str, position: int) -> bool:
    """Return whether ``position`` lies in the character content of a ``<w:t>``.

    Placeholders can also sit in attribute values or in other elements such
    as ``<w:instrText>``, where line break markup would corrupt the body.
    """
    tag_start = body_text.rfind("<", 0, position)
    if tag_start == -1:
        return False
    tag_end = body_text.find(">", tag_start, position)
    if tag_end == -1:
        # Inside a start tag, i.e. an attribute value
        return False
    return _TEXT_START_TAG.fullmatch(body_text, tag_start, tag_end + 1) is not None


def to_xml_text(value: Any, linebreaks: bool = True) -> str:
    """Convert a field value into XML-safe text.

    Args:
        value: The raw field value. ``None`` becomes an empty string and
            other non-string scalars are converted with ``str()``.
        linebreaks: Whether to turn newlines into Word line breaks.

    Returns:
        The escaped text, ready to be spliced into body XML.
    """
    if value is None:
        return ""
    text = escape(str(value), XML_ENTITIES)
    if linebreaks:
        text = _NEWLINE_PATTERN.sub(lambda _: LINE_BREAK_XML, text)
    return text


class TemplateRenderer(BaseTemplateRenderer):
    """Fills placeholders in .docx templates.

    Unknown keys in the field mapping are ignored and placeholders without a
    value become empty strings, since partially filled forms are common.
    The renderer holds no per-request state and is safe to share between
    concurrent requests.
    """

    def __init__(
        self,
        codec: PackageCodec | None = None,
        linebreaks: bool = True,
    ) -> None:
        """Initialize the renderer.

        Args:
            codec: Package codec used to read and write the body entry.
            linebreaks: Convert newlines in values to Word line breaks.
        """
        self._codec = codec or PackageCodec()
        self._linebreaks = linebreaks

    def substitute(self, body_text: str, fields: Mapping[str, Any]) -> str:
        """Replace every placeholder occurrence in raw body XML.

        Line breaks are only emitted for placeholders inside ``<w:t>`` text;
        anywhere else newlines are kept as plain characters.
        """

        def replace(match: re.Match) -> str:
            linebreaks = self._linebreaks and in_text_element(body_text, match.start())
            return to_xml_text(fields.get(match.group(1)), linebreaks)

        return PLACEHOLDER_PATTERN.sub(replace, body_text)

    def render(
        self,
        package: TemplatePackage,
        fields: Mapping[str, Any],
    ) -> TemplatePackage:
        """Fill every placeholder in the package body.

        Args:
            package: The opened template package.
            fields: Identifier to value mapping.

        Returns:
            A new package; the input package is not modified.

        Raises:
            RenderError: If the body cannot be read, substituted or written.
        """
        try:
            body = self._codec.read_body(package)
            filled = self.substitute(body, fields)
            result = self._codec.write_body(package, filled)
        except Exception as e:
            logger.error(f"Render failed: {e}", exc_info=True)
            raise RenderError(f"Render failed: {e}") from e

        logger.debug(f"Rendered body with {len(fields)} supplied fields")
        return result

    def render_bytes(self, content: bytes, fields: Mapping[str, Any]) -> bytes:
        """Open, fill and serialize a template in one step.

        Args:
            content: Raw .docx template bytes.
            fields: Identifier to value mapping.

        Returns:
            Bytes of the filled .docx document.

        Raises:
            MalformedPackageError: If the content is not a readable package.
            RenderError: If substitution or serialization fails.
        """
        package = self._codec.open(content)
        filled = self.render(package, fields)

        try:
            output = self._codec.serialize(filled)
        except MalformedPackageError:
            raise
        except Exception as e:
            logger.error(f"Serialization failed: {e}", exc_info=True)
            raise RenderError(f"Serialization failed: {e}") from e

        logger.info(f"Rendered document: {len(output)} bytes")
        return output
