"""Placeholder scanner strategy.

Finds ``{identifier}`` tokens in raw document body XML.

Scanning works on the serialized XML text, not on reassembled paragraph
text. A placeholder that the source editor split across formatting runs
(for example ``{na</w:t></w:r><w:r><w:t>me}``) is therefore not detected.
Template authors should type each placeholder in one go, without changing
formatting inside the braces.
"""

import logging
import re

from smartdoc.interfaces.template import BasePlaceholderScanner, FieldSet, TemplatePackage
from smartdoc.strategies.template_engine.codec import PackageCodec

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z0-9_]+)\}")


class PlaceholderScanner(BasePlaceholderScanner):
    """Regex-based placeholder scanner."""

    def __init__(self, codec: PackageCodec | None = None) -> None:
        self._codec = codec or PackageCodec()

    def scan(self, body_text: str) -> FieldSet:
        """Extract distinct identifiers in first-seen order.

        Args:
            body_text: Raw XML text of the document body.

        Returns:
            FieldSet of identifiers, empty if none are present.
        """
        # dict preserves insertion order, so first occurrence wins
        found = dict.fromkeys(
            match.group(1) for match in PLACEHOLDER_PATTERN.finditer(body_text)
        )
        logger.debug(f"Scanned body: {len(found)} distinct placeholders")
        return tuple(found)

    def scan_package(self, package: TemplatePackage) -> FieldSet:
        """Scan the body entry of an opened package."""
        return self.scan(self._codec.read_body(package))

    def scan_bytes(self, content: bytes) -> FieldSet:
        """Open raw .docx bytes and scan the body.

        Raises:
            MalformedPackageError: If the bytes are not a readable package.
        """
        return self.scan_package(self._codec.open(content))
