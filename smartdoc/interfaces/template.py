"""Template engine interfaces.

Defines the in-memory package model and the abstract base classes for
placeholder scanning and template rendering.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

BODY_ENTRY = "word/document.xml"

DOCX_MEDIA_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

# Distinct placeholder identifiers in first-seen document order.
FieldSet = tuple[str, ...]


@dataclass(frozen=True)
class TemplatePackage:
    """An opened OOXML container.

    Attributes:
        entries: Entry path to raw bytes, in the container's original order.
            Treated as read-only; codec operations return new packages.
    """

    entries: Mapping[str, bytes]

    @property
    def names(self) -> list[str]:
        """Return entry paths in container order."""
        return list(self.entries)


class BasePlaceholderScanner(ABC):
    """Abstract base class for placeholder scanning strategies."""

    @abstractmethod
    def scan(self, body_text: str) -> FieldSet:
        """Extract the ordered, deduplicated placeholder identifiers.

        Args:
            body_text: Raw XML text of the document body.

        Returns:
            The FieldSet, empty if no placeholder occurs.
        """


class BaseTemplateRenderer(ABC):
    """Abstract base class for template rendering strategies.

    Substitutes placeholder occurrences in a package with field values.
    """

    @abstractmethod
    def render(
        self,
        package: TemplatePackage,
        fields: Mapping[str, Any],
    ) -> TemplatePackage:
        """Fill every placeholder in the package body.

        Args:
            package: The opened template package.
            fields: Identifier to value mapping. Unknown keys are ignored,
                missing identifiers are replaced with an empty string.

        Returns:
            A new package with the substituted body.

        Raises:
            RenderError: If substitution fails.
        """

    @abstractmethod
    def render_bytes(self, content: bytes, fields: Mapping[str, Any]) -> bytes:
        """Open, fill and serialize a template in one step.

        Raises:
            MalformedPackageError: If the content is not a readable package.
            RenderError: If substitution or serialization fails.
        """
