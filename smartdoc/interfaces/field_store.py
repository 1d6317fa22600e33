"""Abstract base class for template persistence strategies.

The Strategy Pattern allows the local directory store and the remote
object storage bucket to be used interchangeably.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from smartdoc.interfaces.template import FieldSet


def generate_template_id() -> str:
    """Generate a new template id."""
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class TemplateSummary:
    """Listing entry for a stored template.

    Attributes:
        id: The template id.
        name: Original filename of the template.
        field_count: Number of distinct placeholders.
        uploaded_at: Upload time (UTC).
    """

    id: str
    name: str
    field_count: int
    uploaded_at: datetime


@dataclass(frozen=True)
class TemplateRecord:
    """A stored template.

    Attributes:
        id: Assigned at creation and never changed.
        name: Original filename of the template.
        content: Raw .docx bytes.
        fields: Placeholder identifiers derived from the content.
        uploaded_at: Upload time (UTC).
    """

    id: str
    name: str
    content: bytes = field(repr=False)
    fields: FieldSet
    uploaded_at: datetime

    @classmethod
    def create(cls, name: str, content: bytes, fields: FieldSet) -> "TemplateRecord":
        """Build a new record with a fresh id and the current time."""
        return cls(
            id=generate_template_id(),
            name=name,
            content=content,
            fields=tuple(fields),
            uploaded_at=datetime.now(timezone.utc),
        )


class BaseFieldStore(ABC):
    """Abstract base class for field store strategies.

    Stored content is immutable once put. Putting a record under an
    existing id replaces it entirely.
    """

    @abstractmethod
    async def put(self, record: TemplateRecord) -> str:
        """Persist a record.

        Returns:
            The record id.

        Raises:
            FieldStoreUnavailable: If the backend cannot be reached.
        """

    @abstractmethod
    async def get(self, template_id: str) -> TemplateRecord:
        """Fetch a record by id.

        Raises:
            TemplateNotFoundError: If no record exists under the id.
            FieldStoreUnavailable: If the backend cannot be reached.
        """

    @abstractmethod
    async def list(self) -> list[TemplateSummary]:
        """Return summaries of all stored records, newest first."""

    @abstractmethod
    async def delete(self, template_id: str) -> None:
        """Remove a record.

        Raises:
            TemplateNotFoundError: If no record exists under the id.
        """

    async def close(self) -> None:
        """Release backend resources."""
