"""Metadata document stored next to each template's content."""

import re
from datetime import datetime

from pydantic import BaseModel, Field

from smartdoc.interfaces.field_store import TemplateRecord, TemplateSummary

TEMPLATE_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")


def is_valid_template_id(template_id: str) -> bool:
    """Check that an id is safe to use in file and object names."""
    return bool(TEMPLATE_ID_PATTERN.match(template_id))


class TemplateMetadata(BaseModel):
    """Everything about a stored template except its content."""

    id: str
    name: str
    fields: list[str] = Field(default_factory=list)
    uploaded_at: datetime

    @classmethod
    def from_record(cls, record: TemplateRecord) -> "TemplateMetadata":
        return cls(
            id=record.id,
            name=record.name,
            fields=list(record.fields),
            uploaded_at=record.uploaded_at,
        )

    def to_record(self, content: bytes) -> TemplateRecord:
        return TemplateRecord(
            id=self.id,
            name=self.name,
            content=content,
            fields=tuple(self.fields),
            uploaded_at=self.uploaded_at,
        )

    def to_summary(self) -> TemplateSummary:
        return TemplateSummary(
            id=self.id,
            name=self.name,
            field_count=len(self.fields),
            uploaded_at=self.uploaded_at,
        )
