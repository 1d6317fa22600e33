"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from smartdoc.interfaces.field_store import TemplateRecord, TemplateSummary

# Values are converted to text by the renderer; None fills as empty.
FieldValue = str | int | float | bool | None


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error_code: str | None = None


# =============================================================================
# Template Schemas
# =============================================================================


class TemplateSummaryResponse(BaseModel):
    """Summary of a stored template."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Template ID")
    name: str = Field(description="Original filename")
    field_count: int = Field(alias="fieldCount", description="Distinct placeholders")
    uploaded_at: datetime = Field(alias="uploadedAt", description="Upload time (UTC)")

    @classmethod
    def from_summary(cls, summary: TemplateSummary) -> "TemplateSummaryResponse":
        return cls(
            id=summary.id,
            name=summary.name,
            field_count=summary.field_count,
            uploaded_at=summary.uploaded_at,
        )


class TemplateDetailResponse(TemplateSummaryResponse):
    """A stored template with its placeholder list."""

    fields: list[str] = Field(description="Placeholder identifiers in document order")

    @classmethod
    def from_record(cls, record: TemplateRecord) -> "TemplateDetailResponse":
        return cls(
            id=record.id,
            name=record.name,
            field_count=len(record.fields),
            uploaded_at=record.uploaded_at,
            fields=list(record.fields),
        )


class TemplateListResponse(BaseModel):
    """Response for listing stored templates."""

    templates: list[TemplateSummaryResponse]
    total: int


class PreviewResponse(BaseModel):
    """Text preview of a filled template."""

    template_id: str
    paragraphs: list[str]


# =============================================================================
# Fill Schemas
# =============================================================================


class FillFieldsRequest(BaseModel):
    """Field values for filling a stored template.

    Keys not present in the template are ignored; placeholders without a
    value are filled with an empty string.
    """

    fields: dict[str, FieldValue] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("fields", "data"),
        description="Placeholder identifier to value",
    )


class FillRequest(FillFieldsRequest):
    """Request body for the fill endpoint.

    Either ``template`` (base64 .docx) or ``docID`` (stored template id)
    must be given, not both.
    """

    api_key: str = Field(description="API key")
    template: str | None = Field(default=None, description="Base64 encoded .docx template")
    doc_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("doc_id", "docID"),
        description="ID of a stored template",
    )

    @field_validator("doc_id", mode="before")
    @classmethod
    def coerce_doc_id(cls, v: Any) -> Any:
        """Accept numeric ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode="after")
    def check_template_source(self) -> "FillRequest":
        """Require exactly one of template and doc_id."""
        if (self.template is None) == (self.doc_id is None):
            raise ValueError("Provide exactly one of 'template' (base64) or 'docID'")
        return self
