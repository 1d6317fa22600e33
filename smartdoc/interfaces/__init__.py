"""Abstract base classes and domain types for SmartDoc strategies."""

from smartdoc.interfaces.errors import (
    FieldStoreUnavailable,
    MalformedPackageError,
    NoPlaceholdersFound,
    RenderError,
    SmartDocError,
    TemplateNotFoundError,
)
from smartdoc.interfaces.field_store import BaseFieldStore, TemplateRecord, TemplateSummary
from smartdoc.interfaces.template import (
    BODY_ENTRY,
    DOCX_MEDIA_TYPE,
    BasePlaceholderScanner,
    BaseTemplateRenderer,
    FieldSet,
    TemplatePackage,
)

__all__ = [
    "BODY_ENTRY",
    "DOCX_MEDIA_TYPE",
    "BaseFieldStore",
    "BasePlaceholderScanner",
    "BaseTemplateRenderer",
    "FieldSet",
    "FieldStoreUnavailable",
    "MalformedPackageError",
    "NoPlaceholdersFound",
    "RenderError",
    "SmartDocError",
    "TemplateNotFoundError",
    "TemplatePackage",
    "TemplateRecord",
    "TemplateSummary",
]
