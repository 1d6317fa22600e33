"""Exception taxonomy for the template engine and its collaborators.

Every error raised by the core or by a field store derives from
``SmartDocError`` so the API layer can map them to responses in one place.
"""


class SmartDocError(Exception):
    """Base class for all SmartDoc errors."""

    error_code = "SMARTDOC_ERROR"


class MalformedPackageError(SmartDocError):
    """Input bytes are not a readable OOXML container or lack the body entry."""

    error_code = "MALFORMED_PACKAGE"


class NoPlaceholdersFound(SmartDocError):
    """A scanned template contains no ``{identifier}`` placeholders."""

    error_code = "NO_PLACEHOLDERS"


class RenderError(SmartDocError):
    """Substitution or re-serialization failed for a render request."""

    error_code = "RENDER_FAILED"


class TemplateNotFoundError(SmartDocError):
    """No stored template exists under the requested id."""

    error_code = "TEMPLATE_NOT_FOUND"

    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template not found: {template_id}")
        self.template_id = template_id


class FieldStoreUnavailable(SmartDocError):
    """The configured field store backend could not be reached."""

    error_code = "FIELD_STORE_UNAVAILABLE"
