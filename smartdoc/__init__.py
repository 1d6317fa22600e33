"""SmartDoc: fill {placeholder} fields in .docx templates."""

__version__ = "0.1.0"
