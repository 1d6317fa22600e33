"""Template engine strategies.

Implements placeholder scanning and value substitution for Word documents.
"""

from smartdoc.strategies.template_engine.codec import PackageCodec
from smartdoc.strategies.template_engine.preview import extract_paragraphs
from smartdoc.strategies.template_engine.renderer import TemplateRenderer
from smartdoc.strategies.template_engine.scanner import (
    PLACEHOLDER_PATTERN,
    PlaceholderScanner,
)

__all__ = [
    "PLACEHOLDER_PATTERN",
    "PackageCodec",
    "PlaceholderScanner",
    "TemplateRenderer",
    "extract_paragraphs",
]
