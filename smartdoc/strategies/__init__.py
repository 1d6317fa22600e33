"""Concrete strategy implementations."""

from smartdoc.strategies.field_stores import LocalFieldStore, RemoteFieldStore
from smartdoc.strategies.template_engine import (
    PackageCodec,
    PlaceholderScanner,
    TemplateRenderer,
)

__all__ = [
    "LocalFieldStore",
    "RemoteFieldStore",
    "PackageCodec",
    "PlaceholderScanner",
    "TemplateRenderer",
]
