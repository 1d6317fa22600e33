"""Concrete field store implementations."""

from smartdoc.strategies.field_stores.local import LocalFieldStore
from smartdoc.strategies.field_stores.remote import RemoteFieldStore

__all__ = [
    "LocalFieldStore",
    "RemoteFieldStore",
]
