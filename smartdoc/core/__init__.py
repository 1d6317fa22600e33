"""Core configuration and factory components."""

from smartdoc.core.config import Settings, get_settings
from smartdoc.core.factory import ComponentFactory

__all__ = [
    "Settings",
    "get_settings",
    "ComponentFactory",
]
