"""FastAPI routers and dependencies."""

from smartdoc.api.deps import (
    get_app_settings,
    get_factory,
    get_field_store,
    require_api_key,
)
from smartdoc.api.fill import router as fill_router
from smartdoc.api.templates import router as templates_router

__all__ = [
    "get_app_settings",
    "get_factory",
    "get_field_store",
    "require_api_key",
    "fill_router",
    "templates_router",
]
