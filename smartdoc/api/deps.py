"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Settings and component factory from application state
- Field store, scanner and renderer
- API key authentication
"""

import logging
import secrets

from fastapi import Depends, Header, HTTPException, Request, status

from smartdoc.core.config import Settings
from smartdoc.core.factory import ComponentFactory
from smartdoc.interfaces.field_store import BaseFieldStore
from smartdoc.strategies.template_engine import PlaceholderScanner, TemplateRenderer

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""
    return request.app.state.settings


def get_factory(request: Request) -> ComponentFactory:
    """Return the application's component factory."""
    return request.app.state.factory


def get_field_store(factory: ComponentFactory = Depends(get_factory)) -> BaseFieldStore:
    """Return the configured field store."""
    return factory.get_field_store()


def get_scanner(factory: ComponentFactory = Depends(get_factory)) -> PlaceholderScanner:
    return factory.get_scanner()


def get_renderer(factory: ComponentFactory = Depends(get_factory)) -> TemplateRenderer:
    return factory.get_renderer()


def api_key_matches(provided: str | None, settings: Settings) -> bool:
    """Compare a caller-supplied key with the configured one."""
    if not provided:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), settings.api_key.encode("utf-8"))


async def require_api_key(
    x_api_key: str | None = Header(default=None, alias="X-API-Key", description="API key"),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Dependency rejecting requests without a valid X-API-Key header.

    Raises:
        HTTPException: If the key is missing or wrong.
    """
    if not api_key_matches(x_api_key, settings):
        logger.warning("Rejected request with missing or invalid X-API-Key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Invalid API Key",
        )
