"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to instantiate
different strategy implementations at runtime based on
configuration or environment variables.
"""

import logging

from smartdoc.core.config import Settings, get_settings
from smartdoc.interfaces.field_store import BaseFieldStore
from smartdoc.strategies.field_stores import LocalFieldStore, RemoteFieldStore
from smartdoc.strategies.template_engine import PackageCodec, PlaceholderScanner, TemplateRenderer

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    The field store backend is chosen here, once, so request handlers
    never branch on which backend is in use.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        scanner = factory.get_scanner()
        renderer = factory.get_renderer()
        store = factory.get_field_store()
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._codec = PackageCodec()
        self._scanner_cache: PlaceholderScanner | None = None
        self._renderer_cache: TemplateRenderer | None = None
        self._field_store_cache: BaseFieldStore | None = None

    def get_scanner(self) -> PlaceholderScanner:
        """Get the placeholder scanner instance."""
        if self._scanner_cache is None:
            logger.info("Instantiating placeholder scanner")
            self._scanner_cache = PlaceholderScanner(codec=self._codec)
        return self._scanner_cache

    def get_renderer(self) -> TemplateRenderer:
        """Get the template renderer instance."""
        if self._renderer_cache is None:
            logger.info(
                f"Instantiating template renderer: linebreaks={self._settings.render_linebreaks}"
            )
            self._renderer_cache = TemplateRenderer(
                codec=self._codec,
                linebreaks=self._settings.render_linebreaks,
            )
        return self._renderer_cache

    def get_field_store(self, field_store_type: str | None = None) -> BaseFieldStore:
        """Get a field store instance based on the specified type.

        Args:
            field_store_type: The store type to instantiate. If None, uses settings.

        Returns:
            A BaseFieldStore implementation instance.

        Raises:
            ValueError: If the store type is unknown or misconfigured.
        """
        if self._field_store_cache is None or field_store_type is not None:
            field_store_type = field_store_type or self._settings.field_store_type

            logger.info(f"Instantiating field store: {field_store_type}")

            match field_store_type:
                case "local":
                    self._field_store_cache = LocalFieldStore(
                        root=self._settings.storage_dir,
                    )
                case "remote":
                    if not self._settings.supabase_url or not self._settings.supabase_key:
                        raise ValueError(
                            "SUPABASE_URL and SUPABASE_KEY are required for the remote field store"
                        )
                    self._field_store_cache = RemoteFieldStore(
                        url=self._settings.supabase_url,
                        api_key=self._settings.supabase_key,
                        bucket=self._settings.supabase_bucket,
                        timeout=self._settings.remote_timeout,
                    )
                case _:
                    raise ValueError(
                        f"Unknown field store type: {field_store_type}. "
                        f"Valid options: 'local', 'remote'"
                    )

        return self._field_store_cache

    async def aclose(self) -> None:
        """Release resources held by cached components."""
        if self._field_store_cache is not None:
            await self._field_store_cache.close()

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._scanner_cache = None
        self._renderer_cache = None
        self._field_store_cache = None
        logger.debug("Component factory cache cleared")
