"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Authentication
    api_key: str = Field(
        default="TEST",
        description="Key required by the fill endpoint and template routes.",
    )

    # Field store selection
    field_store_type: str = Field(
        default="local",
        description="Field store strategy to use: 'local' or 'remote'.",
    )
    storage_dir: Path = Field(
        default=Path("./storage"),
        description="Directory for the local field store.",
    )

    # Remote object storage (Supabase Storage)
    supabase_url: str | None = Field(
        default=None,
        description="Supabase project URL for the remote field store.",
    )
    supabase_key: str | None = Field(
        default=None,
        description="Supabase key with access to the template bucket.",
    )
    supabase_bucket: str = Field(
        default="templates",
        description="Storage bucket holding templates.",
    )
    remote_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for remote field store requests.",
    )

    # Rendering
    render_linebreaks: bool = Field(
        default=True,
        description="Convert newlines in field values to Word line breaks.",
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Largest accepted template upload in bytes.",
    )

    # HTTP
    cors_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed by the CORS middleware.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory for info.log and error.log.",
    )

    @field_validator("field_store_type")
    @classmethod
    def normalize_field_store_type(cls, v: str) -> str:
        """Normalize store type to lowercase."""
        return v.strip().lower()

    @field_validator("storage_dir", "log_dir")
    @classmethod
    def ensure_dir(cls, v: Path) -> Path:
        """Ensure the directory exists."""
        v.mkdir(parents=True, exist_ok=True)
        return v.resolve()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
