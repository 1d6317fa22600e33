"""FastAPI application entry point.

Main application setup with middleware, routing, and lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smartdoc import __version__
from smartdoc.api.fill import router as fill_router
from smartdoc.api.schemas import ErrorResponse
from smartdoc.api.templates import router as templates_router
from smartdoc.core.config import Settings, get_settings
from smartdoc.core.factory import ComponentFactory
from smartdoc.core.logging_config import setup_logging
from smartdoc.interfaces.errors import (
    FieldStoreUnavailable,
    MalformedPackageError,
    NoPlaceholdersFound,
    RenderError,
    SmartDocError,
    TemplateNotFoundError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[SmartDocError], int] = {
    MalformedPackageError: status.HTTP_400_BAD_REQUEST,
    NoPlaceholdersFound: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TemplateNotFoundError: status.HTTP_404_NOT_FOUND,
    FieldStoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    RenderError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# error_code attached to request-level rejections raised as HTTPException
HTTP_ERROR_CODES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "INVALID_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: "PAYLOAD_TOO_LARGE",
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: "UNSUPPORTED_MEDIA_TYPE",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "INTERNAL_ERROR",
}


def status_for_error(exc: SmartDocError) -> int:
    """Map a domain error to its HTTP status code."""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events for proper resource management.
    """
    settings: Settings = app.state.settings
    factory: ComponentFactory = app.state.factory

    logger.info(f"Starting SmartDoc API (field store: {settings.field_store_type})...")

    yield

    logger.info("Shutting down SmartDoc API...")
    try:
        await factory.aclose()
        logger.info("Field store connections closed")
    except Exception as e:
        logger.error(f"Error closing field store: {e}", exc_info=True)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="SmartDoc",
        description="Fill {placeholder} fields in .docx templates",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.factory = ComponentFactory(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(templates_router)
    app.include_router(fill_router)
    logger.info("Registered templates and fill routers")

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "service": "smartdoc-api",
            "version": __version__,
            "field_store": settings.field_store_type,
        }

    @app.exception_handler(SmartDocError)
    async def smartdoc_exception_handler(request: Request, exc: SmartDocError):
        """Translate domain errors into typed JSON responses."""
        status_code = status_for_error(exc)
        detail = str(exc)
        if isinstance(exc, FieldStoreUnavailable):
            detail = (
                "Template storage is unavailable. Try again later "
                "or send the template bytes directly."
            )

        if status_code >= 500:
            logger.error(f"{exc.error_code}: {exc}", exc_info=exc)
        else:
            logger.warning(f"{exc.error_code}: {exc}")

        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(detail=detail, error_code=exc.error_code).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Return request-level rejections in the standard error shape."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                detail=str(exc.detail),
                error_code=HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            ).model_dump(),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors."""
        logger.warning(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Validation error",
                "errors": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                detail="Internal server error",
                error_code="INTERNAL_ERROR",
            ).model_dump(),
        )

    logger.info("FastAPI application created successfully")
    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Return validation errors without non-serializable context objects."""
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "smartdoc.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
