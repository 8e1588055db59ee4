"""FastAPI application initialization and configuration module.

This module handles:
- Application lifecycle management (freezing configuration at startup)
- Middleware and exception handler registration
- Installation of the JSON results plugin
- Health check and info endpoints

Routes here return plain dicts; the JSON results plugin turns them into
``application/json`` bodies.
"""

from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from loguru import logger

from autojson.api.middleware.error_handler import register_exception_handlers
from autojson.api.middleware.request_context import RequestContextMiddleware
from autojson.api.routing import (
    converter_chain,
    eligible_json_types,
    freeze_json_results,
    install_json_results,
)
from autojson.api.utils.responses import ORJSONResponse
from autojson.core.config import Settings, get_settings
from autojson.core.logging import setup_logging
from autojson.core.result_config import build_serializer
from autojson.core.shapes import TypeDescriptor, describe
from autojson.core.types import Serializer


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Freeze plugin configuration before the first request is served.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    freeze_json_results(app_instance)

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    *,
    classes: Iterable[TypeDescriptor] | None = None,
    serializer: Serializer | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        classes: Extra type descriptors to serialize, merged with the defaults.
        serializer: Serializer replacing the settings-derived default.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_exception_handlers(application)
    application.add_middleware(RequestContextMiddleware)

    # Chain and plugin must exist before any route is declared
    converter_chain(application, settings.default_media_type)
    install_json_results(
        application,
        default_serializer=build_serializer(settings.json_config),
    )
    if classes is not None or serializer is not None:
        install_json_results(application, classes=classes, serializer=serializer)

    @application.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint returning a hello world message."""
        return {"message": f"Hello from {settings.app_name}!"}

    @application.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for monitoring and container orchestration."""
        return {"status": "healthy"}

    @application.get("/info")
    async def info() -> dict[str, Any]:
        """Application information, including the auto-serialized types."""
        return {
            "app_name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "json_result_types": [
                describe(descriptor) for descriptor in eligible_json_types(application)
            ],
        }

    return application


app = create_app()
