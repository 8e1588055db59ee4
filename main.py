"""Main entry point for running the AutoJSON FastAPI application."""

import os

import uvicorn
from loguru import logger

from autojson.api.main import app
from autojson.core.config import get_settings
from autojson.core.logging import setup_logging


def main() -> None:
    """Run the application with uvicorn, logging through Loguru."""
    settings = get_settings()
    setup_logging(settings)

    # Container platforms set PORT to the port the service must listen on
    port = int(os.environ.get("PORT", settings.api_port))

    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {"class": "autojson.core.logging.InterceptHandler"},
        },
        "loggers": {
            name: {"handlers": ["default"], "level": "INFO", "propagate": False}
            for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
        },
    }

    mode = "development mode with auto-reload" if settings.debug else "production mode"
    logger.info(f"Starting Uvicorn on http://{settings.api_host}:{port} ({mode})")

    # Reload requires the app as an import string
    uvicorn.run(
        "autojson.api.main:app" if settings.debug else app,
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=log_config,
    )


if __name__ == "__main__":
    main()
