"""Middleware for the FastAPI application."""

import logging

from fastapi import FastAPI, Request  # type: ignore[import-untyped]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from flow_tracker.core.config import ConfigManager
from flow_tracker.core.storage import StorageError

logger = logging.getLogger(__name__)


def setup_cors(app: FastAPI, config: ConfigManager) -> None:
    """Configure CORS middleware.

    Args:
        app: FastAPI application instance
        config: Configuration manager

    Note:
        CORS is configured based on the api.cors section in config.
        By default, only the local desktop shell origins are allowed.
    """
    if not config.get("api.cors.enabled", True):
        return

    origins = config.get("api.cors.origins", ["http://localhost:1420"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Report a failed store write as a server error."""
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def setup_middleware(app: FastAPI, config: ConfigManager) -> None:
    """Set up all middleware and error handlers for the application.

    Args:
        app: FastAPI application instance
        config: Configuration manager
    """
    setup_cors(app, config)
    app.add_exception_handler(StorageError, storage_error_handler)
