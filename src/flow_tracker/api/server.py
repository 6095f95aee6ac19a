"""FastAPI application server.

This module contains the main FastAPI application setup and server runner.
The API provides programmatic access to the tracking commands.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional, Union

from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from flow_tracker import __version__
from flow_tracker.api.middleware import setup_middleware
from flow_tracker.api.models import ErrorResponse
from flow_tracker.core.config import ConfigManager
from flow_tracker.core.engine import FlowEngine

API_PREFIX = "/api/v1"

STORAGE_ERROR_RESPONSES: dict[Union[int, str], dict[str, Any]] = {
    500: {"model": ErrorResponse, "description": "The store could not be read or written"}
}


def create_app(
    config: Optional[ConfigManager] = None,
    engine: Optional[FlowEngine] = None,
    data_dir: Optional[Path] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional configuration manager (creates default if None)
        engine: Tracking engine to expose. If None, the app builds one and
            runs its polling loop for the lifetime of the server
        data_dir: Data directory of the engine the app builds (default: from config)

    Returns:
        Configured FastAPI application instance

    Example:
        >>> app = create_app()
        >>> # Or around an existing engine
        >>> app = create_app(config, engine)
    """
    if config is None:
        config = engine.config if engine is not None else ConfigManager()

    owns_engine = engine is None
    if engine is None:
        engine = FlowEngine(config, data_dir=data_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if owns_engine:
            engine.start()
        try:
            yield
        finally:
            if owns_engine:
                engine.stop()

    app = FastAPI(
        title="Flow API",
        description="HTTP API for the Flow per-space app time tracker",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.engine = engine

    setup_middleware(app, config)

    from flow_tracker.api.endpoints import analytics, apps, entries, settings, spaces, system, tracking

    routers = [
        (system, "", "system"),
        (apps, "/apps", "apps"),
        (spaces, "/spaces", "spaces"),
        (tracking, "/tracking", "tracking"),
        (entries, "", "entries"),
        (settings, "/settings", "settings"),
        (analytics, "/analytics", "analytics"),
    ]
    for module, prefix, tag in routers:
        app.include_router(
            module.router,
            prefix=f"{API_PREFIX}{prefix}",
            tags=[tag],
            responses=STORAGE_ERROR_RESPONSES,
        )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Root endpoint - points to docs."""
        return JSONResponse(
            {
                "message": "Flow API",
                "version": __version__,
                "docs": "/docs",
                "health": "/api/v1/health",
            }
        )

    return app


def run_server(
    host: str = "localhost",
    port: int = 8765,
    config: Optional[ConfigManager] = None,
    data_dir: Optional[Path] = None,
) -> None:
    """Run the API server using Uvicorn.

    Args:
        host: Host address to bind to
        port: Port number to bind to
        config: Optional configuration manager
        data_dir: Data directory (default: from config)

    Note:
        This function blocks until the server is stopped. The server runs a
        single process since the tracking engine lives in it.
    """
    import uvicorn  # type: ignore[import-untyped]

    if config is None:
        config = ConfigManager()

    uvicorn.run(
        create_app(config, data_dir=data_dir),
        host=host,
        port=port,
        log_level=config.get("api.advanced.log_level", "info"),
        access_log=config.get("api.advanced.access_log", True),
    )
