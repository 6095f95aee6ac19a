"""Dependency injection for FastAPI endpoints.

The application owns one ``FlowEngine``; endpoints reach it (and its
commands) through these dependencies.
"""

from fastapi import Request  # type: ignore[import-untyped]

from flow_tracker.core.commands import TrackingCommands
from flow_tracker.core.config import ConfigManager
from flow_tracker.core.engine import FlowEngine


def get_config(request: Request) -> ConfigManager:
    """Get configuration manager instance from app state."""
    config: ConfigManager = request.app.state.config
    return config


def get_engine(request: Request) -> FlowEngine:
    """Get the tracking engine from app state."""
    engine: FlowEngine = request.app.state.engine
    return engine


def get_commands(request: Request) -> TrackingCommands:
    """Get the command surface of the engine.

    Note:
        This is a dependency function for FastAPI endpoints.
        Use with Depends(get_commands) in endpoint parameters.
    """
    return get_engine(request).commands
