"""HTTP API for Flow.

This module provides a FastAPI-based API exposing the tracking commands to
the presentation layer and to scripts.

Usage:
    # Start server
    flow serve

    # Access API docs
    http://localhost:8765/docs
"""

__all__ = ["create_app", "run_server"]

from flow_tracker.api.server import create_app, run_server  # noqa: F401
