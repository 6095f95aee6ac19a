"""System endpoints for health checks and status."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from flow_tracker import __version__
from flow_tracker.api.dependencies import get_engine
from flow_tracker.api.models import HealthResponse, StatusResponse
from flow_tracker.core.engine import FlowEngine

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint.

    Example:
        >>> GET /api/v1/health
        {
            "status": "healthy",
            "timestamp": "2026-10-19T10:30:00Z",
            "version": "0.2.0"
        }
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(engine: FlowEngine = Depends(get_engine)) -> StatusResponse:
    """Get engine status.

    Example:
        >>> GET /api/v1/status
        {
            "version": "0.2.0",
            "tracking": true,
            "activeSpaceId": "uuid",
            "spaces": 3,
            "entries": 42,
            "storeFile": "/home/me/.flow/data/store.json"
        }
    """
    snapshot = engine.coordinator.snapshot()
    state = engine.store.load()

    return StatusResponse(
        version=__version__,
        tracking=snapshot.is_tracking,
        active_space_id=snapshot.active_space_id,
        spaces=len(state.spaces),
        entries=len(state.entries),
        store_file=str(engine.store.store_file),
    )
