"""Core functionality for space tracking."""

from flow_tracker.core.coordinator import TrackingCoordinator, TrackingSnapshot
from flow_tracker.core.models import AppSettings, AppState, TimeEntry, TrackingSpace
from flow_tracker.core.storage import StateStore, StorageError

__all__ = [
    "AppSettings",
    "AppState",
    "StateStore",
    "StorageError",
    "TimeEntry",
    "TrackingCoordinator",
    "TrackingSnapshot",
    "TrackingSpace",
]
