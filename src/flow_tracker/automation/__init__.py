"""Integration with the desktop: focused-window probe and notifications."""

from flow_tracker.automation.notifier import Event, Notifier
from flow_tracker.automation.window_probe import ProbeError, WindowProbe

__all__ = ["Event", "Notifier", "ProbeError", "WindowProbe"]
