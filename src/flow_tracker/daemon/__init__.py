"""
Flow Daemon - background service hosting the tracking engine.

The daemon provides:
- The once-per-second tracking loop
- JSON-RPC access to the tracking commands over a Unix socket
- A state file with tick statistics
"""

from flow_tracker.daemon.daemon import DaemonError, FlowDaemon
from flow_tracker.daemon.ipc import IPCClient, IPCError, IPCServer
from flow_tracker.daemon.state import DaemonState

__all__ = ["DaemonError", "DaemonState", "FlowDaemon", "IPCClient", "IPCError", "IPCServer"]
