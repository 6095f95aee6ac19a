"""Route CLI calls to the running daemon, or to the local store.

When the daemon is reachable, commands go over IPC so that its coordinator
sees every toggle. Otherwise the same handler table runs in-process over
the store; the stored active flag is then picked up when the daemon starts.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from flow_tracker.core.commands import TrackingCommands
from flow_tracker.core.coordinator import TrackingCoordinator
from flow_tracker.core.storage import StateStore
from flow_tracker.daemon.handlers import Handler, build_handlers
from flow_tracker.daemon.ipc import METHOD_NOT_FOUND, IPCClient, IPCError, RPCError

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A command failed, locally or in the daemon."""

    pass


class Backend:
    """Calls tracking commands by RPC method name."""

    def __init__(self, data_dir: Optional[Path] = None, client: Optional[IPCClient] = None):
        """Initialize backend.

        Args:
            data_dir: Custom data directory. Forces local mode
            client: IPC client to use (default: platform socket)
        """
        self.data_dir = data_dir
        self._client: Optional[IPCClient] = None
        self._handlers: Optional[dict[str, Handler]] = None

        if data_dir is None:
            try:
                client = client or IPCClient()
            except RuntimeError as e:
                logger.debug(f"IPC unavailable: {e}")
                client = None
            if client is not None and client.is_daemon_running():
                self._client = client

    @property
    def remote(self) -> bool:
        """Whether calls go to the daemon."""
        return self._client is not None

    def _local_handlers(self) -> dict[str, Handler]:
        if self._handlers is None:
            if self.data_dir is not None:
                store = StateStore(self.data_dir)
            else:
                from flow_tracker.core.config import ConfigManager

                config = ConfigManager()
                store = StateStore(config.data_dir, config.get("general.store_file", "store.json"))
            commands = TrackingCommands(store, TrackingCoordinator())
            self._handlers = build_handlers(commands)
        return self._handlers

    def call(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Call a command.

        Args:
            method: RPC method name (e.g. 'toggle_tracking')
            params: Method parameters in wire format

        Returns:
            Result in wire format

        Raises:
            BackendError: If the command fails
        """
        if self._client is not None:
            try:
                return self._client.call(method, params)
            except IPCError as e:
                raise BackendError(str(e)) from e

        handler = self._local_handlers().get(method)
        if handler is None:
            raise BackendError(f"Method not found: {method} (code {METHOD_NOT_FOUND})")
        try:
            return handler(params or {})
        except RPCError as e:
            raise BackendError(e.message) from e

    def resolve_space(self, ref: str) -> dict[str, Any]:
        """Find a space by id, or by case-insensitive name.

        Raises:
            BackendError: If no space matches
        """
        spaces = self.call("get_spaces")
        for space in spaces:
            if space["id"] == ref:
                return space  # type: ignore[no-any-return]
        for space in spaces:
            if space["name"].lower() == ref.lower():
                return space  # type: ignore[no-any-return]
        raise BackendError(f"Space not found: {ref}")
