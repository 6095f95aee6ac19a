"""IPC between the daemon and its clients.

JSON-RPC 2.0 over a Unix domain socket. A client connects, writes one
request terminated by a newline, reads one response line and disconnects.
"""

import json
import logging
import socket
import socketserver
import threading
from pathlib import Path
from typing import Any, Callable, Optional

from flow_tracker.daemon.platform import get_ipc_socket_path

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000

RPCHandler = Callable[[dict[str, Any]], Any]


class IPCError(Exception):
    """IPC communication error, or an error response from the daemon."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class RPCError(Exception):
    """Raised by a handler to answer with a specific JSON-RPC error code."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def _response(request_id: Any, **body: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, **body}


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return _response(request_id, error={"code": code, "message": message})


class _ConnectionHandler(socketserver.StreamRequestHandler):
    """Serves one request line on an accepted connection."""

    timeout = 5.0

    def handle(self) -> None:
        line = self.rfile.readline()
        if not line:
            return

        try:
            request = json.loads(line)
        except ValueError as e:
            response = _error(None, PARSE_ERROR, str(e))
        else:
            response = self.server.ipc.process_request(request)  # type: ignore[attr-defined]

        try:
            payload = json.dumps(response)
        except (TypeError, ValueError) as e:
            logger.exception("Unserializable result")
            payload = json.dumps(_error(response.get("id"), INTERNAL_ERROR, str(e)))

        try:
            self.wfile.write(payload.encode("utf-8") + b"\n")
        except OSError as e:
            logger.error(f"Error answering client: {e}")


class IPCServer:
    """JSON-RPC server on a Unix domain socket."""

    def __init__(self, socket_path: Optional[Path] = None):
        """Initialize IPC server.

        Args:
            socket_path: Path to socket (default: platform-specific)
        """
        self.socket_path = socket_path or get_ipc_socket_path()
        self.handlers: dict[str, RPCHandler] = {}
        self._server: Optional[socketserver.BaseServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._server is not None

    def register_handler(self, method: str, handler: RPCHandler) -> None:
        """Register the handler for a method.

        Args:
            method: Method name (e.g., 'get_spaces', 'toggle_tracking')
            handler: Takes the params dict, returns a JSON-serializable result
        """
        self.handlers[method] = handler
        logger.debug(f"Registered handler for method: {method}")

    def start(self) -> None:
        """Bind the socket and serve on a background thread.

        Raises:
            OSError: If the socket cannot be bound
        """
        if self.running:
            logger.warning("IPC server already running")
            return

        self.socket_path.unlink(missing_ok=True)
        server = socketserver.ThreadingUnixStreamServer(str(self.socket_path), _ConnectionHandler)
        server.daemon_threads = True
        server.ipc = self  # type: ignore[attr-defined]
        # Owner only
        self.socket_path.chmod(0o600)

        self._server = server
        self._thread = threading.Thread(
            target=server.serve_forever, kwargs={"poll_interval": 0.5}, daemon=True
        )
        self._thread.start()
        logger.info(f"IPC server started on {self.socket_path}")

    def stop(self) -> None:
        """Stop serving and remove the socket file."""
        server, self._server = self._server, None
        if server is None:
            return

        logger.info("Stopping IPC server...")
        server.shutdown()
        server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        self.socket_path.unlink(missing_ok=True)
        logger.info("IPC server stopped")

    def process_request(self, request: Any) -> dict[str, Any]:
        """Dispatch a decoded JSON-RPC request to its handler.

        Returns:
            JSON-RPC response dictionary
        """
        if not isinstance(request, dict):
            return _error(None, INVALID_REQUEST, "Invalid Request")

        request_id = request.get("id")
        method = request.get("method")
        params = request.get("params") or {}
        if not isinstance(method, str) or not method or not isinstance(params, dict):
            return _error(request_id, INVALID_REQUEST, "Invalid Request")

        handler = self.handlers.get(method)
        if handler is None:
            return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        try:
            return _response(request_id, result=handler(params))
        except RPCError as e:
            logger.warning(f"{method} failed: {e.message}")
            return _error(request_id, e.code, e.message)
        except Exception as e:
            logger.exception(f"Error in handler for {method}")
            return _error(request_id, INTERNAL_ERROR, str(e))


class IPCClient:
    """Calls daemon methods over the socket."""

    def __init__(self, socket_path: Optional[Path] = None, timeout: float = 5.0):
        """Initialize IPC client.

        Args:
            socket_path: Path to socket (default: platform-specific)
            timeout: Connection timeout in seconds

        Raises:
            RuntimeError: If the platform has no Unix domain sockets
        """
        self.socket_path = socket_path or get_ipc_socket_path()
        self.timeout = timeout
        self._request_id = 0

    def call(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Call a remote method.

        Returns:
            The method's result

        Raises:
            IPCError: If communication fails or the method returns an error
        """
        self._request_id += 1
        request = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or {},
        }

        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.settimeout(self.timeout)
                sock.connect(str(self.socket_path))
                sock.sendall(json.dumps(request).encode("utf-8") + b"\n")
                with sock.makefile("rb") as reader:
                    response = json.loads(reader.readline())
        except (OSError, ValueError) as e:
            raise IPCError(f"Failed to communicate with daemon: {e}")

        error = response.get("error")
        if error:
            raise IPCError(error.get("message", "Unknown error"), code=error.get("code"))
        return response.get("result")

    def is_daemon_running(self) -> bool:
        """Whether a daemon answers ``ping`` on the socket."""
        if not self.socket_path.exists():
            return False
        try:
            self.call("ping")
        except IPCError:
            return False
        return True
