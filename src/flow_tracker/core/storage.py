"""JSON document store with atomic writes."""

import json
import logging
import os
import shutil
import sys
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from flow_tracker.core.models import AppState

logger = logging.getLogger(__name__)

STATE_KEY = "app_state"


class StorageError(Exception):
    """Raised when the store cannot be read or written."""

    pass


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way."""
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class StateStore:
    """Durable store for the application document.

    The document lives under the ``app_state`` key of a JSON file. Every
    ``load`` reads the file again, so edits made by other processes are
    visible on the next call.
    """

    def __init__(self, data_dir: Optional[Path] = None, file_name: str = "store.json"):
        """Initialize the store.

        Args:
            data_dir: Directory holding the store file. Defaults to ~/.flow/data
            file_name: Name of the store file
        """
        if data_dir is None:
            data_dir = Path.home() / ".flow" / "data"

        self.data_dir = Path(data_dir).expanduser()
        self.store_file = self.data_dir / file_name
        self.lock_file = self.data_dir / f".{file_name}.lock"
        self.backup_dir = self.data_dir.parent / "backups"
        self._lock = threading.RLock()

        self.data_dir.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _file_lock(self, exclusive: bool) -> Iterator[None]:
        """Hold the advisory lock shared by every reader and writer of the store.

        The lock lives in a sidecar file because the store file itself is
        swapped out by each atomic replace.
        """
        with open(self.lock_file, "a+") as f:
            _lock_file(f, exclusive=exclusive)
            try:
                yield
            finally:
                _unlock_file(f)

    def _read_document(self) -> dict[str, Any]:
        """Read the whole store file.

        Returns:
            Top-level JSON object, empty if the file is missing or corrupt

        Raises:
            StorageError: If the file exists but cannot be read
        """
        try:
            with self._file_lock(exclusive=False):
                text = self.store_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            logger.warning(f"Could not decode {self.store_file}: {e}")
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self.store_file}: {e}") from e

        try:
            document = json.loads(text)
        except ValueError as e:
            logger.warning(f"Could not parse {self.store_file}: {e}")
            return {}

        if not isinstance(document, dict):
            logger.warning(f"Ignoring malformed store document in {self.store_file}")
            return {}
        return document

    def _write_document(self, document: dict[str, Any]) -> None:
        """Write the store file atomically using a temporary file and rename.

        Raises:
            StorageError: If the file cannot be written
        """
        temp_path: Optional[Path] = None
        try:
            with self._file_lock(exclusive=True):
                with tempfile.NamedTemporaryFile(
                    "w",
                    encoding="utf-8",
                    dir=self.data_dir,
                    prefix=f".{self.store_file.stem}-",
                    suffix=".tmp",
                    delete=False,
                ) as f:
                    temp_path = Path(f.name)
                    json.dump(document, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                temp_path.replace(self.store_file)
        except (OSError, TypeError, ValueError) as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to save {self.store_file}: {e}") from e

    def load(self) -> AppState:
        """Load the application document.

        Returns:
            Stored state, or the default empty state if absent or corrupt
        """
        data = self._read_document().get(STATE_KEY)
        if data is None:
            return AppState()

        try:
            return AppState.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Corrupt {STATE_KEY} in {self.store_file}, using defaults: {e}")
            return AppState()

    def save(self, state: AppState) -> None:
        """Replace the stored application document.

        Other top-level keys in the store file are kept.

        Args:
            state: State to persist

        Raises:
            StorageError: If the file cannot be written
        """
        with self._lock:
            document = self._read_document()
            document[STATE_KEY] = state.to_dict()
            self._write_document(document)

    @contextmanager
    def transaction(self) -> Iterator[AppState]:
        """Load, let the caller mutate, then save.

        Transactions in this process are serialized; the state is only saved
        when the block exits without an exception.

        Yields:
            Freshly loaded state
        """
        with self._lock:
            state = self.load()
            yield state
            self.save(state)

    def backup(self, label: Optional[str] = None) -> Optional[Path]:
        """Copy the store file into the backup directory.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to the backup file, or None if there is nothing to back up
        """
        if not self.store_file.exists():
            return None

        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = self.backup_dir / f"{self.store_file.stem}-{label}.json"
        shutil.copy2(self.store_file, backup_path)
        return backup_path
