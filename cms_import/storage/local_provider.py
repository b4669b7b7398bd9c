"""
Local filesystem checkpoint store.

Default provider. Snapshots are plain JSON files under a base directory.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from cms_import.storage.base import CheckpointStore, decode_snapshot, encode_snapshot

logger = logging.getLogger(__name__)


class LocalCheckpointStore(CheckpointStore):
    """
    Local filesystem checkpoint store.

    Writes go to a temp file in the target directory and are then moved into
    place with os.replace, so the previous snapshot stays intact until the new
    one is complete.

    Configuration:
    - LOCAL_STORAGE_PATH: Base directory (default: ./storage)
    """

    def __init__(self, base_path: str | None = None):
        """
        Initialize local storage.

        Args:
            base_path: Base directory for snapshots (or LOCAL_STORAGE_PATH env)
        """
        self._base_path = Path(base_path or os.getenv("LOCAL_STORAGE_PATH", "./storage"))
        self._base_path.mkdir(parents=True, exist_ok=True)

        logger.info(f"Local checkpoint store initialized: {self._base_path}")

    @property
    def name(self) -> str:
        return "local"

    def _get_path(self, key: str) -> Path:
        """Get filesystem path for key, with path traversal protection."""
        resolved = (self._base_path / key).resolve()
        if not resolved.is_relative_to(self._base_path.resolve()):
            raise ValueError("Path traversal detected")
        return resolved

    def save(self, key: str, data: dict[str, Any]) -> None:
        """Atomically replace the snapshot at key."""
        path = self._get_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(encode_snapshot(data))
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.debug(f"Snapshot saved: {key}")

    def load(self, key: str) -> dict[str, Any] | None:
        path = self._get_path(key)
        if not path.exists():
            return None
        return decode_snapshot(path.read_bytes())

    def delete(self, key: str) -> bool:
        path = self._get_path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def describe(self, key: str) -> str:
        return str(self._get_path(key))
