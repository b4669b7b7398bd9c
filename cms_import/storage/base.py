"""
Checkpoint store interface for import progress snapshots.

Design principles:
- A snapshot is a small JSON object, always written as a full overwrite
- A reader never observes a half-written snapshot
- The durability mechanism (local disk, S3) is swappable without touching the runner
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Optional


def encode_snapshot(data: dict[str, Any]) -> bytes:
    """Serialize a snapshot to UTF-8 JSON."""
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


def decode_snapshot(content: bytes) -> dict[str, Any]:
    """Parse snapshot bytes. Raises ValueError for anything but a JSON object."""
    data = json.loads(content.decode("utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Snapshot is not a JSON object")
    return data


class CheckpointStore(ABC):
    """
    Abstract interface for snapshot persistence.

    Implementations must:
    - Replace the previous snapshot atomically on save
    - Return None from load when no snapshot exists
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 's3', 'local')."""
        pass

    @abstractmethod
    def save(self, key: str, data: dict[str, Any]) -> None:
        """
        Persist a snapshot under key, overwriting any previous one.

        Raises:
            OSError / provider errors on failure; callers decide whether that is fatal
        """
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[dict[str, Any]]:
        """
        Load the snapshot stored under key.

        Returns:
            Snapshot dict, or None if not found
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a snapshot.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def describe(self, key: str) -> str:
        """Human-readable location of key, for the run summary."""
        pass
