"""
Checkpoint store abstraction for import progress snapshots.

Snapshots live on local disk by default or in S3 when STORAGE_PROVIDER=s3.
"""

from cms_import.storage.base import CheckpointStore
from cms_import.storage.local_provider import LocalCheckpointStore

__all__ = [
    "CheckpointStore",
    "LocalCheckpointStore",
]
