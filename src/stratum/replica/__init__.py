"""Replica synchronization."""

from ._puller import (
    LAST_SNAPSHOT_FILE_NAME,
    ReplicaPuller,
    last_snapshot_path,
    read_last_snapshot,
)

__all__ = [
    "LAST_SNAPSHOT_FILE_NAME",
    "ReplicaPuller",
    "last_snapshot_path",
    "read_last_snapshot",
]
