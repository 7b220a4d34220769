"""Spool and storage directory management."""

from ._area import SpoolArea
from ._lock import TransactionLock
from ._skeleton import (
    BUCKET_COUNT,
    SELINUX_CONTENT_TYPE,
    apply_content_label,
    bucket_names,
    chown_tree,
    clear_and_recreate,
    clear_directory,
    create_skeleton,
    ensure_directory,
    remove_tree,
    selinux_enabled,
)

__all__ = [
    "BUCKET_COUNT",
    "SELINUX_CONTENT_TYPE",
    "SpoolArea",
    "TransactionLock",
    "apply_content_label",
    "bucket_names",
    "chown_tree",
    "clear_and_recreate",
    "clear_directory",
    "create_skeleton",
    "ensure_directory",
    "remove_tree",
    "selinux_enabled",
]
