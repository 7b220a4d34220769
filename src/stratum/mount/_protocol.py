# ruff: noqa: TC003  # Path needed at runtime for Protocol method bodies
"""Mount controller protocol for type-safe dependency injection.

This module defines the runtime-checkable Protocols that the system mount
controller and its fake satisfy, so the transaction state machine can be
exercised without touching kernel mount state.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from stratum.enums import MountMode

ROOT_HASH_XATTR = "user.root_hash"


@runtime_checkable
class MountController(Protocol):
    """Protocol for mount, unmount and remount of repository mount points.

    Every operation is synchronous: when it returns, the new mount state is
    visible to subsequent filesystem access. Failures raise MountError and
    must propagate.
    """

    def mount_read_only(self, path: Path) -> None:
        """Mount the filesystem configured for ``path`` read-only."""
        ...

    def mount_read_write(self, path: Path) -> None:
        """Mount the filesystem configured for ``path`` read-write."""
        ...

    def unmount(self, path: Path) -> None:
        """Unmount ``path``."""
        ...

    def remount(self, path: Path, mode: MountMode) -> None:
        """Change the access mode of the mounted ``path``."""
        ...

    def is_mounted(self, path: Path) -> bool:
        """Return True if something is mounted at ``path``."""
        ...

    def root_hash(self, path: Path) -> str:
        """Return the content root hash exposed by a read-only base mount."""
        ...


@runtime_checkable
class OpenFileProbe(Protocol):
    """Protocol for detecting processes that use files below a path."""

    def open_handles(self, path: Path) -> list[int]:
        """Return the sorted pids holding descriptors below ``path``."""
        ...
