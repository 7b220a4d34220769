# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake mount controller and open-file probe for testing.

This module provides in-memory implementations of MountController and
OpenFileProbe for use in tests without kernel mounts or /proc.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from stratum.enums import MountMode
from stratum.exceptions import MountError


@dataclass(slots=True)
class FakeMountController:
    """In-memory mount table.

    Implements MountController. Mounting an already mounted path, or
    unmounting / remounting a path that is not mounted, fails the way the
    real tools do.

    The fake maintains state that tests can inspect and manipulate:
    - ``table`` maps mount points to their current mode
    - ``calls`` records every operation in order
    - ``fail_on`` holds (operation, path) pairs that raise MountError
    - ``root_hash_source`` is sampled whenever a path is mounted read-only,
      so a base layer only reflects new content after a remount

    Example:
        >>> mounts = FakeMountController(root_hash_source=lambda: "abc")
        >>> mounts.mount_read_only(Path("/spool/rdonly"))
        >>> mounts.root_hash(Path("/spool/rdonly"))
        'abc'
    """

    table: dict[Path, MountMode] = field(default_factory=dict)
    calls: list[tuple[str, Path, MountMode | None]] = field(default_factory=list)
    fail_on: set[tuple[str, Path]] = field(default_factory=set)
    root_hash_source: Callable[[], str] | None = None
    root_hashes: dict[Path, str] = field(default_factory=dict)

    def _check_failure(self, operation: str, path: Path) -> None:
        if (operation, path) in self.fail_on:
            msg = f"Failed to {operation} {path}: injected failure"
            raise MountError(
                msg, path=path, operation=operation, stderr="injected failure"
            )

    def _mount(self, path: Path, mode: MountMode) -> None:
        self.calls.append(("mount", path, mode))
        self._check_failure("mount", path)
        if path in self.table:
            msg = f"Failed to mount {path}: already mounted"
            raise MountError(msg, path=path, operation="mount")
        self.table[path] = mode
        if mode is MountMode.READ_ONLY and self.root_hash_source is not None:
            self.root_hashes[path] = self.root_hash_source()

    def mount_read_only(self, path: Path) -> None:
        self._mount(path, MountMode.READ_ONLY)

    def mount_read_write(self, path: Path) -> None:
        self._mount(path, MountMode.READ_WRITE)

    def unmount(self, path: Path) -> None:
        self.calls.append(("umount", path, None))
        self._check_failure("umount", path)
        if path not in self.table:
            msg = f"Failed to umount {path}: not mounted"
            raise MountError(msg, path=path, operation="umount")
        del self.table[path]
        _ = self.root_hashes.pop(path, None)

    def remount(self, path: Path, mode: MountMode) -> None:
        self.calls.append(("remount", path, mode))
        self._check_failure("remount", path)
        if path not in self.table:
            msg = f"Failed to remount {path}: not mounted"
            raise MountError(msg, path=path, operation="remount")
        self.table[path] = mode

    def is_mounted(self, path: Path) -> bool:
        return path in self.table

    def root_hash(self, path: Path) -> str:
        self._check_failure("getxattr", path)
        if path not in self.root_hashes:
            msg = f"Cannot read root hash of {path}: not a mounted base layer"
            raise MountError(msg, path=path, operation="getxattr")
        return self.root_hashes[path]

    # =========================================================================
    # Test Helpers
    # =========================================================================

    def mode(self, path: Path) -> MountMode | None:
        """Return the current mode of ``path``, or None if unmounted."""
        return self.table.get(path)

    def operations(self) -> list[str]:
        """Return the recorded operation names in order."""
        return [operation for operation, _, _ in self.calls]


@dataclass(slots=True)
class FakeOpenFileProbe:
    """Open-file probe answering from a preset mapping.

    Attributes:
        handles: Pids reported for each probed path.
        probed: Paths probed so far.
    """

    handles: dict[Path, list[int]] = field(default_factory=dict)
    probed: list[Path] = field(default_factory=list)

    def open_handles(self, path: Path) -> list[int]:
        self.probed.append(path)
        return sorted(self.handles.get(path, []))
