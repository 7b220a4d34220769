"""Mount controller backed by the system mount and umount tools.

Mount points are expected to have `noauto` entries in the mount table file
(see `stratum.mount._fstab`), so every call only names the mount point and
the access mode.
"""

import os
from pathlib import Path

from structlog.typing import FilteringBoundLogger

from stratum.config import ToolsConfig
from stratum.enums import MountMode
from stratum.exceptions import MountError
from stratum.mount._protocol import ROOT_HASH_XATTR
from stratum.utils import CommandRunner, create_null_logger, run_command

PROC_MOUNTS = Path("/proc/mounts")


def _unescape_mount_field(field: str) -> str:
    """Decode the octal escapes used by /proc/mounts (space, tab, newline)."""
    escapes = (("\\040", " "), ("\\011", "\t"), ("\\012", "\n"), ("\\134", "\\"))
    for escaped, plain in escapes:
        field = field.replace(escaped, plain)
    return field


class SystemMountController:
    """Drives kernel mount state through external mount tools.

    Attributes:
        tools: Executable names for mount and umount.
    """

    __slots__ = ("_logger", "_mounts_file", "_runner", "tools")

    def __init__(
        self,
        tools: ToolsConfig | None = None,
        *,
        runner: CommandRunner = run_command,
        mounts_file: Path = PROC_MOUNTS,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.tools = tools or ToolsConfig()
        self._runner = runner
        self._mounts_file = mounts_file
        self._logger = logger or create_null_logger()

    def _run(self, path: Path, operation: str, argv: list[str]) -> None:
        self._logger.debug(
            "mount_command", operation=operation, path=str(path), argv=argv
        )
        result = self._runner(argv)
        if not result.ok:
            detail = result.diagnostics or "unknown error"
            msg = f"Failed to {operation} {path}: {detail}"
            self._logger.error(
                "mount_failed",
                operation=operation,
                path=str(path),
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
            raise MountError(
                msg,
                path=path,
                operation=operation,
                command=argv,
                stderr=result.diagnostics,
            )

    def mount_read_only(self, path: Path) -> None:
        argv = [self.tools.mount, "-o", MountMode.READ_ONLY, str(path)]
        self._run(path, "mount", argv)

    def mount_read_write(self, path: Path) -> None:
        argv = [self.tools.mount, "-o", MountMode.READ_WRITE, str(path)]
        self._run(path, "mount", argv)

    def unmount(self, path: Path) -> None:
        self._run(path, "umount", [self.tools.umount, str(path)])

    def remount(self, path: Path, mode: MountMode) -> None:
        argv = [self.tools.mount, "-o", f"remount,{mode}", str(path)]
        self._run(path, "remount", argv)

    def is_mounted(self, path: Path) -> bool:
        """Return True if ``path`` appears as a mount point in /proc/mounts."""
        target = os.path.realpath(path)
        try:
            lines = self._mounts_file.read_text().splitlines()
        except OSError as e:
            msg = f"Cannot read mount table {self._mounts_file}: {e}"
            raise MountError(
                msg, path=path, operation="inspect", stderr=str(e)
            ) from e
        for line in lines:
            fields = line.split()
            if len(fields) >= 2 and _unescape_mount_field(fields[1]) == target:  # noqa: PLR2004
                return True
        return False

    def root_hash(self, path: Path) -> str:
        """Read the root hash extended attribute of a base mount."""
        try:
            return os.getxattr(path, ROOT_HASH_XATTR).decode().strip()
        except OSError as e:
            msg = f"Cannot read {ROOT_HASH_XATTR} of {path}: {e.strerror or e}"
            raise MountError(msg, path=path, operation="getxattr", stderr=str(e)) from e
