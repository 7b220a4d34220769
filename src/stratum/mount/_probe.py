"""Open-file probe reading /proc."""

import os
from pathlib import Path

PROC_ROOT = Path("/proc")


class ProcOpenFileProbe:
    """Finds processes with descriptors, cwd or root below a path.

    Processes that vanish or deny access while being scanned are skipped.
    """

    __slots__ = ("_proc_root",)

    def __init__(self, proc_root: Path = PROC_ROOT) -> None:
        self._proc_root = proc_root

    def _links(self, pid_dir: Path) -> list[Path]:
        links = [pid_dir / "cwd", pid_dir / "root"]
        try:
            links.extend((pid_dir / "fd").iterdir())
        except OSError:
            pass
        return links

    def open_handles(self, path: Path) -> list[int]:
        """Return the sorted pids using files below ``path``."""
        target = os.path.realpath(path)
        prefix = target.rstrip(os.sep) + os.sep
        pids: set[int] = set()

        try:
            entries = list(self._proc_root.iterdir())
        except OSError:
            return []

        for entry in entries:
            if not entry.name.isdigit():
                continue
            for link in self._links(entry):
                try:
                    resolved = os.readlink(link)
                except OSError:
                    continue
                # The root link of ordinary processes is "/", which is not a
                # handle on the mount
                if link.name == "root" and resolved == os.sep:
                    continue
                if resolved == target or resolved.startswith(prefix):
                    pids.add(int(entry.name))
                    break

        return sorted(pids)
