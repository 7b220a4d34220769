"""Mount table entries for repository mount points.

Each repository contributes a fenced block to the mount table file::

    # stratum:acme.example.org begin
    cvmfs2#acme.example.org /var/spool/stratum/acme.example.org/rdonly fuse ...
    overlay_acme.example.org /cvmfs/acme.example.org overlay ...
    # stratum:acme.example.org end

Both entries are `noauto`, so nothing mounts at boot behind stratum's back,
and the mount controller only has to name the mount point.
"""

from pathlib import Path

from stratum.config import RepositoryConfig, ToolsConfig
from stratum.spool import SpoolArea
from stratum.utils import write_atomic


def _fence(name: str, edge: str) -> str:
    return f"# stratum:{name} {edge}"


def build_mount_entries(
    config: RepositoryConfig,
    tools: ToolsConfig | None = None,
) -> list[str]:
    """Return the read-only base and union mount lines of a repository.

    Args:
        config: Repository configuration.
        tools: Executable names (the FUSE client prefixes the base entry).

    Returns:
        Two fstab lines: base layer first, union second.
    """
    tools = tools or ToolsConfig()
    spool = SpoolArea.for_repository(config)
    base = (
        f"{tools.fuse_client}#{config.name} {spool.rdonly} fuse "
        f"allow_other,config={spool.client_config},cvmfs_suid,noauto 0 0"
    )
    union = (
        f"overlay_{config.name} {config.union_mount} overlay "
        f"upperdir={spool.scratch},lowerdir={spool.rdonly},"
        f"workdir={spool.ofs_workdir},noauto,ro 0 0"
    )
    return [base, union]


class FstabEditor:
    """Adds and removes repository blocks in a mount table file."""

    __slots__ = ("_path",)

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _lines(self) -> list[str]:
        if not self._path.is_file():
            return []
        return self._path.read_text().splitlines()

    def entries(self, name: str) -> list[str]:
        """Return the lines of a repository's block, without the fences."""
        begin, end = _fence(name, "begin"), _fence(name, "end")
        inside = False
        found: list[str] = []
        for line in self._lines():
            if line == begin:
                inside = True
            elif line == end:
                inside = False
            elif inside:
                found.append(line)
        return found

    def remove_entries(self, name: str) -> bool:
        """Drop a repository's block.

        Returns:
            True if a block was removed.
        """
        begin, end = _fence(name, "begin"), _fence(name, "end")
        kept: list[str] = []
        inside = False
        removed = False
        for line in self._lines():
            if line == begin:
                inside = removed = True
            elif line == end:
                inside = False
            elif not inside:
                kept.append(line)
        if removed:
            write_atomic(self._path, "\n".join(kept) + "\n" if kept else "")
        return removed

    def add_entries(self, name: str, lines: list[str]) -> None:
        """Write a repository's block, replacing any previous one."""
        _ = self.remove_entries(name)
        current = self._lines()
        block = [_fence(name, "begin"), *lines, _fence(name, "end")]
        write_atomic(self._path, "\n".join([*current, *block]) + "\n")
