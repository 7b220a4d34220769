# ruff: noqa: TC003  # Path needed at runtime for dataclass field
"""Per-repository spool area layout."""

from dataclasses import dataclass
from pathlib import Path
from typing import Self

from stratum.config import RepositoryConfig
from stratum.spool._skeleton import ensure_directory


@dataclass(frozen=True, slots=True)
class SpoolArea:
    """Working directories of one repository.

    Layout below ``root``::

        scratch/        writable upper layer of the union mount
        rdonly/         mount point of the read-only base layer
        tmp/            scratch space for the sync and pull tools
        cache/          cache of the read-only base client
        ofs_workdir/    overlay filesystem work directory
        in_transaction  transaction marker
        client.conf     configuration of the read-only base client

    Attributes:
        root: The spool directory.
    """

    root: Path

    @classmethod
    def for_repository(cls, config: RepositoryConfig) -> Self:
        """Return the spool area of a repository."""
        return cls(root=config.spool_dir)

    @property
    def scratch(self) -> Path:
        return self.root / "scratch"

    @property
    def rdonly(self) -> Path:
        return self.root / "rdonly"

    @property
    def tmp(self) -> Path:
        return self.root / "tmp"

    @property
    def cache(self) -> Path:
        return self.root / "cache"

    @property
    def ofs_workdir(self) -> Path:
        return self.root / "ofs_workdir"

    @property
    def marker(self) -> Path:
        return self.root / "in_transaction"

    @property
    def client_config(self) -> Path:
        return self.root / "client.conf"

    @property
    def directories(self) -> tuple[Path, ...]:
        """Return every directory of the layout."""
        return (
            self.root,
            self.scratch,
            self.rdonly,
            self.tmp,
            self.cache,
            self.ofs_workdir,
        )

    def create(self, owner: str | None = None) -> None:
        """Create all spool directories.

        The scratch and temp directories are handed to ``owner``; rdonly and
        cache stay with the invoking user, as the base client runs with it.

        Args:
            owner: Edit user, or None to leave ownership unchanged.
        """
        for directory in self.directories:
            ensure_directory(directory)
        if owner is not None:
            for directory in (self.root, self.scratch, self.tmp, self.ofs_workdir):
                ensure_directory(directory, owner=owner)
