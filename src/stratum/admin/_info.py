"""Repository status summaries."""

from dataclasses import asdict, dataclass
from typing import Any

from stratum.enums import RepositoryRole, TransactionState


@dataclass(frozen=True, slots=True)
class RepositoryInfo:
    """Snapshot of a repository's configuration and state.

    Attributes:
        name: Repository name.
        role: Origin or replica.
        owner: Edit user.
        stratum0_url: Public URL (origin) or pulled URL (replica).
        union_mount: Union mount point.
        spool_dir: Spool directory.
        storage_dir: Local storage.
        upstream: Upstream specification.
        state: Transaction state, None for replicas.
        root_hash: Root hash of the mounted base layer, if readable.
        whitelist_expires: Whitelist expiry (ISO-8601), if one exists.
        last_snapshot: Last successful pull (ISO-8601), replicas only.
    """

    name: str
    role: RepositoryRole
    owner: str
    stratum0_url: str
    union_mount: str
    spool_dir: str
    storage_dir: str
    upstream: str
    state: TransactionState | None = None
    root_hash: str | None = None
    whitelist_expires: str | None = None
    last_snapshot: str | None = None

    def to_dict(self) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
        """Return a JSON-serializable dictionary."""
        return asdict(self)

    def rows(self) -> list[tuple[str, str]]:
        """Return (label, value) pairs for plain output, skipping unset values."""
        pairs = [
            ("Name", self.name),
            ("Role", str(self.role)),
            ("Owner", self.owner),
            ("Stratum 0 URL", self.stratum0_url),
            ("Union mount", self.union_mount),
            ("Spool", self.spool_dir),
            ("Storage", self.storage_dir),
            ("Upstream", self.upstream),
            ("State", str(self.state) if self.state is not None else None),
            ("Root hash", self.root_hash),
            ("Whitelist expires", self.whitelist_expires),
            ("Last snapshot", self.last_snapshot),
        ]
        return [(label, value) for label, value in pairs if value is not None]
