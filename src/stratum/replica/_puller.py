"""Replica synchronization.

A replica has no transactions: each snapshot is a single pull of the
origin's signed manifest chain. The first pull fetches the full history,
later ones only what is new. Pulls are idempotent and safe to rerun after a
failure.
"""

from pathlib import Path

import pendulum
from structlog.typing import FilteringBoundLogger

from stratum.config import RepositoryConfig
from stratum.exceptions import SnapshotMarkerError, WrongRoleError
from stratum.services import ExternalPullService
from stratum.spool import SpoolArea
from stratum.utils import create_null_logger, write_atomic

LAST_SNAPSHOT_FILE_NAME = ".stratum_last_snapshot"


def last_snapshot_path(storage_dir: Path) -> Path:
    """Return the last-snapshot marker of a replica's storage."""
    return storage_dir / LAST_SNAPSHOT_FILE_NAME


def read_last_snapshot(storage_dir: Path) -> pendulum.DateTime | None:
    """Return the time of the last successful pull, if any.

    Raises:
        SnapshotMarkerError: If the marker holds something other than a
            timestamp.
    """
    path = last_snapshot_path(storage_dir)
    try:
        text = path.read_text().strip()
    except FileNotFoundError:
        return None
    if not text:
        return None
    msg = f"Last-snapshot marker {path} is not a timestamp: {text[:40]!r}"
    try:
        parsed = pendulum.parse(text)
    except ValueError as e:
        raise SnapshotMarkerError(msg, path=path) from e
    if not isinstance(parsed, pendulum.DateTime):
        raise SnapshotMarkerError(msg, path=path)
    return parsed




class ReplicaPuller:
    """Drives the pull service for one replica.

    Example:
        >>> puller = ReplicaPuller(config, pull=SwissknifePullService())
        >>> puller.snapshot()
        False
    """

    __slots__ = ("_config", "_logger", "_pull")

    def __init__(
        self,
        config: RepositoryConfig,
        *,
        pull: ExternalPullService,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._config = config
        self._pull = pull
        self._logger = (logger or create_null_logger()).bind(repository=config.name)

    @property
    def marker(self) -> Path:
        return last_snapshot_path(self._config.storage_dir)

    def snapshot(self) -> bool:
        """Pull new revisions from the origin.

        Returns:
            True if the pull was incremental.

        Raises:
            WrongRoleError: If the repository is an origin.
            ExternalCommandError: If the pull fails; the marker is untouched.
        """
        config = self._config
        if not config.is_replica:
            msg = f"Repository '{config.name}' is an origin, not a replica"
            raise WrongRoleError(msg, name=config.name, role=config.role)

        incremental = self.marker.exists()
        spool = SpoolArea.for_repository(config)
        self._logger.info(
            "snapshot_begin", origin=config.stratum0_url, incremental=incremental
        )

        _ = self._pull.pull(
            config.stratum0_url,
            config.upstream,
            spool.tmp,
            config.keys.public_key,
            config.replica.workers,
            config.replica.timeout,
            config.replica.retries,
            incremental=incremental,
            name=config.name,
        ).raise_for_status()

        now = pendulum.now("UTC").to_iso8601_string()
        write_atomic(self.marker, f"{now}\n")

        self._logger.info("snapshot_completed", at=now)
        return incremental
