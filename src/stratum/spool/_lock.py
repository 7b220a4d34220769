"""Transaction marker lock.

The marker file is an advisory, single-writer, crash-visible lock: it
survives a killed process, and its presence alone means the repository is
in a transaction. There are no waiters; contenders fail fast.
"""

import os
from pathlib import Path

import pendulum

from stratum.exceptions import AlreadyInTransactionError, NotInTransactionError


class TransactionLock:
    """Acquire/release contract over the transaction marker file.

    Example:
        >>> lock = TransactionLock(Path("/var/spool/stratum/acme/in_transaction"))
        >>> lock.acquire()
        >>> lock.held
        True
        >>> lock.release()
    """

    __slots__ = ("_path",)

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return the marker path."""
        return self._path

    @property
    def held(self) -> bool:
        """Return True if the marker exists."""
        return self._path.exists()

    def acquire(self) -> None:
        """Create the marker.

        Creation is exclusive, so two concurrent callers cannot both succeed.

        Raises:
            AlreadyInTransactionError: If the marker already exists.
        """
        try:
            fd = os.open(self._path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as e:
            msg = f"Marker {self._path} exists: already in a transaction"
            raise AlreadyInTransactionError(msg) from e
        try:
            _ = os.write(fd, f"{pendulum.now('UTC').to_iso8601_string()}\n".encode())
        finally:
            os.close(fd)

    def release(self) -> None:
        """Remove the marker.

        Raises:
            NotInTransactionError: If the marker does not exist.
        """
        try:
            self._path.unlink()
        except FileNotFoundError as e:
            msg = "Not in a transaction."
            raise NotInTransactionError(msg) from e

    def acquired_at(self) -> str | None:
        """Return the timestamp written at acquisition, if the marker exists."""
        try:
            return self._path.read_text().strip() or None
        except FileNotFoundError:
            return None
