"""stratum exceptions."""

import shlex
from collections.abc import Sequence
from pathlib import Path
from typing import Any


class StratumError(Exception):
    """Base exception for stratum errors."""


class UsageError(StratumError):
    """Raised when the command line is invalid.

    An empty message means plain usage should be shown instead of an error.
    """


class ConfirmationDeclinedError(StratumError):
    """Raised when the operator declines a destructive operation."""


# =============================================================================
# Precondition Exceptions
# =============================================================================


class PreconditionError(StratumError):
    """Base exception for failed preconditions.

    Raised before any mutation takes place, so the repository is untouched.
    """


class RepositoryNotFoundError(PreconditionError, KeyError):
    """Raised when a repository is not registered on this host.

    Attributes:
        name: The repository name that was looked up.
    """

    def __init__(self, message: str, *, name: str) -> None:
        """Initialize with error message and repository name.

        Args:
            message: Human-readable error message.
            name: The repository name that was looked up.
        """
        super().__init__(message)
        self.name: str = name

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return str(self.args[0])


class RepositoryExistsError(PreconditionError):
    """Raised when creating a repository whose name is already taken."""

    def __init__(self, message: str, *, name: str) -> None:
        """Initialize with error message and repository name."""
        super().__init__(message)
        self.name: str = name


class UnknownOwnerError(PreconditionError):
    """Raised when a repository owner is not a user on this host."""

    def __init__(self, message: str, *, owner: str) -> None:
        """Initialize with error message and the rejected owner."""
        super().__init__(message)
        self.owner: str = owner


class WrongRoleError(PreconditionError):
    """Raised when an operation does not apply to the repository's role.

    Attributes:
        name: The repository name.
        role: The role the repository actually has.
    """

    def __init__(self, message: str, *, name: str, role: str) -> None:
        """Initialize with error message and role context."""
        super().__init__(message)
        self.name: str = name
        self.role: str = role


class AlreadyInTransactionError(PreconditionError):
    """Raised when opening a transaction on a repository that has one."""


class NotInTransactionError(PreconditionError):
    """Raised when closing a transaction that was never opened."""


class ResourceBusyError(PreconditionError):
    """Raised when processes hold open handles below a mount point.

    Attributes:
        path: The mount point that was probed.
        pids: Process IDs holding handles below the path.
    """

    def __init__(self, message: str, *, path: Path, pids: Sequence[int]) -> None:
        """Initialize with error message and probe context.

        Args:
            message: Human-readable error message.
            path: The mount point that was probed.
            pids: Process IDs holding handles below the path.
        """
        super().__init__(message)
        self.path: Path = path
        self.pids: tuple[int, ...] = tuple(pids)


# =============================================================================
# Fatal Mid-Operation Exceptions
# =============================================================================


class MountError(StratumError):
    """Raised when a mount, unmount or remount fails.

    Attributes:
        path: The mount point.
        operation: The attempted operation ("mount", "umount", "remount").
        command: The argv that was executed, if any.
        stderr: Diagnostic output of the failed command or OS error text.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        operation: str,
        command: Sequence[str] = (),
        stderr: str = "",
    ) -> None:
        """Initialize with error message and mount context."""
        super().__init__(message)
        self.path: Path = path
        self.operation: str = operation
        self.command: tuple[str, ...] = tuple(command)
        self.stderr: str = stderr

    @property
    def command_line(self) -> str:
        """Return the failed command as a shell-quoted string."""
        return shlex.join(self.command)


class ExternalCommandError(StratumError):
    """Raised when an external sync, sign, pull or check step fails.

    Attributes:
        command: The exact argv that was executed.
        exit_code: Process exit code, or None if it never ran to completion.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Initialize with error message and process context.

        Args:
            message: Human-readable error message.
            command: The exact argv that was executed.
            exit_code: Process exit code, or None if it never completed.
            stdout: Captured standard output.
            stderr: Captured standard error.
        """
        super().__init__(message)
        self.command: tuple[str, ...] = tuple(command)
        self.exit_code: int | None = exit_code
        self.stdout: str = stdout
        self.stderr: str = stderr

    @property
    def command_line(self) -> str:
        """Return the failed command as a shell-quoted string."""
        return shlex.join(self.command)


class SigningError(StratumError):
    """Raised when key material or a whitelist is unusable.

    Covers unreadable keys, malformed whitelists and failed signature
    verification.
    """


class SnapshotMarkerError(StratumError):
    """Raised when a replica's last-snapshot marker cannot be parsed.

    Attributes:
        path: The marker file.
    """

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path: Path = path


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(StratumError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source
