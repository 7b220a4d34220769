# ruff: noqa: TC003  # Path needed at runtime for dataclass fields and Protocols
"""Protocols and result types for the external content services.

The catalog sync, manifest signing, integrity check and replica pull steps
run in external processes. The state machine only sees these Protocols, so
tests substitute deterministic fakes.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Self, runtime_checkable

from stratum.enums import DebugMode
from stratum.exceptions import ExternalCommandError
from stratum.utils import ScriptResult


@dataclass(frozen=True, slots=True)
class ServiceResult:
    """Pass/fail outcome of an external step.

    Attributes:
        success: Whether the step completed with exit status 0.
        argv: The exact argv that was executed.
        exit_code: Process exit code, or None if the process never finished.
        stdout: Captured standard output.
        stderr: Captured standard error.
        error: Execution error (timeout, missing executable), if any.
    """

    success: bool
    argv: tuple[str, ...] = ()
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @classmethod
    def from_script_result(cls, result: ScriptResult) -> Self:
        """Convert the result of a command run."""
        return cls(
            success=result.ok,
            argv=result.argv,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
            error=result.error,
        )

    def raise_for_status(self) -> Self:
        """Return self if the step succeeded.

        Raises:
            ExternalCommandError: Carrying the argv and captured output.
        """
        if self.success:
            return self
        detail = self.error or self.stderr.strip() or self.stdout.strip()
        if self.exit_code is not None:
            msg = f"{self.step} failed with exit code {self.exit_code}"
        else:
            msg = f"{self.step} failed"
        if detail:
            msg = f"{msg}: {detail}"
        raise ExternalCommandError(
            msg,
            command=self.argv,
            exit_code=self.exit_code,
            stdout=self.stdout,
            stderr=self.stderr or (self.error or ""),
        )

    @property
    def step(self) -> str:
        """Return a short name of the step for messages."""
        if len(self.argv) >= 2:  # noqa: PLR2004
            return f"{Path(self.argv[0]).name} {self.argv[1]}"
        if self.argv:
            return Path(self.argv[0]).name
        return "External command"


@dataclass(frozen=True, slots=True)
class SyncResult(ServiceResult):
    """Outcome of a sync step.

    Attributes:
        manifest: The unsigned manifest written by a successful sync.
    """

    manifest: Path | None = None


@runtime_checkable
class ExternalSyncService(Protocol):
    """Protocol for the catalog sync and manifest signing service."""

    def create(self, tmp_dir: Path, upstream: str, manifest: Path) -> ServiceResult:
        """Create the initial, empty revision of a repository."""
        ...

    def sync(
        self,
        union_view: Path,
        scratch_dir: Path,
        base_dir: Path,
        tmp_dir: Path,
        base_hash: str,
        upstream: str,
        manifest: Path,
        hash_algorithm: str,
        *,
        debug_mode: DebugMode = DebugMode.NONE,
    ) -> SyncResult:
        """Fold the scratch layer over the base revision into a new revision."""
        ...

    def sign(
        self,
        manifest: Path,
        certificate: Path,
        private_key: Path,
        name: str,
        upstream: str,
        tmp_dir: Path,
        *,
        debug_mode: DebugMode = DebugMode.NONE,
    ) -> ServiceResult:
        """Sign a manifest and upload it next to the content."""
        ...

    def check(self, storage_dir: Path) -> ServiceResult:
        """Verify the integrity of a repository's storage."""
        ...


@runtime_checkable
class ExternalPullService(Protocol):
    """Protocol for the replica pull service."""

    def pull(
        self,
        origin_url: str,
        upstream: str,
        tmp_dir: Path,
        public_key: Path,
        workers: int,
        timeout: int,
        retries: int,
        *,
        incremental: bool,
        name: str,
    ) -> ServiceResult:
        """Fetch and verify the origin's manifest chain into local storage."""
        ...
