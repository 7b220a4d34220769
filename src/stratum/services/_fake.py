# ruff: noqa: TC003  # Path needed at runtime for dataclass fields
"""Fake external services for testing.

This module provides deterministic implementations of ExternalSyncService
and ExternalPullService that run no processes.
"""

import hashlib
from dataclasses import dataclass, field
from pathlib import Path

from stratum.enums import DebugMode
from stratum.services._protocol import ServiceResult, SyncResult


def content_root_hash(content: dict[str, bytes]) -> str:
    """Return a root hash over a path -> bytes mapping.

    The empty mapping hashes to the SHA-1 of nothing.
    """
    digest = hashlib.sha1()  # noqa: S324
    for path in sorted(content):
        digest.update(path.encode())
        digest.update(b"\0")
        digest.update(hashlib.sha1(content[path]).digest())  # noqa: S324
    return digest.hexdigest()


@dataclass(slots=True)
class FakeSyncService:
    """In-memory catalog sync and signing.

    Implements ExternalSyncService. ``sync`` folds every regular file of the
    scratch directory into ``content`` and moves ``root_hash`` to the hash of
    the result, which tests feed to a FakeMountController as its
    ``root_hash_source``.

    The fake maintains state that tests can inspect and manipulate:
    - ``content`` is the published tree, keyed by relative path
    - ``calls`` records (step, arguments) in order
    - ``fail_on`` names steps ("create", "sync", "sign", "check") that fail

    Example:
        >>> service = FakeSyncService()
        >>> service.fail_on.add("check")
        >>> service.check(Path("/srv/stratum/acme.example.org")).success
        False
    """

    content: dict[str, bytes] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    fail_on: set[str] = field(default_factory=set)
    signed: list[Path] = field(default_factory=list)

    @property
    def root_hash(self) -> str:
        """Return the root hash of the published tree."""
        return content_root_hash(self.content)

    def _argv(
        self, step: str, debug_mode: DebugMode = DebugMode.NONE
    ) -> tuple[str, ...]:
        executable = "fake_swissknife"
        if debug_mode is DebugMode.DEBUG_BINARY:
            executable = f"{executable}_debug"
        argv = (executable, step)
        if debug_mode is DebugMode.DEBUGGER:
            argv = ("gdb", "--args", *argv)
        return argv

    def _result(
        self, step: str, debug_mode: DebugMode = DebugMode.NONE
    ) -> ServiceResult:
        argv = self._argv(step, debug_mode)
        if step in self.fail_on:
            return ServiceResult(
                success=False,
                argv=argv,
                exit_code=1,
                stderr=f"injected {step} failure",
            )
        return ServiceResult(success=True, argv=argv, exit_code=0)

    def create(self, tmp_dir: Path, upstream: str, manifest: Path) -> ServiceResult:
        self.calls.append(
            ("create", {"tmp_dir": tmp_dir, "upstream": upstream, "manifest": manifest})
        )
        result = self._result("create")
        if result.success:
            self.content.clear()
        return result

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
        self.calls.append(
            (
                "sync",
                {
                    "union_view": union_view,
                    "scratch_dir": scratch_dir,
                    "base_dir": base_dir,
                    "tmp_dir": tmp_dir,
                    "base_hash": base_hash,
                    "upstream": upstream,
                    "manifest": manifest,
                    "hash_algorithm": hash_algorithm,
                    "debug_mode": debug_mode,
                },
            )
        )
        result = self._result("sync", debug_mode)
        if not result.success:
            return SyncResult(
                success=False,
                argv=result.argv,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        if scratch_dir.is_dir():
            for path in scratch_dir.rglob("*"):
                if path.is_file():
                    relative = path.relative_to(scratch_dir).as_posix()
                    self.content[relative] = path.read_bytes()
        return SyncResult(
            success=True, argv=result.argv, exit_code=0, manifest=manifest
        )

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
        self.calls.append(
            (
                "sign",
                {
                    "manifest": manifest,
                    "certificate": certificate,
                    "private_key": private_key,
                    "name": name,
                    "upstream": upstream,
                    "tmp_dir": tmp_dir,
                    "debug_mode": debug_mode,
                },
            )
        )
        result = self._result("sign", debug_mode)
        if result.success:
            self.signed.append(manifest)
        return result

    def check(self, storage_dir: Path) -> ServiceResult:
        self.calls.append(("check", {"storage_dir": storage_dir}))
        return self._result("check")

    # =========================================================================
    # Test Helpers
    # =========================================================================

    def steps(self) -> list[str]:
        """Return the recorded step names in order."""
        return [step for step, _ in self.calls]


@dataclass(slots=True)
class FakePullService:
    """Replica pull that copies a revision identifier.

    Implements ExternalPullService. A successful pull sets ``revision`` to
    ``origin_revision``; pulling an unchanged origin again leaves it as is.

    Attributes:
        origin_revision: Root hash currently published by the origin.
        revision: Root hash of the replica's content, None before any pull.
        calls: Keyword arguments of every pull, in order.
        fail: Whether pulls fail.
    """

    origin_revision: str = field(default_factory=lambda: content_root_hash({}))
    revision: str | None = None
    calls: list[dict[str, object]] = field(default_factory=list)
    fail: bool = False

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
        self.calls.append(
            {
                "origin_url": origin_url,
                "upstream": upstream,
                "tmp_dir": tmp_dir,
                "public_key": public_key,
                "workers": workers,
                "timeout": timeout,
                "retries": retries,
                "incremental": incremental,
                "name": name,
            }
        )
        argv = ("fake_swissknife", "pull", "-m", name, "-u", origin_url)
        if self.fail:
            return ServiceResult(
                success=False, argv=argv, exit_code=1, stderr="injected pull failure"
            )
        self.revision = self.origin_revision
        return ServiceResult(success=True, argv=argv, exit_code=0)
