"""External services backed by the swissknife tool."""

from pathlib import Path

from structlog.typing import FilteringBoundLogger

from stratum.config import ToolsConfig
from stratum.enums import DebugMode
from stratum.services._protocol import ServiceResult, SyncResult
from stratum.utils import (
    CommandRunner,
    create_null_logger,
    run_command,
    run_interactive,
)

DEBUG_SUFFIX = "_debug"


class _SwissknifeService:
    __slots__ = ("_interactive_runner", "_logger", "_runner", "tools")

    def __init__(
        self,
        tools: ToolsConfig | None = None,
        *,
        runner: CommandRunner = run_command,
        interactive_runner: CommandRunner = run_interactive,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.tools = tools or ToolsConfig()
        self._runner = runner
        self._interactive_runner = interactive_runner
        self._logger = logger or create_null_logger()

    def build_argv(
        self,
        subcommand: str,
        arguments: list[str],
        debug_mode: DebugMode = DebugMode.NONE,
    ) -> list[str]:
        """Return the argv of a swissknife subcommand.

        Args:
            subcommand: e.g. "sync".
            arguments: Options following the subcommand.
            debug_mode: Execution wrapper.

        Returns:
            The argv to execute.
        """
        executable = self.tools.swissknife
        if debug_mode is DebugMode.DEBUG_BINARY:
            executable = f"{executable}{DEBUG_SUFFIX}"
        argv = [executable, subcommand, *arguments]
        if debug_mode is DebugMode.DEBUGGER:
            argv = [self.tools.debugger, "--args", *argv]
        return argv

    def _run(
        self, argv: list[str], debug_mode: DebugMode = DebugMode.NONE
    ) -> ServiceResult:
        self._logger.info("external_command", argv=argv, debug_mode=str(debug_mode))
        if debug_mode is DebugMode.DEBUGGER:
            result = self._interactive_runner(argv)
        else:
            result = self._runner(argv)
        outcome = ServiceResult.from_script_result(result)
        if not outcome.success:
            self._logger.error(
                "external_command_failed",
                argv=argv,
                exit_code=outcome.exit_code,
                stderr=outcome.stderr,
                error=outcome.error,
            )
        return outcome


class SwissknifeSyncService(_SwissknifeService):
    """Creates, syncs, signs and checks repositories with swissknife.

    Example:
        >>> service = SwissknifeSyncService()
        >>> result = service.check(Path("/srv/stratum/acme.example.org"))
        >>> result.success
        True
    """

    __slots__ = ()

    def create(self, tmp_dir: Path, upstream: str, manifest: Path) -> ServiceResult:
        argv = self.build_argv(
            "create", ["-t", str(tmp_dir), "-r", upstream, "-o", str(manifest)]
        )
        return self._run(argv)

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
        arguments = [
            "-x",
            "-u",
            str(union_view),
            "-s",
            str(scratch_dir),
            "-c",
            str(base_dir),
            "-t",
            str(tmp_dir),
            "-b",
            base_hash,
            "-r",
            upstream,
            "-o",
            str(manifest),
            "-e",
            hash_algorithm,
        ]
        outcome = self._run(self.build_argv("sync", arguments, debug_mode), debug_mode)
        return SyncResult(
            success=outcome.success,
            argv=outcome.argv,
            exit_code=outcome.exit_code,
            stdout=outcome.stdout,
            stderr=outcome.stderr,
            error=outcome.error,
            manifest=manifest if outcome.success else None,
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
        arguments = [
            "-c",
            str(certificate),
            "-k",
            str(private_key),
            "-n",
            name,
            "-m",
            str(manifest),
            "-t",
            str(tmp_dir),
            "-r",
            upstream,
        ]
        return self._run(self.build_argv("sign", arguments, debug_mode), debug_mode)

    def check(self, storage_dir: Path) -> ServiceResult:
        return self._run(self.build_argv("check", ["-r", str(storage_dir)]))


class SwissknifePullService(_SwissknifeService):
    """Pulls an origin's revisions into a replica with swissknife."""

    __slots__ = ()

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
        arguments = [
            "-m",
            name,
            "-u",
            origin_url,
            "-r",
            upstream,
            "-x",
            str(tmp_dir),
            "-k",
            str(public_key),
            "-n",
            str(workers),
            "-t",
            str(timeout),
            "-a",
            str(retries),
        ]
        if incremental:
            arguments.append("-i")
        return self._run(self.build_argv("pull", arguments))
