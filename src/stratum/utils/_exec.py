"""Execution utilities for external commands and hook scripts.

This module provides reusable utilities for executing external programs and
shell snippets with optional timeout handling, output capture, and error
management.
"""

import contextlib
import os
import shlex
import subprocess
import tempfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

# Default timeout for hook scripts in milliseconds
DEFAULT_TIMEOUT_MS: int = 60000  # 60 seconds

# Maximum output size in bytes
MAX_OUTPUT_BYTES: int = 102400  # 100KB


@dataclass(frozen=True, slots=True)
class ScriptConfig:
    """Configuration for command execution.

    Exactly one of ``argv``, ``command`` or ``script`` should be set.

    Attributes:
        argv: Program and arguments, executed without a shell.
        command: Single-line command to execute.
        script: Multi-line script content to execute via temp file.
        shell: Shell to use (default: /bin/sh for scripts, None for commands).
        cwd: Working directory for execution.
        env: Additional environment variables to set.
        stdin: Optional stdin data to pipe to the command.
        timeout_ms: Execution timeout in milliseconds, None to wait forever.
    """

    argv: tuple[str, ...] = ()
    command: str | None = None
    script: str | None = None
    shell: str | None = None
    cwd: str | Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    stdin: bytes | None = None
    timeout_ms: int | None = DEFAULT_TIMEOUT_MS


@dataclass(frozen=True, slots=True)
class ScriptResult:
    """Result from command execution.

    Attributes:
        success: Whether the command executed without errors.
        argv: The argv that was (or would have been) executed.
        exit_code: Process exit code, or None if execution failed.
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        error: Error message if execution failed (timeout, not found, etc.).
        timed_out: Whether the command timed out.
        command_not_found: Whether the command was not found.
    """

    success: bool
    argv: tuple[str, ...] = ()
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
    timed_out: bool = False
    command_not_found: bool = False

    @property
    def ok(self) -> bool:
        """Return True if the command ran and exited with status 0."""
        return self.success and self.exit_code == 0

    @property
    def diagnostics(self) -> str:
        """Return the most useful diagnostic text for a failed run."""
        return self.error or self.stderr.strip() or self.stdout.strip()


def truncate_output(output: str, max_bytes: int = MAX_OUTPUT_BYTES) -> str:
    """Truncate output to max bytes, preserving valid UTF-8.

    Args:
        output: The string to truncate.
        max_bytes: Maximum size in bytes.

    Returns:
        Truncated string with indicator if truncated.
    """
    if not output:
        return output

    encoded = output.encode("utf-8")
    if len(encoded) <= max_bytes:
        return output

    # Use 'ignore' to skip incomplete multi-byte sequences at the end
    truncated = encoded[:max_bytes].decode("utf-8", errors="ignore")

    return truncated + "\n... [output truncated]"


def build_command(config: ScriptConfig) -> tuple[list[str], str | None]:
    """Build command list and determine if temp file is needed.

    Args:
        config: Script configuration.

    Returns:
        Tuple of (command list, temp script path or None).
    """
    if config.argv:
        return list(config.argv), None

    if config.script:
        shell_cmd = config.shell or "/bin/sh"
        with tempfile.NamedTemporaryFile(mode="w", suffix=".sh", delete=False) as f:
            _ = f.write(config.script)
            return [shell_cmd, f.name], f.name

    if config.command:
        if config.shell:
            return [config.shell, "-c", config.command], None
        return shlex.split(config.command), None

    return [], None


def run_script(config: ScriptConfig) -> ScriptResult:
    """Execute an argv, a shell command or a script.

    Handles timeouts, missing commands, and captures stdout/stderr.

    Args:
        config: Script configuration specifying command, env, cwd, timeout, etc.

    Returns:
        ScriptResult with execution outcome.
    """
    cmd, temp_script_path = build_command(config)
    if not cmd:
        return ScriptResult(
            success=False,
            error="No command or script specified",
        )

    env = {**os.environ, **config.env}
    cwd = str(config.cwd) if config.cwd else None
    timeout_seconds = (
        config.timeout_ms / 1000.0 if config.timeout_ms is not None else None
    )

    try:
        result = subprocess.run(  # noqa: S603
            cmd,
            env=env,
            cwd=cwd,
            input=config.stdin,
            capture_output=True,
            timeout=timeout_seconds,
            check=False,
        )

        return ScriptResult(
            success=True,
            argv=tuple(cmd),
            exit_code=result.returncode,
            stdout=truncate_output(result.stdout.decode("utf-8", errors="replace")),
            stderr=truncate_output(result.stderr.decode("utf-8", errors="replace")),
        )

    except subprocess.TimeoutExpired:
        return ScriptResult(
            success=False,
            argv=tuple(cmd),
            error=f"Command timed out after {timeout_seconds}s",
            timed_out=True,
        )
    except FileNotFoundError as e:
        return ScriptResult(
            success=False,
            argv=tuple(cmd),
            error=str(e),
            command_not_found=True,
        )
    except OSError as e:
        return ScriptResult(
            success=False,
            argv=tuple(cmd),
            error=str(e),
        )
    finally:
        if temp_script_path:
            with contextlib.suppress(OSError):
                Path(temp_script_path).unlink()


def run_command(
    argv: Sequence[str],
    *,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
    timeout_ms: int | None = None,
) -> ScriptResult:
    """Execute a program with arguments, without a shell.

    External tools run to completion by default; pass ``timeout_ms`` to bound
    the run.

    Args:
        argv: Program and arguments.
        cwd: Working directory for execution.
        env: Additional environment variables to set.
        timeout_ms: Execution timeout in milliseconds, None to wait forever.

    Returns:
        ScriptResult with execution outcome.
    """
    return run_script(
        ScriptConfig(
            argv=tuple(argv),
            cwd=cwd,
            env=env or {},
            timeout_ms=timeout_ms,
        )
    )


def run_interactive(argv: Sequence[str]) -> ScriptResult:
    """Execute a program attached to the caller's terminal.

    Output is not captured, so an interactive debugger can talk to the
    operator. There is no timeout.

    Args:
        argv: Program and arguments.

    Returns:
        ScriptResult with the exit code and empty output.
    """
    cmd = list(argv)
    try:
        result = subprocess.run(cmd, check=False)  # noqa: S603
    except FileNotFoundError as e:
        return ScriptResult(
            success=False,
            argv=tuple(cmd),
            error=str(e),
            command_not_found=True,
        )
    except OSError as e:
        return ScriptResult(success=False, argv=tuple(cmd), error=str(e))
    return ScriptResult(success=True, argv=tuple(cmd), exit_code=result.returncode)


# Signature shared by run_command and the test doubles that replace it
type CommandRunner = Callable[[Sequence[str]], ScriptResult]
