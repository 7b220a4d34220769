# pyright: reportExplicitAny=false
"""Unit tests for the shared CLI utilities module."""

from io import StringIO
from pathlib import Path
from typing import Any

import orjson
import pytest
from rich.console import Console

from stratum.cli._commands._shared import (
    ExitCode,
    confirm_on_tty,
    exit_with_error,
    exit_with_usage,
    format_json,
    get_error_console,
    reporting_errors,
)
from stratum.exceptions import (
    ConfigLoadError,
    ConfirmationDeclinedError,
    ExternalCommandError,
    MountError,
    RepositoryNotFoundError,
    UsageError,
)
from stratum.utils import create_null_logger


def _console() -> tuple[Console, StringIO]:
    output = StringIO()
    return Console(file=output, width=200, color_system=None, highlight=False), output


class TestExitCode:
    def test_values(self) -> None:
        assert issubclass(ExitCode, int)
        assert ExitCode.SUCCESS == 0
        assert ExitCode.FAILURE == 1
        assert ExitCode.USAGE == 2
        assert ExitCode.USAGE_ERROR == 3

    def test_usable_with_system_exit(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            raise SystemExit(ExitCode.USAGE_ERROR)
        assert exc_info.value.code == 3


class TestFormatJson:
    def test_indented(self) -> None:
        data: dict[str, Any] = {"name": "acme.example.org", "root_hash": None}
        result = format_json(data)
        assert "\n" in result
        assert orjson.loads(result) == data

    def test_compact(self) -> None:
        assert format_json([1, "two"], indent=False) == '[1,"two"]'

    def test_unicode(self) -> None:
        assert "Grüße" in format_json({"owner": "Grüße"})


class TestConsoles:
    def test_error_console_writes_to_stderr(self) -> None:
        assert get_error_console().stderr is True

    def test_confirm_without_terminal_declines(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("sys.stdin", StringIO("y\n"))
        assert confirm_on_tty("Are you sure") is False


class TestExitHelpers:
    def test_exit_with_error(self) -> None:
        console, output = _console()

        with pytest.raises(SystemExit) as exc_info:
            exit_with_error("storage [broken]", console=console, command="tool -x")

        assert exc_info.value.code == ExitCode.FAILURE
        assert output.getvalue() == "Error: storage [broken]\nCommand: tool -x\n"

    def test_exit_with_usage_without_message(self) -> None:
        console, output = _console()

        with pytest.raises(SystemExit) as exc_info:
            exit_with_usage(console=console)

        assert exc_info.value.code == ExitCode.USAGE
        assert output.getvalue() == ""

    def test_exit_with_usage_message(self) -> None:
        console, output = _console()

        with pytest.raises(SystemExit) as exc_info:
            exit_with_usage("-d and -D are mutually exclusive", console=console)

        assert exc_info.value.code == ExitCode.USAGE_ERROR
        assert "-d and -D are mutually exclusive" in output.getvalue()


class TestReportingErrors:
    def _run(self, error: BaseException) -> tuple[int | str | None, str, str]:
        console, output = _console()
        error_console, errors = _console()
        with (
            pytest.raises(SystemExit) as exc_info,
            reporting_errors(console, error_console, create_null_logger()),
        ):
            raise error
        return exc_info.value.code, output.getvalue(), errors.getvalue()

    def test_success_passes_through(self) -> None:
        console, output = _console()
        with reporting_errors(console, console, create_null_logger()):
            pass
        assert output.getvalue() == ""

    def test_declined_exits_zero(self) -> None:
        code, output, errors = self._run(ConfirmationDeclinedError("Abort declined"))
        assert code == ExitCode.SUCCESS
        assert "Abort declined; nothing was changed." in output
        assert errors == ""

    def test_usage_errors(self) -> None:
        assert self._run(UsageError(""))[0] == ExitCode.USAGE
        code, _, errors = self._run(UsageError("bad flags"))
        assert code == ExitCode.USAGE_ERROR
        assert "Error: bad flags" in errors

    def test_external_command_shows_command_line(self) -> None:
        error = ExternalCommandError(
            "cvmfs_swissknife sync failed with exit code 1",
            command=("cvmfs_swissknife", "sync", "-x"),
            exit_code=1,
        )
        code, _, errors = self._run(error)
        assert code == ExitCode.FAILURE
        assert "Command: cvmfs_swissknife sync -x" in errors

    def test_mount_error(self) -> None:
        error = MountError(
            "Failed to remount /cvmfs/a.b",
            path=Path("/cvmfs/a.b"),
            operation="remount",
            command=("mount", "-o", "remount,ro", "/cvmfs/a.b"),
        )
        code, _, errors = self._run(error)
        assert code == ExitCode.FAILURE
        assert "Command: mount -o remount,ro /cvmfs/a.b" in errors

    @pytest.mark.parametrize(
        "error",
        [
            ConfigLoadError("Invalid TOML", path=Path("/etc/stratum/server.toml")),
            RepositoryNotFoundError("Repository 'x.y' does not exist", name="x.y"),
            PermissionError(13, "Permission denied", "/srv/stratum"),
        ],
    )
    def test_failures(self, error: BaseException) -> None:
        code, _, errors = self._run(error)
        assert code == ExitCode.FAILURE
        assert errors.startswith("Error: ")

    def test_unrelated_exceptions_propagate(self) -> None:
        console, _ = _console()
        with (
            pytest.raises(KeyError),
            reporting_errors(console, console, create_null_logger()),
        ):
            raise KeyError("x")
