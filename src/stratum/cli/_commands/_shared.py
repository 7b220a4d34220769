"""Shared CLI utilities for commands.

This module provides common utilities used across CLI command implementations:
- Standardized exit codes
- Error reporting that maps stratum exceptions to exit codes
- JSON formatting and the interactive confirmation gate
"""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum
from typing import Any, Never

import orjson
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from structlog.typing import FilteringBoundLogger

from stratum.exceptions import (
    ConfigError,
    ConfirmationDeclinedError,
    ExternalCommandError,
    MountError,
    StratumError,
    UsageError,
)

__all__ = [
    "ExitCode",
    "confirm_on_tty",
    "exit_with_error",
    "exit_with_usage",
    "format_json",
    "get_error_console",
    "reporting_errors",
]


class ExitCode(IntEnum):
    """Exit codes of the stratum CLI."""

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2
    USAGE_ERROR = 3


def format_json(
    data: dict[str, Any] | list[Any],  # pyright: ignore[reportExplicitAny]
    *,
    indent: bool = True,
) -> str:
    """Format data as JSON.

    Args:
        data: Dictionary or list to format as JSON.
        indent: Whether to pretty-print with indentation.

    Returns:
        JSON-formatted string representation.
    """
    options = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps(data, option=options).decode("utf-8")


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr.

    Returns:
        Console instance writing to stderr.
    """
    return Console(stderr=True)


def confirm_on_tty(question: str) -> bool:
    """Ask a yes/no question on an interactive terminal.

    Without a terminal on stdin the answer is no.
    """
    if not sys.stdin.isatty():
        return False
    return Confirm.ask(question, default=False)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.FAILURE,
    *,
    console: Console | None = None,
    command: str | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use (defaults to FAILURE).
        console: Optional Rich console for output. If not provided,
            a new stderr console will be created.
        command: The external command line that failed, if any.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
    if command:
        console.print(f"Command: {command}", markup=False, highlight=False)
    raise SystemExit(code)


def exit_with_usage(
    message: str = "",
    *,
    console: Console | None = None,
) -> Never:
    """Exit for an invalid invocation.

    An empty message exits with USAGE, anything else is printed and exits
    with USAGE_ERROR.

    Raises:
        SystemExit: Always.
    """
    if not message:
        raise SystemExit(ExitCode.USAGE)
    exit_with_error(message, ExitCode.USAGE_ERROR, console=console)


@contextmanager
def reporting_errors(
    console: Console,
    error_console: Console,
    logger: FilteringBoundLogger,
) -> Iterator[None]:
    """Translate stratum exceptions raised in the block into CLI exits.

    A declined confirmation is not a failure: it prints a note and exits 0.

    Raises:
        SystemExit: For every handled exception.
    """
    try:
        yield
    except ConfirmationDeclinedError as e:
        logger.info("confirmation_declined", reason=str(e))
        console.print(f"[yellow]{escape(str(e))}[/yellow]; nothing was changed.")
        raise SystemExit(ExitCode.SUCCESS) from e
    except UsageError as e:
        logger.warning("usage_error", error=str(e))
        exit_with_usage(str(e), console=error_console)
    except ExternalCommandError as e:
        logger.error(
            "external_command_failed",
            error=str(e),
            command=list(e.command),
            exit_code=e.exit_code,
        )
        exit_with_error(str(e), console=error_console, command=e.command_line)
    except MountError as e:
        logger.error(
            "mount_failed",
            error=str(e),
            path=str(e.path),
            operation=e.operation,
            command=list(e.command),
        )
        exit_with_error(str(e), console=error_console, command=e.command_line or None)
    except ConfigError as e:
        logger.error("config_error", error=str(e))
        exit_with_error(str(e), console=error_console)
    except StratumError as e:
        logger.error("command_failed", error=str(e), error_type=type(e).__name__)
        exit_with_error(str(e), console=error_console)
    except OSError as e:
        logger.error("os_error", error=str(e), filename=e.filename)
        exit_with_error(str(e), console=error_console)
