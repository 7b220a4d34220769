"""stratum CLI commands."""
# pyright: reportUnusedCallResult=false

from collections.abc import Callable
from types import MappingProxyType

from cyclopts import App

from stratum.enums import Command

from ._admin import add_replica, check, mkfs, resign, rmfs, skeleton
from ._context import BackendsFactory, CLIContext, OutputFormat
from ._inspect import info, list_repositories
from ._lifecycle import abort, publish, snapshot, transaction
from ._shared import (
    ExitCode,
    confirm_on_tty,
    exit_with_error,
    exit_with_usage,
    format_json,
    get_error_console,
    reporting_errors,
)

__all__ = [
    "COMMANDS",
    "BackendsFactory",
    "CLIContext",
    "ExitCode",
    "OutputFormat",
    "confirm_on_tty",
    "exit_with_error",
    "exit_with_usage",
    "format_json",
    "get_error_console",
    "register_commands",
    "reporting_errors",
]

COMMANDS: MappingProxyType[Command, Callable[..., None]] = MappingProxyType(
    {
        Command.MKFS: mkfs,
        Command.ADD_REPLICA: add_replica,
        Command.PUBLISH: publish,
        Command.RMFS: rmfs,
        Command.RESIGN: resign,
        Command.INFO: info,
        Command.CHECK: check,
        Command.TRANSACTION: transaction,
        Command.ABORT: abort,
        Command.SNAPSHOT: snapshot,
        Command.LIST: list_repositories,
        Command.SKELETON: skeleton,
    }
)


def register_commands(app: App) -> None:
    """Register one handler per Command member."""
    for command, handler in COMMANDS.items():
        app.command(handler, name=command.value)
