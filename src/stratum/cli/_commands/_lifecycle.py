# pyright: reportUnusedCallResult=false
# ruff: noqa: FBT002
"""Transaction lifecycle commands: transaction, abort, publish, snapshot."""

from typing import Annotated

from cyclopts import Parameter

from stratum.enums import DebugMode
from stratum.exceptions import UsageError

from ._context import CLIContext
from ._shared import reporting_errors

__all__ = ["abort", "publish", "snapshot", "transaction"]


def transaction(name: str) -> None:
    """Open a transaction; the union mount becomes writable.

    Args:
        name: Repository name.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        ctx.manager.begin(name)
        ctx.logger.info("transaction_opened", repository=name)
    ctx.say(f"[green]Opened transaction on '{name}'[/green]")
    if ctx.verbose:
        union_mount = ctx.manager.registry.load(name).union_mount
        ctx.console.print(f"[dim]Edit below {union_mount}[/dim]")


def abort(
    name: str,
    force: Annotated[
        bool,
        Parameter(name=["--force", "-f"], negative="", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Discard every change of the open transaction.

    Args:
        name: Repository name.
        force: Skip the confirmation prompt.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        ctx.manager.abort(name, ctx.confirm, force=force)
        ctx.logger.info("transaction_aborted", repository=name, force=force)
    ctx.say(f"[green]Aborted transaction on '{name}'[/green]")


def _debug_mode(*, debug: bool, debugger: bool) -> DebugMode:
    if debug and debugger:
        msg = "-d and -D are mutually exclusive"
        raise UsageError(msg)
    if debugger:
        return DebugMode.DEBUGGER
    if debug:
        return DebugMode.DEBUG_BINARY
    return DebugMode.NONE


def publish(
    name: str,
    debug: Annotated[
        bool,
        Parameter(
            name=["--debug", "-d"],
            negative="",
            help="Run the debug build of the sync tool",
        ),
    ] = False,
    debugger: Annotated[
        bool,
        Parameter(
            name=["--debugger", "-D"],
            negative="",
            help="Run the sync tool under the debugger",
        ),
    ] = False,
) -> None:
    """Publish the open transaction as a new signed revision.

    Args:
        name: Repository name.
        debug: Run the debug build of the sync tool.
        debugger: Run the sync tool under the debugger.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        mode = _debug_mode(debug=debug, debugger=debugger)
        result = ctx.manager.publish(name, mode)
        ctx.logger.info(
            "published",
            repository=name,
            debug_mode=mode,
            root_hash=result.root_hash,
        )
    ctx.say(f"[green]Published '{name}'[/green]")
    if ctx.verbose:
        ctx.console.print(f"Previous root hash: {result.previous_root_hash}")
        ctx.console.print(f"Root hash:          {result.root_hash}")


def snapshot(name: str) -> None:
    """Pull new revisions from the origin into a replica.

    Args:
        name: Replica name.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        incremental = ctx.manager.snapshot(name)
        ctx.logger.info("snapshot_completed", repository=name, incremental=incremental)
    kind = "incremental" if incremental else "initial"
    ctx.say(f"[green]Pulled {kind} snapshot of '{name}'[/green]")
