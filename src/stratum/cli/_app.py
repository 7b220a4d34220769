"""The command-line interface for stratum."""
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

from cyclopts import App, CycloptsError, Parameter
from rich.console import Console
from structlog.typing import FilteringBoundLogger

from stratum import __version__
from stratum.admin import Backends, RepositoryManager
from stratum.config import LogFormat, ServerConfig
from stratum.transaction import ConfirmCallback
from stratum.utils import create_cli_logger, create_null_logger

from ._commands import (
    BackendsFactory,
    CLIContext,
    ExitCode,
    confirm_on_tty,
    exit_with_usage,
    register_commands,
    reporting_errors,
)

APP_NAME = "stratum"
APP_HELP = "Manage union-mounted, signed software repositories."


def _create_logger(
    server: ServerConfig, tokens: Sequence[str]
) -> FilteringBoundLogger:
    command = next((token for token in tokens if not token.startswith("-")), "")
    try:
        return create_cli_logger(
            level=server.logging.level.value,
            log_format="text" if server.logging.format is LogFormat.TEXT else "json",
            log_file=server.logging.file,
            command=command,
        )
    except OSError:
        # Unprivileged invocations cannot open the system log file
        return create_null_logger()


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    backends_factory: BackendsFactory = Backends.system,
    confirm: ConfirmCallback = confirm_on_tty,
    exit_on_error: bool = False,
) -> App:
    """Build the CLI application.

    Args:
        console: Console for regular output.
        error_console: Console for errors.
        backends_factory: Builds the host backends from the loaded configuration.
        confirm: Yes/no question asked before destructive operations.
        exit_on_error: Let cyclopts exit on parser errors instead of raising.

    Returns:
        The configured application; invoke ``app.meta`` to run it.
    """
    if console is None:
        console = Console()
    if error_console is None:
        error_console = Console(stderr=True)
    app = App(
        name=APP_NAME,
        help=APP_HELP,
        help_on_error=True,
        version=__version__,
        console=console,
        error_console=error_console,
        exit_on_error=exit_on_error,
    )

    @app.default
    def _usage() -> None:  # pyright: ignore[reportUnusedFunction]
        """Show usage when no command is given."""
        app.help_print(console=error_console)
        exit_with_usage()

    @app.meta.default
    def _default(  # pyright: ignore[reportUnusedFunction]
        *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
        config_dir: Annotated[
            Path | None,
            Parameter(name="--config-dir", help="Host configuration directory"),
        ] = None,
        verbose: Annotated[
            bool, Parameter(negative="", help="Enable verbose output")
        ] = False,
        quiet: Annotated[
            bool, Parameter(negative="", help="Suppress non-essential output")
        ] = False,
    ) -> None:
        """Launch stratum with global options.

        Args:
            tokens: Command tokens to pass to subcommands.
            config_dir: Host configuration directory.
            verbose: Enable verbose output with additional details.
            quiet: Suppress non-essential output.
        """
        with reporting_errors(console, error_console, create_null_logger()):
            server = ServerConfig.load(config_dir)

        cli_logger = _create_logger(server, tokens)
        ctx = CLIContext(
            manager=RepositoryManager(
                server, backends_factory(server, cli_logger), logger=cli_logger
            ),
            console=console,
            error_console=error_console,
            confirm=confirm,
            logger=cli_logger,
            verbose=verbose,
            quiet=quiet,
        )
        CLIContext.set_current(ctx)

        try:
            app(tokens)
        finally:
            CLIContext.reset()

    register_commands(app)
    return app


def run(tokens: Sequence[str] | None = None, *, app: App | None = None) -> int:
    """Run the CLI and return its exit code.

    Args:
        tokens: Command line without the program name (default: sys.argv[1:]).
        app: Application to run (default: a fresh ``create_app()``).

    Returns:
        0 on success or a declined confirmation, 1 on failure, 2 when no
        command is given, 3 on invalid usage.
    """
    if app is None:
        app = create_app()
    try:
        app.meta(tokens, exit_on_error=False)
    except CycloptsError:
        return ExitCode.USAGE_ERROR
    except SystemExit as e:
        if e.code is None:
            return ExitCode.SUCCESS
        if isinstance(e.code, int):
            return e.code
        return ExitCode.FAILURE
    return ExitCode.SUCCESS


def main() -> None:
    """Default entrypoint for the `stratum` CLI."""
    sys.exit(run())
