# pyright: reportUnusedCallResult=false
"""CLI context for global state management.

This module provides context management for global CLI options and the
objects built from them. The CLIContext is set once per invocation by the
meta app and made available to all commands via contextvars.
"""

import contextvars
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Self

from rich.console import Console
from structlog.typing import FilteringBoundLogger

from stratum.admin import Backends, RepositoryManager
from stratum.config import ServerConfig
from stratum.transaction import ConfirmCallback
from stratum.utils import create_null_logger

from ._shared import confirm_on_tty, get_error_console

type BackendsFactory = Callable[[ServerConfig, FilteringBoundLogger], Backends]


class OutputFormat(StrEnum):
    """Supported output formats for commands."""

    PLAIN = "plain"
    TABLE = "table"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Per-invocation CLI context.

    Attributes:
        manager: Repository manager built from the loaded configuration.
        console: Console for regular output.
        error_console: Console for errors.
        confirm: Yes/no question asked before destructive operations.
        logger: Structured logger for CLI commands (writes to file only).
        verbose: Enable verbose output with additional details.
        quiet: Suppress non-essential output.
    """

    manager: RepositoryManager = field(repr=False)
    console: Console = field(default_factory=Console, repr=False)
    error_console: Console = field(default_factory=get_error_console, repr=False)
    confirm: ConfirmCallback = field(default=confirm_on_tty, repr=False)
    logger: FilteringBoundLogger = field(default_factory=create_null_logger, repr=False)
    verbose: bool = False
    quiet: bool = False

    @property
    def server(self) -> ServerConfig:
        return self.manager.server

    def say(self, message: str) -> None:
        """Print a progress message unless --quiet is set."""
        if not self.quiet:
            self.console.print(message)

    @classmethod
    def create_default(cls) -> Self:
        """Build a context from the host configuration and real tools."""
        server = ServerConfig.load()
        return cls(manager=RepositoryManager(server, Backends.system(server)))

    @classmethod
    def get_current(cls) -> Self:
        """Get the current CLIContext, building a default one if none is set.

        Returns:
            The currently active CLIContext.
        """
        ctx = _current_cli_context.get()
        if ctx is not None:
            return ctx  # pyright: ignore[reportReturnType]
        return cls.create_default()

    @classmethod
    def set_current(cls, ctx: Self) -> None:
        """Set the current active CLIContext."""
        _current_cli_context.set(ctx)

    @classmethod
    def reset(cls) -> None:
        """Drop the current context.

        This is primarily useful for testing to ensure a clean state between tests.
        """
        _current_cli_context.set(None)


_current_cli_context: contextvars.ContextVar[CLIContext | None] = contextvars.ContextVar(
    "cli_context", default=None
)
