"""The stratum command-line interface."""

from ._app import create_app, main, run
from ._commands import COMMANDS, CLIContext, ExitCode

__all__ = ["COMMANDS", "CLIContext", "ExitCode", "create_app", "main", "run"]
