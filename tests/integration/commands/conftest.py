from dataclasses import dataclass, field

import pytest
from rich.console import Console

from stratum.admin import Backends
from stratum.cli import create_app, run
from stratum.config import ServerConfig


@dataclass(slots=True)
class StratumCli:
    """Runs the CLI in-process against the test host.

    Every invocation builds a fresh app, as separate processes would, but
    shares the fake backends so mount state carries over between commands.

    Attributes:
        answer: Reply to every confirmation question.
        questions: Confirmation questions asked so far.
    """

    server: ServerConfig
    backends: Backends
    console: Console
    answer: bool = False
    questions: list[str] = field(default_factory=list)

    def _confirm(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer

    def __call__(self, *args: str) -> int:
        app = create_app(
            console=self.console,
            error_console=self.console,
            backends_factory=lambda _server, _logger: self.backends,
            confirm=self._confirm,
        )
        return run(["--config-dir", str(self.server.config_dir), *args], app=app)


@pytest.fixture
def stratum_cli(
    server_config: ServerConfig,
    backends: Backends,
    console: Console,
) -> StratumCli:
    """CLI runner over the host written by the server_config fixture."""
    return StratumCli(server=server_config, backends=backends, console=console)


def squash(text: str) -> str:
    """Collapse the line wrapping of console output."""
    return " ".join(text.split())
