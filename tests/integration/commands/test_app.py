"""Integration tests for the application shell: usage, exit codes, registry."""

from pathlib import Path

import pytest

from stratum import __version__
from stratum.cli import COMMANDS, create_app, run
from stratum.enums import Command
from tests.integration.commands.conftest import StratumCli, squash


class TestCommandRegistry:
    def test_every_command_has_a_handler(self) -> None:
        assert set(COMMANDS) == set(Command)
        assert all(callable(handler) for handler in COMMANDS.values())

    def test_registered_names(self) -> None:
        app = create_app()
        for command in Command:
            assert command.value in app

    def test_registry_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            COMMANDS[Command.LIST] = print  # pyright: ignore[reportIndexIssue]


class TestExitCodes:
    def test_no_command_prints_usage(
        self, stratum_cli: StratumCli, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert stratum_cli() == 2
        assert "Usage" in capsys.readouterr().out

    def test_unknown_command(self, stratum_cli: StratumCli) -> None:
        assert stratum_cli("frobnicate") == 3

    def test_unknown_option(self, stratum_cli: StratumCli) -> None:
        assert stratum_cli("transaction", "--frobnicate", "a.b") == 3

    def test_missing_argument(self, stratum_cli: StratumCli) -> None:
        assert stratum_cli("transaction") == 3

    def test_failure(
        self, stratum_cli: StratumCli, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert stratum_cli("transaction", "missing.example.org") == 1
        assert squash(capsys.readouterr().out).startswith("Error: Repository")

    def test_help(
        self, stratum_cli: StratumCli, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert stratum_cli("--help") == 0
        output = capsys.readouterr().out
        for command in ("mkfs", "publish", "add-replica", "skeleton"):
            assert command in output

    def test_version(
        self, stratum_cli: StratumCli, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert stratum_cli("--version") == 0
        assert __version__ in capsys.readouterr().out


class TestConfiguration:
    def test_unparsable_server_config(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config_dir = tmp_path / "etc"
        config_dir.mkdir()
        _ = (config_dir / "server.toml").write_text("[paths\n")

        code = run(["--config-dir", str(config_dir), "list"], app=create_app())

        assert code == 1
        assert "Error:" in capsys.readouterr().err
