from pathlib import Path

import pytest
from pyfakefs.fake_filesystem import FakeFilesystem

from stratum.config import RepositoryConfig, RepositoryRegistry, ServerConfig
from stratum.utils._paths import (
    DEFAULT_CONFIG_DIR,
    get_config_dir,
    get_log_file,
    get_repositories_dir,
    get_repository_config_dir,
    get_repository_config_file,
    get_server_config_file,
)


class TestGetConfigDir:
    def test_defaults_to_etc(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STRATUM_CONFIG_DIR", raising=False)
        assert get_config_dir() == Path("/etc/stratum")

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRATUM_CONFIG_DIR", "/opt/stratum/etc")
        assert get_config_dir() == Path("/opt/stratum/etc")

    def test_empty_override_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRATUM_CONFIG_DIR", "")
        assert get_config_dir() == DEFAULT_CONFIG_DIR


class TestRepositoryPaths:
    def test_layout_under_explicit_dir(self) -> None:
        base = Path("/srv/etc")
        assert get_server_config_file(base) == base / "server.toml"
        assert get_repositories_dir(base) == base / "repositories.d"
        assert get_repository_config_dir("a.example.org", base) == (
            base / "repositories.d" / "a.example.org"
        )
        assert get_repository_config_file("a.example.org", base) == (
            base / "repositories.d" / "a.example.org" / "server.toml"
        )

    def test_layout_follows_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRATUM_CONFIG_DIR", "/tmp/alt")
        assert get_repositories_dir() == Path("/tmp/alt/repositories.d")

    def test_log_file(self) -> None:
        assert get_log_file() == Path("/var/log/stratum/cli.log")


class TestDefaultHostLayout:
    def test_server_config_read_from_etc(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("STRATUM_CONFIG_DIR", raising=False)
        fs.create_file(
            "/etc/stratum/server.toml",
            contents='whitelist_days = 7\n\n[paths]\nmount_root = "/mnt/stratum"\n',
        )

        server = ServerConfig.load(include_env=False)

        assert server.config_dir == Path("/etc/stratum")
        assert server.whitelist_days == 7
        assert server.paths.mount_root == Path("/mnt/stratum")
        assert server.paths.spool_root == Path("/var/spool/stratum")

    def test_missing_server_config_uses_defaults(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("STRATUM_CONFIG_DIR", raising=False)
        fs.create_dir("/etc")

        server = ServerConfig.load(include_env=False)

        assert server.whitelist_days == 30
        assert server.paths.mount_root == Path("/cvmfs")

    def test_registry_under_etc(
        self, fs: FakeFilesystem, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("STRATUM_CONFIG_DIR", raising=False)
        fs.create_dir("/etc/stratum")
        server = ServerConfig.load(include_env=False)
        registry = RepositoryRegistry(server.config_dir)

        registry.create(
            RepositoryConfig.new_origin("acme.example.org", owner="root", server=server)
        )

        assert Path(
            "/etc/stratum/repositories.d/acme.example.org/server.toml"
        ).is_file()
        assert registry.load("acme.example.org").union_mount == Path(
            "/cvmfs/acme.example.org"
        )
