# pyright: reportAny=false
"""Unit tests for configuration models."""

from pathlib import Path

import pytest

from stratum.config import (
    ConfigLoadError,
    ConfigValidationError,
    LogLevel,
    ReplicaTuning,
    RepositoryConfig,
    ServerConfig,
    SigningKeys,
    UpstreamTarget,
)
from stratum.enums import HookName, RepositoryRole


class TestUpstreamTarget:
    def test_parse(self) -> None:
        target = UpstreamTarget.parse("local,/srv/r/data/txn,/srv/r")
        assert target.kind == "local"
        assert target.tmp_dir == Path("/srv/r/data/txn")
        assert target.storage_dir == Path("/srv/r")
        assert str(target) == "local,/srv/r/data/txn,/srv/r"

    @pytest.mark.parametrize("spec", ["local,/a", "local,,/b", "", "a,b,c,d"])
    def test_malformed(self, spec: str) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = UpstreamTarget.parse(spec)
        assert exc_info.value.key == "upstream"

    def test_only_local_is_supported(self) -> None:
        with pytest.raises(ConfigValidationError, match="Unsupported upstream type"):
            _ = UpstreamTarget.parse("s3,/tmp,/bucket")

    def test_local_layout(self) -> None:
        target = UpstreamTarget.local(Path("/srv/stratum/acme.example.org"))
        assert str(target) == (
            "local,/srv/stratum/acme.example.org/data/txn,/srv/stratum/acme.example.org"
        )


class TestSigningKeys:
    def test_for_origin(self) -> None:
        keys = SigningKeys.for_origin(Path("/k"), "acme.example.org")
        assert keys.public_key == Path("/k/acme.example.org.pub")
        assert keys.private_key == Path("/k/acme.example.org.key")
        assert keys.certificate == Path("/k/acme.example.org.crt")
        assert keys.master_key == Path("/k/acme.example.org.masterkey")


class TestServerConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        server = ServerConfig.load(tmp_path, include_env=False)
        assert server.config_dir == tmp_path
        assert server.paths.fstab == Path("/etc/fstab")
        assert server.tools.swissknife == "cvmfs_swissknife"
        assert server.logging.level is LogLevel.INFO
        assert server.whitelist_days == 30
        assert server.hooks == {}

    def test_file_overrides_defaults(self, tmp_path: Path) -> None:
        _ = (tmp_path / "server.toml").write_text(
            "whitelist_days = 7\n"
            "[paths]\n"
            'fstab = "/tmp/fstab"\n'
            "[hooks]\n"
            'publish_after = "echo done"\n'
        )
        server = ServerConfig.load(tmp_path, include_env=False)

        assert server.whitelist_days == 7
        assert server.paths.fstab == Path("/tmp/fstab")
        assert server.paths.key_dir == Path("/etc/stratum/keys")
        assert server.hook(HookName.PUBLISH_AFTER) == "echo done"
        assert server.hook(HookName.ABORT_AFTER) is None

    def test_environment_overrides_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _ = (tmp_path / "server.toml").write_text('[logging]\nlevel = "warning"\n')
        monkeypatch.setenv("STRATUM_LOGGING__LEVEL", "error")

        server = ServerConfig.load(tmp_path)

        assert server.logging.level is LogLevel.ERROR

    def test_config_dir_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("STRATUM_CONFIG_DIR", str(tmp_path))
        assert ServerConfig.load().config_dir == tmp_path

    def test_invalid_value(self, tmp_path: Path) -> None:
        _ = (tmp_path / "server.toml").write_text("whitelist_days = 0\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            _ = ServerConfig.load(tmp_path, include_env=False)

        assert exc_info.value.key == "whitelist_days"
        assert str(tmp_path / "server.toml") in str(exc_info.value)

    def test_unparsable_file(self, tmp_path: Path) -> None:
        _ = (tmp_path / "server.toml").write_text("[paths\n")
        with pytest.raises(ConfigLoadError):
            _ = ServerConfig.load(tmp_path, include_env=False)


class TestRepositoryConfig:
    def test_new_origin(self, server_config: ServerConfig) -> None:
        config = RepositoryConfig.new_origin(
            "acme.example.org", owner="alice", server=server_config
        )

        paths = server_config.paths
        assert config.role is RepositoryRole.ORIGIN
        assert config.is_origin and not config.is_replica
        assert config.union_mount == paths.mount_root / "acme.example.org"
        assert config.spool_dir == paths.spool_root / "acme.example.org"
        assert config.storage_dir == paths.storage_root / "acme.example.org"
        assert config.upstream_target.storage_dir == config.storage_dir
        assert config.stratum0_url == "http://localhost/stratum/acme.example.org"
        assert config.keys.master_key is not None

    def test_new_replica(self, server_config: ServerConfig) -> None:
        config = RepositoryConfig.new_replica(
            "acme.example.org",
            owner="alice",
            server=server_config,
            stratum0_url="http://origin/stratum/acme.example.org",
            tuning=ReplicaTuning(workers=4),
        )

        assert config.is_replica
        assert config.keys.private_key is None
        assert config.replica.workers == 4
        assert config.replica.retries == 1

    def test_rejects_bad_name(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = RepositoryConfig.from_dict(
                {
                    "name": "Not A Name",
                    "role": "origin",
                    "owner": "alice",
                    "union_mount": "/cvmfs/x",
                    "spool_dir": "/spool/x",
                    "storage_dir": "/srv/x",
                    "upstream": "local,/srv/x/data/txn,/srv/x",
                    "stratum0_url": "http://localhost/x",
                    "keys": {"public_key": "/k/x.pub"},
                }
            )
        assert exc_info.value.key == "name"

    def test_rejects_bad_upstream(self, server_config: ServerConfig) -> None:
        data = RepositoryConfig.new_origin(
            "acme.example.org", owner="alice", server=server_config
        ).to_toml_dict()
        data["upstream"] = "ftp,/a,/b"

        with pytest.raises(ConfigValidationError) as exc_info:
            _ = RepositoryConfig.from_dict(data)
        assert exc_info.value.key == "upstream"

    def test_toml_dict_round_trip(self, server_config: ServerConfig) -> None:
        config = RepositoryConfig.new_origin(
            "acme.example.org", owner="alice", server=server_config
        )
        assert RepositoryConfig.from_dict(config.to_toml_dict()) == config

    def test_replica_toml_omits_missing_keys(self, server_config: ServerConfig) -> None:
        config = RepositoryConfig.new_replica(
            "acme.example.org",
            owner="alice",
            server=server_config,
            stratum0_url="http://origin/acme.example.org",
        )
        assert "private_key" not in config.to_toml_dict()["keys"]
