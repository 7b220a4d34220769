"""Shared test fixtures for stratum tests."""

import datetime
import os
import pwd
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from rich.console import Console

from stratum.admin import Backends, RepositoryManager
from stratum.config import RepositoryConfig, ServerConfig, write_toml_file
from stratum.mount import FakeMountController, FakeOpenFileProbe
from stratum.services import FakePullService, FakeSyncService
from stratum.signing import KeyGenerator
from stratum.spool import SpoolArea
from stratum.utils import ScriptResult

REPOSITORY = "acme.example.org"


@dataclass(frozen=True, slots=True)
class HostLayout:
    """Host directories of a test installation, all below tmp_path."""

    config_dir: Path
    spool_root: Path
    storage_root: Path
    mount_root: Path
    key_dir: Path
    fstab: Path
    log_file: Path


def _option(argv: Sequence[str], flag: str) -> str:
    return argv[list(argv).index(flag) + 1]


def _private_pem(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )


@dataclass(slots=True)
class FakeHostRunner:
    """Command runner standing in for openssl and the SELinux tools.

    openssl genrsa, rsa -pubout and req -x509 are carried out with the
    cryptography library; selinuxenabled reports SELinux as disabled.
    Every argv is recorded in ``calls``.
    """

    calls: list[list[str]] = field(default_factory=list)

    def __call__(self, argv: Sequence[str]) -> ScriptResult:
        command = list(argv)
        self.calls.append(command)
        if Path(command[0]).name == "openssl":
            self._openssl(command[1:])
            return ScriptResult(success=True, argv=tuple(command), exit_code=0)
        return ScriptResult(success=True, argv=tuple(command), exit_code=1)

    def _openssl(self, arguments: list[str]) -> None:
        subcommand = arguments[0]
        if subcommand == "genrsa":
            key = rsa.generate_private_key(
                public_exponent=65537, key_size=int(arguments[-1])
            )
            _ = Path(_option(arguments, "-out")).write_bytes(_private_pem(key))
        elif subcommand == "rsa":
            key = serialization.load_pem_private_key(
                Path(_option(arguments, "-in")).read_bytes(), password=None
            )
            public = key.public_key().public_bytes(
                serialization.Encoding.PEM,
                serialization.PublicFormat.SubjectPublicKeyInfo,
            )
            _ = Path(_option(arguments, "-out")).write_bytes(public)
        elif subcommand == "req":
            key = serialization.load_pem_private_key(
                Path(_option(arguments, "-key")).read_bytes(), password=None
            )
            assert isinstance(key, rsa.RSAPrivateKey)
            common_name = _option(arguments, "-subj").removeprefix("/CN=")
            subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
            now = datetime.datetime.now(datetime.UTC)
            days = int(_option(arguments, "-days"))
            certificate = (
                x509.CertificateBuilder()
                .subject_name(subject)
                .issuer_name(subject)
                .public_key(key.public_key())
                .serial_number(x509.random_serial_number())
                .not_valid_before(now)
                .not_valid_after(now + datetime.timedelta(days=days))
                .sign(key, hashes.SHA256())
            )
            _ = Path(_option(arguments, "-out")).write_bytes(
                certificate.public_bytes(serialization.Encoding.PEM)
            )
        else:
            msg = f"unexpected openssl subcommand {subcommand}"
            raise AssertionError(msg)

    def programs(self) -> list[str]:
        """Return the program and first argument of every call."""
        return [" ".join(command[:2]) for command in self.calls]


@pytest.fixture
def owner() -> str:
    """The invoking user, so chown calls succeed without privileges."""
    return pwd.getpwuid(os.getuid()).pw_name


@pytest.fixture
def host(tmp_path: Path) -> HostLayout:
    root = tmp_path / "host"
    layout = HostLayout(
        config_dir=root / "etc" / "stratum",
        spool_root=root / "var" / "spool" / "stratum",
        storage_root=root / "srv" / "stratum",
        mount_root=root / "cvmfs",
        key_dir=root / "etc" / "stratum" / "keys",
        fstab=root / "etc" / "fstab",
        log_file=root / "var" / "log" / "stratum" / "cli.log",
    )
    layout.config_dir.mkdir(parents=True)
    return layout


@pytest.fixture
def server_config(host: HostLayout) -> ServerConfig:
    """Host configuration written to <config_dir>/server.toml and loaded back."""
    write_toml_file(
        host.config_dir / "server.toml",
        {
            "logging": {"level": "debug", "file": str(host.log_file)},
            "paths": {
                "spool_root": str(host.spool_root),
                "storage_root": str(host.storage_root),
                "mount_root": str(host.mount_root),
                "key_dir": str(host.key_dir),
                "fstab": str(host.fstab),
            },
        },
    )
    return ServerConfig.load(host.config_dir, include_env=False)


@pytest.fixture
def host_runner() -> FakeHostRunner:
    return FakeHostRunner()


@pytest.fixture
def sync_service() -> FakeSyncService:
    return FakeSyncService()


@pytest.fixture
def pull_service() -> FakePullService:
    return FakePullService()


@pytest.fixture
def mounts(sync_service: FakeSyncService) -> FakeMountController:
    """Mount table whose base layers show the fake sync service's content."""
    return FakeMountController(root_hash_source=lambda: sync_service.root_hash)


@pytest.fixture
def probe() -> FakeOpenFileProbe:
    return FakeOpenFileProbe()


@pytest.fixture
def backends(
    mounts: FakeMountController,
    probe: FakeOpenFileProbe,
    sync_service: FakeSyncService,
    pull_service: FakePullService,
    host_runner: FakeHostRunner,
) -> Backends:
    return Backends(
        mounts=mounts,
        probe=probe,
        sync=sync_service,
        pull=pull_service,
        keys=KeyGenerator(runner=host_runner),
        runner=host_runner,
    )


@pytest.fixture
def manager(server_config: ServerConfig, backends: Backends) -> RepositoryManager:
    return RepositoryManager(server_config, backends)


@pytest.fixture
def origin(manager: RepositoryManager, owner: str) -> RepositoryConfig:
    """An origin created by mkfs, idle with its union mount read-only."""
    return manager.mkfs(REPOSITORY, owner=owner)


@pytest.fixture
def origin_spool(origin: RepositoryConfig) -> SpoolArea:
    return SpoolArea.for_repository(origin)


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
