# pyright: reportExplicitAny=false, reportAny=false
"""Per-repository configuration.

Every repository on the host has a server.toml under
<config_dir>/repositories.d/<name>/. It is read fresh at the start of each
operation and handed to components as an immutable value.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Self

import pendulum
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stratum.config._models._server import ServerConfig
from stratum.config._validation import (
    raise_validation_error,
    validate_repository_name,
)
from stratum.enums import RepositoryRole
from stratum.exceptions import ConfigValidationError

DEFAULT_REPLICA_WORKERS: int = 16
DEFAULT_REPLICA_TIMEOUT: int = 10
DEFAULT_REPLICA_RETRIES: int = 1


@dataclass(frozen=True, slots=True)
class UpstreamTarget:
    """Parsed upstream storage specification.

    The textual form is "<type>,<tmp_dir>,<storage_dir>"; only the "local"
    type is supported.

    Attributes:
        kind: Upstream type.
        tmp_dir: Staging directory used while uploading.
        storage_dir: Destination directory.
    """

    kind: str
    tmp_dir: Path
    storage_dir: Path

    @classmethod
    def parse(cls, spec: str) -> Self:
        """Parse an upstream specification string.

        Args:
            spec: e.g. "local,/srv/stratum/r.org/data/txn,/srv/stratum/r.org".

        Returns:
            The parsed target.

        Raises:
            ConfigValidationError: If the string is malformed or not local.
        """
        parts = spec.split(",")
        if len(parts) != 3 or not all(parts):  # noqa: PLR2004
            msg = f"Malformed upstream '{spec}': expected <type>,<tmp>,<storage>"
            raise ConfigValidationError(
                msg, key="upstream", value=spec, expected="<type>,<tmp>,<storage>"
            )
        kind, tmp_dir, storage_dir = parts
        if kind != "local":
            msg = f"Unsupported upstream type '{kind}'"
            raise ConfigValidationError(
                msg, key="upstream", value=spec, expected="local"
            )
        return cls(kind=kind, tmp_dir=Path(tmp_dir), storage_dir=Path(storage_dir))

    @classmethod
    def local(cls, storage_dir: Path) -> Self:
        """Build the local upstream for a storage directory."""
        return cls(
            kind="local", tmp_dir=storage_dir / "data" / "txn", storage_dir=storage_dir
        )

    def __str__(self) -> str:
        return f"{self.kind},{self.tmp_dir},{self.storage_dir}"


class SigningKeys(BaseModel):
    """Key material locations.

    Origins carry the full set; replicas only the public key used to verify
    what they pull.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    public_key: Path
    private_key: Path | None = None
    certificate: Path | None = None
    master_key: Path | None = None

    @classmethod
    def for_origin(cls, key_dir: Path, name: str) -> Self:
        """Return the conventional key paths of an origin repository."""
        return cls(
            public_key=key_dir / f"{name}.pub",
            private_key=key_dir / f"{name}.key",
            certificate=key_dir / f"{name}.crt",
            master_key=key_dir / f"{name}.masterkey",
        )


class ReplicaTuning(BaseModel):
    """Parameters handed to the pull tool."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    workers: int = Field(default=DEFAULT_REPLICA_WORKERS, gt=0)
    timeout: int = Field(default=DEFAULT_REPLICA_TIMEOUT, gt=0)
    retries: int = Field(default=DEFAULT_REPLICA_RETRIES, ge=0)


class RepositoryConfig(BaseModel):
    """Configuration of a single repository.

    Attributes:
        name: Fully qualified repository name.
        role: Origin (writable) or replica (mirror).
        owner: Edit user; owns scratch and storage.
        union_mount: Where readers and publishers see the repository.
        spool_dir: Working area (scratch, rdonly, tmp, cache, marker).
        storage_dir: Local upstream storage served over HTTP.
        upstream: Upstream specification string.
        stratum0_url: Origin URL (for an origin, its own public URL).
        keys: Key material.
        replica: Pull tuning (replicas only).
        hash_algorithm: Content hash passed to the sync tool.
        created_at: ISO-8601 creation timestamp.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    name: str
    role: RepositoryRole
    owner: str
    union_mount: Path
    spool_dir: Path
    storage_dir: Path
    upstream: str
    stratum0_url: str
    keys: SigningKeys
    replica: ReplicaTuning = ReplicaTuning()
    hash_algorithm: str = "sha1"
    created_at: str = Field(
        default_factory=lambda: pendulum.now("UTC").to_iso8601_string()
    )

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        try:
            return validate_repository_name(value)
        except ConfigValidationError as e:
            raise ValueError(str(e)) from e

    @field_validator("upstream")
    @classmethod
    def _check_upstream(cls, value: str) -> str:
        try:
            _ = UpstreamTarget.parse(value)
        except ConfigValidationError as e:
            raise ValueError(str(e)) from e
        return value

    @property
    def upstream_target(self) -> UpstreamTarget:
        """Return the parsed upstream specification."""
        return UpstreamTarget.parse(self.upstream)

    @property
    def is_origin(self) -> bool:
        """Return True for writable (origin) repositories."""
        return self.role is RepositoryRole.ORIGIN

    @property
    def is_replica(self) -> bool:
        """Return True for mirrors."""
        return self.role is RepositoryRole.REPLICA

    @classmethod
    def new_origin(
        cls,
        name: str,
        *,
        owner: str,
        server: ServerConfig,
        stratum0_url: str | None = None,
    ) -> Self:
        """Build the configuration of a new origin from host defaults.

        Args:
            name: Fully qualified repository name.
            owner: Edit user.
            server: Host configuration supplying path defaults.
            stratum0_url: Public URL; defaults to http://localhost/stratum/<name>.

        Returns:
            Validated configuration.
        """
        storage_dir = server.paths.storage_root / name
        return cls.from_dict(
            {
                "name": name,
                "role": RepositoryRole.ORIGIN,
                "owner": owner,
                "union_mount": server.paths.mount_root / name,
                "spool_dir": server.paths.spool_root / name,
                "storage_dir": storage_dir,
                "upstream": str(UpstreamTarget.local(storage_dir)),
                "stratum0_url": stratum0_url or f"http://localhost/stratum/{name}",
                "keys": SigningKeys.for_origin(server.paths.key_dir, name),
            }
        )

    @classmethod
    def new_replica(
        cls,
        name: str,
        *,
        owner: str,
        server: ServerConfig,
        stratum0_url: str,
        tuning: ReplicaTuning | None = None,
    ) -> Self:
        """Build the configuration of a new replica from host defaults."""
        storage_dir = server.paths.storage_root / name
        return cls.from_dict(
            {
                "name": name,
                "role": RepositoryRole.REPLICA,
                "owner": owner,
                "union_mount": server.paths.mount_root / name,
                "spool_dir": server.paths.spool_root / name,
                "storage_dir": storage_dir,
                "upstream": str(UpstreamTarget.local(storage_dir)),
                "stratum0_url": stratum0_url,
                "keys": SigningKeys(public_key=server.paths.key_dir / f"{name}.pub"),
                "replica": tuning or ReplicaTuning(),
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: str | None = None) -> Self:
        """Validate a dictionary into a configuration.

        Raises:
            ConfigValidationError: If a value is invalid.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise_validation_error(e, source=source)

    def to_toml_dict(self) -> dict[str, Any]:
        """Return a TOML-serializable dictionary."""
        return self.model_dump(mode="json", exclude_none=True)
