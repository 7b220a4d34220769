# pyright: reportExplicitAny=false, reportAny=false
"""Host-wide server configuration.

The server configuration lives in <config_dir>/server.toml and carries the
settings shared by every repository on the host: where spool, storage and
mount points go, which external tools to run, and lifecycle hooks.
"""

from pathlib import Path
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from stratum.config._defaults import DEFAULT_CONFIG
from stratum.config._loader import deep_merge, parse_env_vars, read_toml_file
from stratum.config._models._logging import LoggingConfig
from stratum.config._validation import raise_validation_error
from stratum.enums import HookName
from stratum.utils._paths import get_config_dir, get_server_config_file


class PathsConfig(BaseModel):
    """Default locations for new repositories.

    Attributes:
        spool_root: Parent of per-repository spool directories.
        storage_root: Parent of per-repository local storage.
        mount_root: Parent of the union mount points.
        key_dir: Directory holding repository keys and certificates.
        fstab: Mount table file receiving the repository mount entries.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    spool_root: Path = Path("/var/spool/stratum")
    storage_root: Path = Path("/srv/stratum")
    mount_root: Path = Path("/cvmfs")
    key_dir: Path = Path("/etc/stratum/keys")
    fstab: Path = Path("/etc/fstab")


class ToolsConfig(BaseModel):
    """Executables invoked for external steps."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    swissknife: str = "cvmfs_swissknife"
    openssl: str = "openssl"
    mount: str = "mount"
    umount: str = "umount"
    debugger: str = "gdb"
    fuse_client: str = "cvmfs2"


class ServerConfig(BaseModel):
    """Host-wide configuration with typed access.

    Use `load()` or `from_dict()` rather than the constructor.

    Attributes:
        config_dir: Directory the configuration was loaded from.
        logging: Logging section.
        paths: Default path layout.
        tools: External executables.
        hooks: Shell commands keyed by hook name.
        whitelist_days: Validity window of freshly signed whitelists.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    config_dir: Path = Field(default_factory=get_config_dir)
    logging: LoggingConfig = LoggingConfig()
    paths: PathsConfig = PathsConfig()
    tools: ToolsConfig = ToolsConfig()
    hooks: dict[HookName, str] = Field(default_factory=dict)
    whitelist_days: int = Field(default=30, gt=0)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        config_dir: Path | None = None,
        source: str | None = None,
    ) -> Self:
        """Create configuration from a dictionary merged over the defaults.

        Args:
            data: Configuration values.
            config_dir: Directory the values belong to.
            source: Description of the origin of the values, for errors.

        Returns:
            Validated configuration.

        Raises:
            ConfigValidationError: If a value is invalid.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        merged["config_dir"] = config_dir or get_config_dir()
        try:
            return cls.model_validate(merged)
        except ValidationError as e:
            raise_validation_error(e, source=source)

    @classmethod
    def load(cls, config_dir: Path | None = None, *, include_env: bool = True) -> Self:
        """Load configuration from disk and the environment.

        Precedence, lowest first: defaults, <config_dir>/server.toml,
        STRATUM_* environment variables. A missing server.toml is not an
        error.

        Args:
            config_dir: Configuration directory (default: STRATUM_CONFIG_DIR
                or /etc/stratum).
            include_env: Whether to apply environment overrides.

        Returns:
            Validated configuration.

        Raises:
            ConfigLoadError: If server.toml cannot be parsed.
            ConfigValidationError: If a value is invalid.
        """
        directory = config_dir or get_config_dir()
        path = get_server_config_file(directory)

        data: dict[str, Any] = {}
        if path.is_file():
            data = read_toml_file(path)
        if include_env:
            data = deep_merge(data, parse_env_vars())

        return cls.from_dict(data, config_dir=directory, source=str(path))

    def hook(self, name: HookName) -> str | None:
        """Return the shell command configured for a hook, if any."""
        return self.hooks.get(name)
