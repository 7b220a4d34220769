"""Repository registry backed by per-repository TOML files.

The registry never caches: every call reads the filesystem, so a
configuration edited by another invocation is always seen.
"""

import shutil
from collections.abc import Iterator
from pathlib import Path

from stratum.config._loader import read_toml_file, write_toml_file
from stratum.config._models import RepositoryConfig
from stratum.config._validation import validate_repository_name
from stratum.enums import RepositoryRole
from stratum.exceptions import (
    RepositoryExistsError,
    RepositoryNotFoundError,
    WrongRoleError,
)
from stratum.utils._paths import (
    get_repositories_dir,
    get_repository_config_dir,
    get_repository_config_file,
)


class RepositoryRegistry:
    """Reads and writes repository configurations below a config directory.

    Example:
        >>> registry = RepositoryRegistry(Path("/etc/stratum"))
        >>> config = registry.load("acme.example.org")
        >>> config.role
        <RepositoryRole.ORIGIN: 'origin'>
    """

    __slots__ = ("_config_dir",)

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = config_dir

    @property
    def config_dir(self) -> Path:
        """Return the host configuration directory."""
        return self._config_dir

    def config_file(self, name: str) -> Path:
        """Return the path of a repository's server.toml.

        Raises:
            ConfigValidationError: If the name is not a repository name.
        """
        return get_repository_config_file(
            validate_repository_name(name), self._config_dir
        )

    def exists(self, name: str) -> bool:
        """Return True if a repository with this name is registered."""
        return self.config_file(name).is_file()

    def load(
        self, name: str, *, role: RepositoryRole | None = None
    ) -> RepositoryConfig:
        """Load a repository configuration from disk.

        Args:
            name: Fully qualified repository name.
            role: If given, the repository must have this role.

        Returns:
            The freshly read configuration.

        Raises:
            RepositoryNotFoundError: If the repository is not registered.
            WrongRoleError: If ``role`` is given and does not match.
            ConfigLoadError: If the file cannot be parsed.
            ConfigValidationError: If the name or the file holds invalid values.
        """
        path = self.config_file(name)
        if not path.is_file():
            msg = f"Repository '{name}' does not exist"
            raise RepositoryNotFoundError(msg, name=name)

        config = RepositoryConfig.from_dict(read_toml_file(path), source=str(path))

        if role is not None and config.role is not role:
            msg = f"Repository '{name}' is a {config.role}, not a {role}"
            raise WrongRoleError(msg, name=name, role=config.role)

        return config

    def create(self, config: RepositoryConfig) -> None:
        """Register a new repository.

        Raises:
            RepositoryExistsError: If the name is already taken.
        """
        if self.exists(config.name):
            msg = f"Repository '{config.name}' already exists"
            raise RepositoryExistsError(msg, name=config.name)
        self.save(config)

    def save(self, config: RepositoryConfig) -> None:
        """Write a repository configuration, replacing any previous one."""
        write_toml_file(self.config_file(config.name), config.to_toml_dict())

    def remove(self, name: str) -> None:
        """Delete a repository's configuration directory.

        Raises:
            RepositoryNotFoundError: If the repository is not registered.
            ConfigValidationError: If the name is not a repository name.
        """
        directory = get_repository_config_dir(
            validate_repository_name(name), self._config_dir
        )
        if not directory.is_dir():
            msg = f"Repository '{name}' does not exist"
            raise RepositoryNotFoundError(msg, name=name)
        shutil.rmtree(directory)

    def names(self) -> list[str]:
        """Return the sorted names of all registered repositories."""
        root = get_repositories_dir(self._config_dir)
        if not root.is_dir():
            return []
        return sorted(
            entry.name for entry in root.iterdir() if (entry / "server.toml").is_file()
        )

    def __iter__(self) -> Iterator[RepositoryConfig]:
        for name in self.names():
            yield self.load(name)

    def load_all(self) -> list[RepositoryConfig]:
        """Load every registered repository, sorted by name."""
        return list(self)
