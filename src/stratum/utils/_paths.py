"""Host paths used by stratum."""

from os import getenv
from pathlib import Path

DEFAULT_CONFIG_DIR = Path("/etc/stratum")
DEFAULT_LOG_FILE = Path("/var/log/stratum/cli.log")


def get_config_dir() -> Path:
    """Get the host configuration directory.

    Honors STRATUM_CONFIG_DIR, falling back to /etc/stratum.
    """
    override = getenv("STRATUM_CONFIG_DIR")
    return Path(override) if override else DEFAULT_CONFIG_DIR


def get_server_config_file(config_dir: Path | None = None) -> Path:
    """Get the path to the host-wide server.toml."""
    return (config_dir or get_config_dir()) / "server.toml"


def get_repositories_dir(config_dir: Path | None = None) -> Path:
    """Get the directory holding one subdirectory per repository."""
    return (config_dir or get_config_dir()) / "repositories.d"


def get_repository_config_dir(name: str, config_dir: Path | None = None) -> Path:
    """Get the configuration directory of a single repository.

    Args:
        name: Fully qualified repository name.
        config_dir: Host configuration directory override.

    Returns:
        Path to repositories.d/<name>.
    """
    return get_repositories_dir(config_dir) / name


def get_repository_config_file(name: str, config_dir: Path | None = None) -> Path:
    """Get the path to a repository's server.toml."""
    return get_repository_config_dir(name, config_dir) / "server.toml"


def get_log_file() -> Path:
    """Get the default CLI log file."""
    return DEFAULT_LOG_FILE
