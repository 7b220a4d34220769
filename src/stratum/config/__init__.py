"""stratum configuration.

This module provides the public API for host-wide and per-repository
configuration: loading, validation, typed access, and the registry.

Example:
    >>> from stratum.config import RepositoryRegistry, ServerConfig
    >>> server = ServerConfig.load()
    >>> registry = RepositoryRegistry(server.config_dir)
    >>> registry.names()
    ['acme.example.org']
"""

from stratum.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._defaults import DEFAULT_CONFIG
from ._loader import (
    copy_value,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
    write_toml_file,
)
from ._models import (
    DEFAULT_REPLICA_RETRIES,
    DEFAULT_REPLICA_TIMEOUT,
    DEFAULT_REPLICA_WORKERS,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PathsConfig,
    ReplicaTuning,
    RepositoryConfig,
    ServerConfig,
    SigningKeys,
    ToolsConfig,
    UpstreamTarget,
)
from ._registry import RepositoryRegistry
from ._validation import raise_validation_error, validate_repository_name

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_REPLICA_RETRIES",
    "DEFAULT_REPLICA_TIMEOUT",
    "DEFAULT_REPLICA_WORKERS",
    "ConfigError",
    "ConfigLoadError",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PathsConfig",
    "ReplicaTuning",
    "RepositoryConfig",
    "RepositoryRegistry",
    "ServerConfig",
    "SigningKeys",
    "ToolsConfig",
    "UpstreamTarget",
    "copy_value",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "raise_validation_error",
    "read_toml_file",
    "set_nested_key",
    "validate_repository_name",
    "write_toml_file",
]
