"""Configuration models.

This module provides pydantic models for the host-wide server configuration
and for per-repository configuration.
"""

from stratum.config._models._common import LogFormat, LogLevel
from stratum.config._models._logging import LoggingConfig
from stratum.config._models._repository import (
    DEFAULT_REPLICA_RETRIES,
    DEFAULT_REPLICA_TIMEOUT,
    DEFAULT_REPLICA_WORKERS,
    ReplicaTuning,
    RepositoryConfig,
    SigningKeys,
    UpstreamTarget,
)
from stratum.config._models._server import PathsConfig, ServerConfig, ToolsConfig

__all__ = [
    "DEFAULT_REPLICA_RETRIES",
    "DEFAULT_REPLICA_TIMEOUT",
    "DEFAULT_REPLICA_WORKERS",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PathsConfig",
    "ReplicaTuning",
    "RepositoryConfig",
    "ServerConfig",
    "SigningKeys",
    "ToolsConfig",
    "UpstreamTarget",
]
