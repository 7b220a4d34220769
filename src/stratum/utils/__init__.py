"""Utilities shared across stratum."""

from ._exec import (
    DEFAULT_TIMEOUT_MS,
    MAX_OUTPUT_BYTES,
    CommandRunner,
    ScriptConfig,
    ScriptResult,
    build_command,
    run_command,
    run_interactive,
    run_script,
    truncate_output,
)
from ._io import write_atomic
from ._logging import create_cli_logger, create_null_logger
from ._paths import (
    get_config_dir,
    get_log_file,
    get_repositories_dir,
    get_repository_config_dir,
    get_repository_config_file,
    get_server_config_file,
)

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "MAX_OUTPUT_BYTES",
    "CommandRunner",
    "ScriptConfig",
    "ScriptResult",
    "build_command",
    "create_cli_logger",
    "create_null_logger",
    "get_config_dir",
    "get_log_file",
    "get_repositories_dir",
    "get_repository_config_dir",
    "get_repository_config_file",
    "get_server_config_file",
    "run_command",
    "run_interactive",
    "run_script",
    "truncate_output",
    "write_atomic",
]
