"""Repository administration: creation, removal, inspection and lifecycle.

Example:
    >>> from stratum.admin import Backends, RepositoryManager
    >>> server = ServerConfig.load()
    >>> manager = RepositoryManager(server, Backends.system(server))
    >>> [info.name for info in manager.list_repositories()]
    ['acme.example.org']
"""

from ._backends import Backends
from ._client import render_client_config, write_client_config
from ._info import RepositoryInfo
from ._manager import RepositoryManager, replica_name_from_url, require_owner

__all__ = [
    "Backends",
    "RepositoryInfo",
    "RepositoryManager",
    "render_client_config",
    "replica_name_from_url",
    "require_owner",
    "write_client_config",
]
