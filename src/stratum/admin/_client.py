"""Configuration of the read-only base layer client."""

from stratum.config import RepositoryConfig
from stratum.spool import SpoolArea
from stratum.utils import write_atomic


def render_client_config(config: RepositoryConfig) -> str:
    """Return the client configuration that mounts a repository's base layer.

    The client reads the repository's own published storage, so the base
    layer always shows the last signed revision.
    """
    spool = SpoolArea.for_repository(config)
    lines = [
        f"CVMFS_CACHE_BASE={spool.cache}",
        f"CVMFS_RELOAD_SOCKETS={spool.cache}",
        f"CVMFS_SERVER_URL={config.stratum0_url}",
        "CVMFS_HTTP_PROXY=DIRECT",
        f"CVMFS_PUBLIC_KEY={config.keys.public_key}",
        "CVMFS_CHECK_PERMISSIONS=yes",
        "CVMFS_IGNORE_SIGNATURE=no",
        "CVMFS_AUTO_UPDATE=no",
    ]
    return "\n".join(lines) + "\n"


def write_client_config(config: RepositoryConfig) -> None:
    """Write the client configuration into the spool area."""
    spool = SpoolArea.for_repository(config)
    write_atomic(spool.client_config, render_client_config(config))
