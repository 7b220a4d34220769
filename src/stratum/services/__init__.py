"""External sync, sign, check and pull services.

Example:
    >>> from stratum.services import SwissknifeSyncService
    >>> service = SwissknifeSyncService()
    >>> service.build_argv("check", ["-r", "/srv/stratum/acme.example.org"])
    ['cvmfs_swissknife', 'check', '-r', '/srv/stratum/acme.example.org']
"""

from ._fake import FakePullService, FakeSyncService, content_root_hash
from ._protocol import (
    ExternalPullService,
    ExternalSyncService,
    ServiceResult,
    SyncResult,
)
from ._swissknife import DEBUG_SUFFIX, SwissknifePullService, SwissknifeSyncService

__all__ = [
    "DEBUG_SUFFIX",
    "ExternalPullService",
    "ExternalSyncService",
    "FakePullService",
    "FakeSyncService",
    "ServiceResult",
    "SwissknifePullService",
    "SwissknifeSyncService",
    "SyncResult",
    "content_root_hash",
]
