"""Mount control for repository mount points.

Example:
    >>> from stratum.mount import FakeMountController
    >>> mounts = FakeMountController()
    >>> mounts.mount_read_only(Path("/cvmfs/acme.example.org"))
    >>> mounts.is_mounted(Path("/cvmfs/acme.example.org"))
    True
"""

from ._fake import FakeMountController, FakeOpenFileProbe
from ._fstab import FstabEditor, build_mount_entries
from ._probe import ProcOpenFileProbe
from ._protocol import ROOT_HASH_XATTR, MountController, OpenFileProbe
from ._system import SystemMountController

__all__ = [
    "ROOT_HASH_XATTR",
    "FakeMountController",
    "FakeOpenFileProbe",
    "FstabEditor",
    "MountController",
    "OpenFileProbe",
    "ProcOpenFileProbe",
    "SystemMountController",
    "build_mount_entries",
]
