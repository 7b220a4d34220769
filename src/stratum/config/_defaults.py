"""Default host configuration values.

DEFAULT_CONFIG is a plain dict so it can feed deep_merge directly; the merge
functions copy, so the module-level value is never mutated.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "info",
        "format": "json",
        "file": "",
    },
    "paths": {
        "spool_root": "/var/spool/stratum",
        "storage_root": "/srv/stratum",
        "mount_root": "/cvmfs",
        "key_dir": "/etc/stratum/keys",
        "fstab": "/etc/fstab",
    },
    "tools": {
        "swissknife": "cvmfs_swissknife",
        "openssl": "openssl",
        "mount": "mount",
        "umount": "umount",
        "debugger": "gdb",
        "fuse_client": "cvmfs2",
    },
    "hooks": {},
    "whitelist_days": 30,
}
