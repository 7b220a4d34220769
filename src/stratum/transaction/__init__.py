"""Origin repository transactions.

Example:
    >>> from stratum.transaction import Transaction
    >>> txn = Transaction(config, mounts=mounts, probe=probe, sync=sync)
    >>> txn.begin()
"""

from ._hooks import HOOK_SHELL, HookRunner
from ._machine import MANIFEST_FILE_NAME, ConfirmCallback, PublishResult, Transaction

__all__ = [
    "HOOK_SHELL",
    "MANIFEST_FILE_NAME",
    "ConfirmCallback",
    "HookRunner",
    "PublishResult",
    "Transaction",
]
