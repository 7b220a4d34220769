"""Enumeration types for stratum."""

from enum import StrEnum


class RepositoryRole(StrEnum):
    """Role a repository plays on this host."""

    ORIGIN = "origin"
    REPLICA = "replica"


class TransactionState(StrEnum):
    """States of the origin transaction state machine."""

    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"


class MountMode(StrEnum):
    """Mount access modes."""

    READ_ONLY = "ro"
    READ_WRITE = "rw"


class DebugMode(StrEnum):
    """How the external sync and sign steps are executed during publish."""

    NONE = "none"
    DEBUG_BINARY = "debug_binary"
    DEBUGGER = "debugger"


class HookName(StrEnum):
    """Hook points around the lifecycle transitions."""

    TRANSACTION_BEFORE = "transaction_before"
    TRANSACTION_AFTER = "transaction_after"
    ABORT_BEFORE = "abort_before"
    ABORT_AFTER = "abort_after"
    PUBLISH_BEFORE = "publish_before"
    PUBLISH_AFTER = "publish_after"


class Command(StrEnum):
    """Closed set of CLI commands.

    Every member maps to exactly one registered handler.
    """

    MKFS = "mkfs"
    ADD_REPLICA = "add-replica"
    PUBLISH = "publish"
    RMFS = "rmfs"
    RESIGN = "resign"
    INFO = "info"
    CHECK = "check"
    TRANSACTION = "transaction"
    ABORT = "abort"
    SNAPSHOT = "snapshot"
    LIST = "list"
    SKELETON = "skeleton"
