"""Repository transaction state machine.

An origin repository is either IDLE, with its union mount read-only, or
IN_TRANSACTION, with the union mount writable and the marker present in the
spool directory. The marker is the only witness of the state.

Transitions:

    IDLE ──begin──▶ IN_TRANSACTION ──publish──▶ IDLE
                          │
                          └──────abort──────▶ IDLE

Preconditions are checked before anything is touched. A failure after the
first mutation is not rolled back; the operator fixes the cause and runs the
same command again.
"""

from collections.abc import Callable
from dataclasses import dataclass

from structlog.typing import FilteringBoundLogger

from stratum.config import RepositoryConfig
from stratum.enums import DebugMode, HookName, MountMode, TransactionState
from stratum.exceptions import (
    AlreadyInTransactionError,
    ConfirmationDeclinedError,
    NotInTransactionError,
    ResourceBusyError,
    SigningError,
    WrongRoleError,
)
from stratum.mount import MountController, OpenFileProbe
from stratum.services import ExternalSyncService
from stratum.spool import (
    SpoolArea,
    TransactionLock,
    clear_and_recreate,
    clear_directory,
)
from stratum.transaction._hooks import HookRunner
from stratum.utils import create_null_logger

MANIFEST_FILE_NAME = "manifest"

type ConfirmCallback = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Outcome of a publish.

    Attributes:
        previous_root_hash: Root hash of the base layer before publishing.
        root_hash: Root hash of the remounted base layer.
    """

    previous_root_hash: str
    root_hash: str


class Transaction:
    """The begin / abort / publish transitions of one origin repository.

    Example:
        >>> txn = Transaction(config, mounts=mounts, probe=probe, sync=sync)
        >>> txn.begin()
        >>> txn.state
        <TransactionState.IN_TRANSACTION: 'in_transaction'>
        >>> result = txn.publish()
        >>> txn.state
        <TransactionState.IDLE: 'idle'>
    """

    __slots__ = (
        "_config",
        "_hooks",
        "_lock",
        "_logger",
        "_mounts",
        "_probe",
        "_spool",
        "_sync",
    )

    def __init__(
        self,
        config: RepositoryConfig,
        *,
        mounts: MountController,
        probe: OpenFileProbe,
        sync: ExternalSyncService,
        hooks: HookRunner | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._config = config
        self._mounts = mounts
        self._probe = probe
        self._sync = sync
        self._hooks = hooks or HookRunner()
        self._spool = SpoolArea.for_repository(config)
        self._lock = TransactionLock(self._spool.marker)
        self._logger = (logger or create_null_logger()).bind(repository=config.name)

    @property
    def config(self) -> RepositoryConfig:
        return self._config

    @property
    def spool(self) -> SpoolArea:
        return self._spool

    @property
    def state(self) -> TransactionState:
        """Return the current state, as witnessed by the marker."""
        if self._lock.held:
            return TransactionState.IN_TRANSACTION
        return TransactionState.IDLE

    # =========================================================================
    # Preconditions
    # =========================================================================

    def _require_origin(self) -> None:
        if not self._config.is_origin:
            msg = f"Repository '{self._config.name}' is a replica: no transactions"
            raise WrongRoleError(msg, name=self._config.name, role=self._config.role)

    def _require_transaction(self) -> None:
        if not self._lock.held:
            msg = "Not in a transaction."
            raise NotInTransactionError(msg)

    def _require_unused(self) -> None:
        union = self._config.union_mount
        pids = self._probe.open_handles(union)
        if pids:
            listed = ", ".join(str(pid) for pid in pids)
            msg = f"Open file descriptors under {union} (pids {listed})"
            self._logger.warning("union_busy", pids=pids)
            raise ResourceBusyError(msg, path=union, pids=pids)

    def _hook(self, hook: HookName) -> None:
        _ = self._hooks.run(hook, self._config.name)

    # =========================================================================
    # Transitions
    # =========================================================================

    def begin(self) -> None:
        """Open a transaction: make the union mount writable.

        Raises:
            WrongRoleError: If the repository is a replica.
            AlreadyInTransactionError: If a transaction is open.
            MountError: If the remount fails.
        """
        self._require_origin()
        if self._lock.held:
            msg = f"Repository '{self._config.name}' is already in a transaction"
            raise AlreadyInTransactionError(msg)

        self._logger.info("transaction_begin")
        self._hook(HookName.TRANSACTION_BEFORE)
        self._mounts.remount(self._config.union_mount, MountMode.READ_WRITE)
        self._lock.acquire()
        self._hook(HookName.TRANSACTION_AFTER)
        self._logger.info("transaction_opened")

    def abort(
        self,
        confirm: ConfirmCallback | None = None,
        *,
        force: bool = False,
    ) -> None:
        """Discard every change of the open transaction.

        Args:
            confirm: Asked before anything is discarded, unless ``force``.
                Without a callback the abort is declined.
            force: Skip the confirmation.

        Raises:
            WrongRoleError: If the repository is a replica.
            NotInTransactionError: If no transaction is open.
            ResourceBusyError: If processes use the union mount.
            ConfirmationDeclinedError: If the confirmation is declined.
            MountError: If a mount step fails.
        """
        self._require_origin()
        self._require_transaction()
        self._require_unused()
        if not force:
            question = (
                f"You are about to DISCARD ALL CHANGES OF THE CURRENT TRANSACTION "
                f"of '{self._config.name}'! Are you sure"
            )
            if confirm is None or not confirm(question):
                msg = f"Abort of '{self._config.name}' declined"
                raise ConfirmationDeclinedError(msg)

        union = self._config.union_mount
        owner = self._config.owner

        self._logger.info("abort_begin")
        self._hook(HookName.ABORT_BEFORE)
        self._mounts.unmount(union)
        self._logger.debug("abort_step", step="unmounted_union")
        clear_directory(self._spool.tmp)
        clear_and_recreate(self._spool.scratch, owner)
        self._logger.debug("abort_step", step="scratch_cleared")
        self._mounts.mount_read_only(union)
        self._lock.release()
        self._hook(HookName.ABORT_AFTER)
        self._logger.info("abort_completed")

    def publish(self, debug_mode: DebugMode = DebugMode.NONE) -> PublishResult:
        """Commit the open transaction into a new signed revision.

        The union mount is frozen read-only before the sync step reads it.
        If sync or sign fails, the repository stays read-only and in the
        transaction, so the publish can be retried once the cause is fixed.

        Args:
            debug_mode: Execution wrapper for the sync and sign steps.

        Returns:
            The root hashes before and after.

        Raises:
            WrongRoleError: If the repository is a replica.
            NotInTransactionError: If no transaction is open.
            ResourceBusyError: If processes use the union mount.
            ExternalCommandError: If sync or sign fails.
            MountError: If a mount step fails.
        """
        self._require_origin()
        self._require_transaction()
        self._require_unused()

        keys = self._config.keys
        if keys.certificate is None or keys.private_key is None:
            msg = f"Repository '{self._config.name}' has no signing key configured"
            raise SigningError(msg)

        union = self._config.union_mount
        spool = self._spool
        manifest = spool.tmp / MANIFEST_FILE_NAME

        self._logger.info("publish_begin", debug_mode=str(debug_mode))
        self._hook(HookName.PUBLISH_BEFORE)
        self._mounts.remount(union, MountMode.READ_ONLY)
        base_hash = self._mounts.root_hash(spool.rdonly)
        self._logger.debug("publish_step", step="frozen", base_hash=base_hash)

        synced = self._sync.sync(
            union,
            spool.scratch,
            spool.rdonly,
            spool.tmp,
            base_hash,
            self._config.upstream,
            manifest,
            self._config.hash_algorithm,
            debug_mode=debug_mode,
        ).raise_for_status()
        self._logger.debug("publish_step", step="synced")

        _ = self._sync.sign(
            synced.manifest or manifest,
            keys.certificate,
            keys.private_key,
            self._config.name,
            self._config.upstream,
            spool.tmp,
            debug_mode=debug_mode,
        ).raise_for_status()
        self._logger.debug("publish_step", step="signed")

        self._mounts.unmount(union)
        self._mounts.unmount(spool.rdonly)
        clear_and_recreate(spool.scratch, self._config.owner)
        clear_directory(spool.tmp)
        self._mounts.mount_read_only(spool.rdonly)
        self._mounts.mount_read_only(union)
        root_hash = self._mounts.root_hash(spool.rdonly)
        self._lock.release()
        self._hook(HookName.PUBLISH_AFTER)

        self._logger.info(
            "publish_completed", previous_root_hash=base_hash, root_hash=root_hash
        )
        return PublishResult(previous_root_hash=base_hash, root_hash=root_hash)
