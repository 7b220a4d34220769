"""Repository administration.

`RepositoryManager` is the single entry point the CLI uses. Every call reads
the repository configuration from disk first, so nothing is cached between
operations.
"""

import pwd
import shutil
from pathlib import Path
from urllib.parse import urlsplit

from structlog.typing import FilteringBoundLogger

from stratum.admin._backends import Backends
from stratum.admin._client import write_client_config
from stratum.admin._info import RepositoryInfo
from stratum.config import (
    ReplicaTuning,
    RepositoryConfig,
    RepositoryRegistry,
    ServerConfig,
    validate_repository_name,
)
from stratum.enums import DebugMode, RepositoryRole, TransactionState
from stratum.exceptions import (
    ConfirmationDeclinedError,
    MountError,
    RepositoryExistsError,
    ResourceBusyError,
    SigningError,
    SnapshotMarkerError,
    UnknownOwnerError,
    UsageError,
)
from stratum.mount import FstabEditor, build_mount_entries
from stratum.replica import ReplicaPuller, read_last_snapshot
from stratum.services import ServiceResult
from stratum.signing import (
    Whitelist,
    build_whitelist,
    parse_whitelist,
    read_whitelist,
    remove_keys,
    write_whitelist,
)
from stratum.spool import (
    SpoolArea,
    TransactionLock,
    create_skeleton,
    ensure_directory,
    remove_tree,
)
from stratum.transaction import (
    MANIFEST_FILE_NAME,
    ConfirmCallback,
    HookRunner,
    PublishResult,
    Transaction,
)
from stratum.utils import create_null_logger


def replica_name_from_url(url: str) -> str:
    """Derive a replica's name from the last path component of its origin URL.

    Raises:
        UsageError: If the URL has no path component.
    """
    component = urlsplit(url).path.rstrip("/").rsplit("/", 1)[-1]
    if not component:
        msg = f"Cannot derive a repository name from '{url}'; pass --name"
        raise UsageError(msg)
    return component


def require_owner(owner: str) -> None:
    """Check that a repository owner is a user on this host.

    Raises:
        UnknownOwnerError: If no such user exists.
    """
    try:
        _ = pwd.getpwnam(owner)
    except KeyError as e:
        msg = f"Owner '{owner}' is not a user on this host"
        raise UnknownOwnerError(msg, owner=owner) from e



class RepositoryManager:
    """Creates, removes, inspects and drives the repositories of a host.

    Example:
        >>> server = ServerConfig.load()
        >>> manager = RepositoryManager(server, Backends.system(server))
        >>> manager.begin("acme.example.org")
        >>> manager.publish("acme.example.org")
    """

    __slots__ = ("_backends", "_logger", "_registry", "_server")

    def __init__(
        self,
        server: ServerConfig,
        backends: Backends,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._server = server
        self._backends = backends
        self._registry = RepositoryRegistry(server.config_dir)
        self._logger = logger or create_null_logger()

    @property
    def server(self) -> ServerConfig:
        return self._server

    @property
    def registry(self) -> RepositoryRegistry:
        return self._registry

    @property
    def backends(self) -> Backends:
        return self._backends

    def _fstab(self) -> FstabEditor:
        return FstabEditor(self._server.paths.fstab)

    def _transaction(self, name: str) -> Transaction:
        return Transaction(
            self._registry.load(name),
            mounts=self._backends.mounts,
            probe=self._backends.probe,
            sync=self._backends.sync,
            hooks=HookRunner(self._server.hooks, logger=self._logger),
            logger=self._logger,
        )

    def _load_origin(self, name: str) -> RepositoryConfig:
        return self._registry.load(name, role=RepositoryRole.ORIGIN)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def begin(self, name: str) -> None:
        """Open a transaction on an origin."""
        self._transaction(name).begin()

    def abort(
        self,
        name: str,
        confirm: ConfirmCallback | None = None,
        *,
        force: bool = False,
    ) -> None:
        """Discard the open transaction of an origin."""
        self._transaction(name).abort(confirm, force=force)

    def publish(
        self, name: str, debug_mode: DebugMode = DebugMode.NONE
    ) -> PublishResult:
        """Publish the open transaction of an origin."""
        return self._transaction(name).publish(debug_mode)

    def snapshot(self, name: str) -> bool:
        """Pull new revisions into a replica.

        Returns:
            True if the pull was incremental.
        """
        config = self._registry.load(name)
        puller = ReplicaPuller(config, pull=self._backends.pull, logger=self._logger)
        _ = ensure_directory(SpoolArea.for_repository(config).tmp)
        return puller.snapshot()

    # =========================================================================
    # Creation and removal
    # =========================================================================

    def mkfs(
        self,
        name: str,
        *,
        owner: str,
        stratum0_url: str | None = None,
    ) -> RepositoryConfig:
        """Create an origin repository and mount it read-only.

        Raises:
            ConfigValidationError: If the name is invalid.
            RepositoryExistsError: If the name is taken.
            UnknownOwnerError: If the owner is not a user on this host.
            ExternalCommandError: If key generation or the initial revision fails.
            SigningError: If the whitelist cannot be signed.
            MountError: If mounting fails.
        """
        _ = validate_repository_name(name)
        if self._registry.exists(name):
            msg = f"Repository '{name}' already exists"
            raise RepositoryExistsError(msg, name=name)
        require_owner(owner)

        config = RepositoryConfig.new_origin(
            name, owner=owner, server=self._server, stratum0_url=stratum0_url
        )
        certificate, private_key = config.keys.certificate, config.keys.private_key
        if certificate is None or private_key is None:
            msg = f"Repository '{name}' has no signing key configured"
            raise SigningError(msg)
        log = self._logger.bind(repository=name)
        log.info("mkfs_begin", owner=owner)
        self._registry.create(config)

        spool = SpoolArea.for_repository(config)
        spool.create(owner)
        create_skeleton(config.storage_dir, owner, runner=self._backends.runner)
        _ = ensure_directory(config.union_mount)

        generated = self._backends.keys.ensure(config.keys, name)
        log.debug("mkfs_step", step="keys", generated=generated)
        _ = self._write_whitelist(config)

        manifest = spool.tmp / MANIFEST_FILE_NAME
        sync = self._backends.sync
        _ = sync.create(spool.tmp, config.upstream, manifest).raise_for_status()
        _ = sync.sign(
            manifest, certificate, private_key, name, config.upstream, spool.tmp
        ).raise_for_status()
        log.debug("mkfs_step", step="initial_revision")

        write_client_config(config)
        self._fstab().add_entries(name, build_mount_entries(config, self._server.tools))
        self._backends.mounts.mount_read_only(spool.rdonly)
        self._backends.mounts.mount_read_only(config.union_mount)

        log.info("mkfs_completed")
        return config

    def add_replica(
        self,
        stratum0_url: str,
        public_key: Path,
        *,
        owner: str,
        name: str | None = None,
        tuning: ReplicaTuning | None = None,
    ) -> RepositoryConfig:
        """Register a replica of a remote origin.

        Raises:
            UsageError: If no name is given and none can be derived.
            ConfigValidationError: If the name is invalid.
            RepositoryExistsError: If the name is taken.
            UnknownOwnerError: If the owner is not a user on this host.
            FileNotFoundError: If the public key does not exist.
        """
        name = name or replica_name_from_url(stratum0_url)
        _ = validate_repository_name(name)
        if self._registry.exists(name):
            msg = f"Repository '{name}' already exists"
            raise RepositoryExistsError(msg, name=name)
        if not public_key.is_file():
            msg = f"Public key {public_key} does not exist"
            raise FileNotFoundError(msg)
        require_owner(owner)

        config = RepositoryConfig.new_replica(
            name,
            owner=owner,
            server=self._server,
            stratum0_url=stratum0_url,
            tuning=tuning,
        )
        self._registry.create(config)

        destination = config.keys.public_key
        destination.parent.mkdir(parents=True, exist_ok=True)
        if public_key.resolve() != destination.resolve():
            _ = shutil.copyfile(public_key, destination)

        _ = ensure_directory(SpoolArea.for_repository(config).tmp, owner=owner)
        create_skeleton(config.storage_dir, owner, runner=self._backends.runner)

        self._logger.info("replica_added", repository=name, origin=stratum0_url)
        return config

    def rmfs(
        self,
        name: str,
        confirm: ConfirmCallback | None = None,
        *,
        force: bool = False,
    ) -> None:
        """Remove a repository with its storage, spool, keys and mounts.

        Raises:
            RepositoryNotFoundError: If the repository does not exist.
            ResourceBusyError: If processes use the union mount.
            ConfirmationDeclinedError: If the confirmation is declined.
            MountError: If unmounting fails.
        """
        config = self._registry.load(name)
        spool = SpoolArea.for_repository(config)
        mounts = self._backends.mounts

        if config.is_origin and mounts.is_mounted(config.union_mount):
            pids = self._backends.probe.open_handles(config.union_mount)
            if pids:
                listed = ", ".join(str(pid) for pid in pids)
                msg = (
                    f"Open file descriptors under {config.union_mount} "
                    f"(pids {listed})"
                )
                raise ResourceBusyError(msg, path=config.union_mount, pids=pids)

        if not force:
            question = (
                f"You are about to WIPE OUT '{name}' INCLUDING ITS STORAGE "
                f"AND SIGNING KEYS! Are you sure"
            )
            if confirm is None or not confirm(question):
                msg = f"Removal of '{name}' declined"
                raise ConfirmationDeclinedError(msg)

        log = self._logger.bind(repository=name)
        log.info("rmfs_begin")
        for mount_point in (config.union_mount, spool.rdonly):
            if mounts.is_mounted(mount_point):
                mounts.unmount(mount_point)
        _ = self._fstab().remove_entries(name)

        _ = remove_tree(spool.root)
        _ = remove_tree(config.storage_dir)
        removed_keys = remove_keys(config.keys)
        if config.union_mount.is_dir() and not any(config.union_mount.iterdir()):
            config.union_mount.rmdir()
        self._registry.remove(name)
        log.info("rmfs_completed", removed_keys=[str(path) for path in removed_keys])

    # =========================================================================
    # Maintenance
    # =========================================================================

    def _write_whitelist(self, config: RepositoryConfig) -> Whitelist:
        keys = config.keys
        if keys.certificate is None or keys.master_key is None:
            msg = f"Repository '{config.name}' has no master key configured"
            raise SigningError(msg)
        data = build_whitelist(
            config.name,
            keys.certificate.read_bytes(),
            keys.master_key.read_bytes(),
            days=self._server.whitelist_days,
        )
        _ = write_whitelist(config.storage_dir, data)
        return parse_whitelist(data)

    def resign(self, name: str) -> Whitelist:
        """Sign a fresh whitelist for an origin.

        Raises:
            RepositoryNotFoundError: If the repository does not exist.
            WrongRoleError: If the repository is a replica.
            SigningError: If the key material cannot be used.
        """
        whitelist = self._write_whitelist(self._load_origin(name))
        self._logger.info(
            "whitelist_signed",
            repository=name,
            expires=whitelist.expires.to_iso8601_string(),
        )
        return whitelist

    def check(self, name: str) -> ServiceResult:
        """Verify a repository's storage with the external checker.

        Raises:
            ExternalCommandError: If the check fails.
        """
        config = self._registry.load(name)
        return self._backends.sync.check(config.storage_dir).raise_for_status()

    def skeleton(self, directory: Path, owner: str | None = None) -> None:
        """Create a storage skeleton in an arbitrary directory."""
        if owner is not None:
            require_owner(owner)
        create_skeleton(directory, owner, runner=self._backends.runner)

    # =========================================================================
    # Inspection
    # =========================================================================

    def _root_hash(self, config: RepositoryConfig) -> str | None:
        rdonly = SpoolArea.for_repository(config).rdonly
        mounts = self._backends.mounts
        try:
            if not mounts.is_mounted(rdonly):
                return None
            return mounts.root_hash(rdonly)
        except MountError as e:
            self._logger.warning(
                "root_hash_unavailable", repository=config.name, error=str(e)
            )
            return None

    def info(self, name: str) -> RepositoryInfo:
        """Return configuration and state of a repository.

        Raises:
            RepositoryNotFoundError: If the repository does not exist.
        """
        config = self._registry.load(name)
        state = root_hash = expires = last_snapshot = None

        if config.is_origin:
            lock = TransactionLock(SpoolArea.for_repository(config).marker)
            state = (
                TransactionState.IN_TRANSACTION if lock.held else TransactionState.IDLE
            )
            root_hash = self._root_hash(config)
            try:
                whitelist = read_whitelist(config.storage_dir)
            except SigningError as e:
                self._logger.warning(
                    "whitelist_unreadable", repository=name, error=str(e)
                )
                whitelist = None
            if whitelist is not None:
                expires = whitelist.expires.to_iso8601_string()
                if whitelist.expired:
                    self._logger.warning(
                        "whitelist_expired", repository=name, expires=expires
                    )
        else:
            try:
                snapshot = read_last_snapshot(config.storage_dir)
            except SnapshotMarkerError as e:
                self._logger.warning(
                    "last_snapshot_unreadable", repository=name, error=str(e)
                )
                snapshot = None
            if snapshot is not None:

                last_snapshot = snapshot.to_iso8601_string()

        return RepositoryInfo(
            name=config.name,
            role=config.role,
            owner=config.owner,
            stratum0_url=config.stratum0_url,
            union_mount=str(config.union_mount),
            spool_dir=str(config.spool_dir),
            storage_dir=str(config.storage_dir),
            upstream=config.upstream,
            state=state,
            root_hash=root_hash,
            whitelist_expires=expires,
            last_snapshot=last_snapshot,
        )

    def list_repositories(self) -> list[RepositoryInfo]:
        """Return the status of every registered repository, sorted by name."""
        return [self.info(name) for name in self._registry.names()]

