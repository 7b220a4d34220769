"""Collaborators shared by the administration operations."""

from dataclasses import dataclass
from typing import Self

from structlog.typing import FilteringBoundLogger

from stratum.config import ServerConfig
from stratum.mount import (
    MountController,
    OpenFileProbe,
    ProcOpenFileProbe,
    SystemMountController,
)
from stratum.services import (
    ExternalPullService,
    ExternalSyncService,
    SwissknifePullService,
    SwissknifeSyncService,
)
from stratum.signing import KeyGenerator
from stratum.utils import CommandRunner, run_command


@dataclass(frozen=True, slots=True)
class Backends:
    """Everything that touches the host beyond plain files.

    Tests build one from fakes; `system()` wires the real tools.

    Attributes:
        mounts: Mount controller.
        probe: Open-file probe.
        sync: Sync, sign and check service.
        pull: Replica pull service.
        keys: Key generator.
        runner: Runner for auxiliary commands (SELinux labelling).
    """

    mounts: MountController
    probe: OpenFileProbe
    sync: ExternalSyncService
    pull: ExternalPullService
    keys: KeyGenerator
    runner: CommandRunner = run_command

    @classmethod
    def system(
        cls,
        server: ServerConfig,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Return backends that drive the real host tools."""
        return cls(
            mounts=SystemMountController(server.tools, logger=logger),
            probe=ProcOpenFileProbe(),
            sync=SwissknifeSyncService(server.tools, logger=logger),
            pull=SwissknifePullService(server.tools, logger=logger),
            keys=KeyGenerator(server.tools, logger=logger),
        )
