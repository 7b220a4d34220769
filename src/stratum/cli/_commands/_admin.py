# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing
# ruff: noqa: FBT002
"""Repository administration commands."""

import getpass
from pathlib import Path
from typing import Annotated

from cyclopts import Parameter

from ._context import CLIContext
from ._shared import reporting_errors

__all__ = ["add_replica", "check", "mkfs", "resign", "rmfs", "skeleton"]

OwnerOption = Annotated[
    str | None,
    Parameter(name=["--owner", "-o"], help="Edit user (default: current user)"),
]


def mkfs(
    name: str,
    owner: OwnerOption = None,
    stratum0_url: Annotated[
        str | None,
        Parameter(name=["--stratum0-url", "-w"], help="Public URL of the repository"),
    ] = None,
) -> None:
    """Create an origin repository.

    Generates missing keys, signs a whitelist, writes an empty signed
    revision and mounts the repository read-only.

    Args:
        name: Fully qualified repository name.
        owner: Edit user.
        stratum0_url: Public URL of the repository.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        config = ctx.manager.mkfs(
            name, owner=owner or getpass.getuser(), stratum0_url=stratum0_url
        )
    ctx.say(f"[green]Created origin repository '{config.name}'[/green]")
    if ctx.verbose:
        ctx.console.print(f"Union mount: {config.union_mount}")
        ctx.console.print(f"Storage:     {config.storage_dir}")
        ctx.console.print(f"Public key:  {config.keys.public_key}")


def add_replica(
    stratum0_url: str,
    public_key: Path,
    owner: OwnerOption = None,
    name: Annotated[
        str | None,
        Parameter(name=["--name", "-n"], help="Replica name (default: from the URL)"),
    ] = None,
) -> None:
    """Register a replica of a remote origin.

    Args:
        stratum0_url: URL of the origin repository.
        public_key: Public key that verifies the origin's signatures.
        owner: Edit user.
        name: Replica name.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        config = ctx.manager.add_replica(
            stratum0_url, public_key, owner=owner or getpass.getuser(), name=name
        )
    ctx.say(f"[green]Added replica '{config.name}' of {stratum0_url}[/green]")
    ctx.say(f"[dim]Run 'stratum snapshot {config.name}' to pull it[/dim]")


def rmfs(
    name: str,
    force: Annotated[
        bool,
        Parameter(name=["--force", "-f"], negative="", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Remove a repository with its storage, keys and mounts.

    Args:
        name: Repository name.
        force: Skip the confirmation prompt.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        ctx.manager.rmfs(name, ctx.confirm, force=force)
    ctx.say(f"[green]Removed repository '{name}'[/green]")


def resign(name: str) -> None:
    """Sign a fresh whitelist for an origin.

    Args:
        name: Repository name.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        whitelist = ctx.manager.resign(name)
    expires = whitelist.expires.to_iso8601_string()
    ctx.say(f"[green]Signed whitelist for '{name}', valid until {expires}[/green]")


def check(name: str) -> None:
    """Verify the integrity of a repository's storage.

    Args:
        name: Repository name.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        result = ctx.manager.check(name)
        ctx.logger.info("check_passed", repository=name)
    ctx.say(f"[green]Storage of '{name}' is consistent[/green]")
    if ctx.verbose and result.stdout:
        ctx.console.print(result.stdout.rstrip(), markup=False, highlight=False)


def skeleton(
    directory: Path,
    owner: OwnerOption = None,
) -> None:
    """Create an empty storage layout in a directory.

    Args:
        directory: Target directory.
        owner: User that should own the layout.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        ctx.manager.skeleton(directory, owner)
        ctx.logger.info("skeleton_created", directory=str(directory), owner=owner)
    ctx.say(f"[green]Created storage skeleton in {directory}[/green]")
