# pyright: reportUnusedCallResult=false
"""Read-only inspection commands: info and list."""

from typing import Annotated, Literal

from cyclopts import Parameter
from rich.table import Table

from stratum.admin import RepositoryInfo

from ._context import CLIContext, OutputFormat
from ._shared import format_json, reporting_errors

__all__ = ["info", "list_repositories"]


def _print_json(ctx: CLIContext, text: str) -> None:
    ctx.console.print(text, markup=False, highlight=False, soft_wrap=True)


def info(
    name: str,
    format: Annotated[  # noqa: A002
        Literal["plain", "json"],
        Parameter(name=["--format"], help="Output format"),
    ] = "plain",
) -> None:
    """Show configuration and state of a repository.

    Args:
        name: Repository name.
        format: Output format.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        details = ctx.manager.info(name)

    if OutputFormat(format) is OutputFormat.JSON:
        _print_json(ctx, format_json(details.to_dict()))
        return

    rows = details.rows()
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        ctx.console.print(
            f"{label + ':':<{width + 1}} {value}", markup=False, highlight=False
        )


def _build_table(repositories: list[RepositoryInfo]) -> Table:
    table = Table(title="Repositories")
    table.add_column("Name", style="bold")
    table.add_column("Role")
    table.add_column("State")
    table.add_column("Stratum 0 URL", overflow="fold")
    for repository in repositories:
        table.add_row(
            repository.name,
            str(repository.role),
            str(repository.state) if repository.state is not None else "-",
            repository.stratum0_url,
        )
    return table


def list_repositories(
    format: Annotated[  # noqa: A002
        Literal["table", "json"],
        Parameter(name=["--format"], help="Output format"),
    ] = "table",
) -> None:
    """List the repositories hosted on this machine.

    Args:
        format: Output format.
    """
    ctx = CLIContext.get_current()
    with reporting_errors(ctx.console, ctx.error_console, ctx.logger):
        repositories = ctx.manager.list_repositories()

    if OutputFormat(format) is OutputFormat.JSON:
        _print_json(ctx, format_json([repo.to_dict() for repo in repositories]))
        return

    if not repositories:
        ctx.say("[dim]No repositories[/dim]")
        return
    ctx.console.print(_build_table(repositories))
