"""CLI commands for plugin repositories.

Accessed via: ``paasctl add-plugin-repo``, ``remove-plugin-repo``,
``list-plugin-repos`` and ``repo-plugins``.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

console = Console()


def _get_repo_manager():
    from paasctl.config import PaasctlConfig, RepoConfigStore
    from paasctl.plugins import PluginRepoManager, RepoIndexClient

    cfg = PaasctlConfig()
    return PluginRepoManager(
        RepoConfigStore(cfg.config_file),
        index_client=RepoIndexClient(timeout=cfg.index_timeout),
    )


# ─── add-plugin-repo ──────────────────────────────────────────────────────────


def add_plugin_repo(
    name: str = typer.Argument(..., help="Name for the repository (unique, case-insensitive)."),
    url: str = typer.Argument(..., help="Base URL of the repository, e.g. http://myprivaterepo.com/repo/"),
):
    """Add a new plugin repository.

    The repository's index is fetched once; it is only saved if that works.

    Example:

        paasctl add-plugin-repo PrivateRepo http://myprivaterepo.com/repo/
    """
    async def _run():
        from paasctl.exceptions import PaasctlError
        from paasctl.cli.errors import format_error
        manager = _get_repo_manager()
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                transient=True,
            ) as progress:
                progress.add_task(f"Checking {escape(url)}...", total=None)
                added = await manager.add(name, url)
        except PaasctlError as exc:
            console.print(f"[red]Error:[/red] {format_error(exc)}")
            raise typer.Exit(1)
        console.print(f"[green]✓[/green] {escape(added.url)} added as '{escape(added.name)}'")

    asyncio.run(_run())


# ─── remove-plugin-repo ───────────────────────────────────────────────────────


def remove_plugin_repo(
    name: str = typer.Argument(..., help="Name of the repository to remove."),
):
    """Remove a plugin repository.

    Example:

        paasctl remove-plugin-repo PrivateRepo
    """
    from paasctl.exceptions import PaasctlError
    from paasctl.cli.errors import format_error
    manager = _get_repo_manager()
    try:
        removed = manager.remove(name)
    except PaasctlError as exc:
        console.print(f"[red]Error:[/red] {format_error(exc)}")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {escape(removed.name)} has been removed from the repository list")


# ─── list-plugin-repos ────────────────────────────────────────────────────────


def list_plugin_repos():
    """List all the added plugin repositories."""
    from paasctl.exceptions import PaasctlError
    from paasctl.cli.errors import format_error
    manager = _get_repo_manager()
    try:
        repos = manager.list_repos()
    except PaasctlError as exc:
        console.print(f"[red]Error:[/red] {format_error(exc)}")
        raise typer.Exit(1)

    if not repos:
        console.print("[dim]No plugin repos added.[/dim]")
        return

    table = Table("Repo Name", "URL")
    for r in repos:
        table.add_row(escape(r.name), escape(r.url))
    console.print(table)


# ─── repo-plugins ─────────────────────────────────────────────────────────────


def repo_plugins(
    repo: Optional[str] = typer.Option(
        None, "--repo", "-r", help="Name of a repository. Default: all added repositories."
    ),
):
    """List available plugins in one repository or in all added repositories.

    Examples:

        paasctl repo-plugins

        paasctl repo-plugins -r PrivateRepo
    """
    async def _run():
        from paasctl.exceptions import PaasctlError
        from paasctl.cli.errors import format_error
        manager = _get_repo_manager()
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("Fetching plugin indexes..."),
                transient=True,
            ) as progress:
                progress.add_task("", total=None)
                listings = await manager.list_plugins(repo)
        except PaasctlError as exc:
            console.print(f"[red]Error:[/red] {format_error(exc)}")
            raise typer.Exit(1)

        if not listings:
            console.print("[dim]No plugin repos added.[/dim]")
            return

        failed = False
        for plugin_repo, listing in listings:
            console.print(f"\n[bold]Repository: {escape(plugin_repo.name)}[/bold]")
            if isinstance(listing, PaasctlError):
                failed = True
                console.print(f"[red]Error:[/red] {format_error(listing)}")
                continue
            if not listing.plugins:
                console.print("[dim]No plugins published.[/dim]")
                continue
            table = Table("Name", "Version", "Platforms", "Description")
            for entry in listing.plugins:
                table.add_row(
                    escape(entry.name),
                    escape(entry.version),
                    escape(", ".join(b.platform for b in entry.binaries)),
                    escape(entry.description[:60]),
                )
            console.print(table)

        if failed and repo:
            raise typer.Exit(1)

    asyncio.run(_run())
