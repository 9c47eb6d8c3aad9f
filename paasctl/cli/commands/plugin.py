"""paasctl install-plugin — install a plugin from a file, URL or plugin repository."""

from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

console = Console()


def _get_installer(require_checksum: bool):
    """Wire an installer and plugin host from the resolved settings."""
    from paasctl.config import PaasctlConfig, RepoConfigStore
    from paasctl.plugins import (
        FileDownloader,
        PluginHost,
        PluginInstaller,
        RepoIndexClient,
    )

    cfg = PaasctlConfig()
    installer = PluginInstaller(
        RepoConfigStore(cfg.config_file),
        index_client=RepoIndexClient(timeout=cfg.index_timeout),
        downloader=FileDownloader(timeout=cfg.download_timeout, max_redirects=cfg.max_redirects),
        require_checksum=require_checksum or cfg.require_checksum,
        staging_root=cfg.staging_root,
    )
    return cfg, installer, PluginHost(cfg.plugins_dir)


def install_plugin(
    source: str = typer.Argument(
        ...,
        help="Path to a plugin binary, an http(s) URL, or a plugin name when used with --repo/--all-repos.",
    ),
    repo: Optional[str] = typer.Option(
        None, "--repo", "-r", help="Name of the plugin repo to install the plugin from."
    ),
    all_repos: bool = typer.Option(
        False, "--all-repos", "-a", help="Search every configured plugin repo, in order."
    ),
    require_checksum: bool = typer.Option(
        False, "--require-checksum", help="Refuse plugins whose repo publishes no checksum."
    ),
    deadline: Optional[float] = typer.Option(
        None, "--deadline", help="Give up after this many seconds."
    ),
):
    """Install a plugin binary.

    Examples:

        paasctl install-plugin ~/Downloads/my-plugin

        paasctl install-plugin https://example.com/my-plugin-linux64

        paasctl install-plugin my-plugin -r PrivateRepo

        paasctl install-plugin my-plugin --all-repos
    """
    async def _run():
        from paasctl.exceptions import PaasctlError
        from paasctl.cli.errors import format_error
        from paasctl.plugins import build_request, current_platform

        cfg, installer, host = _get_installer(require_checksum)
        try:
            request = build_request(
                source,
                repo_name=repo,
                all_repos=all_repos,
                platform=current_platform(cfg.platform),
            )
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                transient=True,
            ) as progress:
                progress.add_task(f"Installing {escape(source)}...", total=None)
                result = await installer.install(
                    request,
                    deadline=deadline if deadline is not None else cfg.install_deadline,
                )
            installed_path = host.register(result)
        except PaasctlError as exc:
            console.print(f"[red]Error:[/red] {format_error(exc)}")
            raise typer.Exit(1)

        for outcome in result.skipped:
            console.print(
                f"[dim]Skipped repo {escape(outcome.repo_name)}: {outcome.status.value}[/dim]"
            )
        if result.repo_name and not result.checksum_verified:
            console.print(
                f"[yellow]Warning:[/yellow] plugin repo '{escape(result.repo_name)}' publishes no "
                f"checksum for {escape(result.plugin_name)}; the binary was installed unverified."
            )

        label = escape(result.plugin_name)
        if result.version:
            label += f" v{escape(result.version)}"
        console.print(
            f"[green]✓[/green] Plugin [bold]{label}[/bold] successfully installed at "
            f"{escape(str(installed_path))}"
        )

    asyncio.run(_run())
