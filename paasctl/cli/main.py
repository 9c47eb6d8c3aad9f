"""paasctl CLI — Typer application."""

import logging

import typer
from rich.console import Console
from rich.markup import escape

from paasctl.version import __version__

app = typer.Typer(
    name="paasctl",
    help="paasctl — plugin management for the PaaS command-line client.",
    no_args_is_help=True,
    invoke_without_command=True,
)
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", is_eager=True, help="Show version"),
):
    """paasctl CLI."""
    if version:
        console.print(f"paasctl v{__version__}")
        raise typer.Exit()

    from pydantic import ValidationError
    try:
        from paasctl.config import PaasctlConfig
        cfg = PaasctlConfig()
    except ValidationError as exc:
        console.print(f"[red]Error:[/red] Invalid paasctl settings (PAASCTL_* / .env):\n{escape(str(exc))}")
        raise typer.Exit(1)
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


# ── Plugins ────────────────────────────────────────────────────────────────────
from paasctl.cli.commands import plugin  # noqa: E402

app.command(name="install-plugin", help="Install a plugin from a file, URL or plugin repo")(plugin.install_plugin)

# ── Plugin repositories ────────────────────────────────────────────────────────
from paasctl.cli.commands import repo  # noqa: E402

app.command(name="add-plugin-repo", help="Add a new plugin repository")(repo.add_plugin_repo)
app.command(name="remove-plugin-repo", help="Remove a plugin repository")(repo.remove_plugin_repo)
app.command(name="list-plugin-repos", help="List all the added plugin repositories")(repo.list_plugin_repos)
app.command(name="repo-plugins", help="List all available plugins in specified repository or in all added repositories")(repo.repo_plugins)

# ── Settings ───────────────────────────────────────────────────────────────────
from paasctl.cli.commands import config  # noqa: E402

app.command(name="config", help="Show resolved configuration")(config.config_show)


if __name__ == "__main__":
    app()
