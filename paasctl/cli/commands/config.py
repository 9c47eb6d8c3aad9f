"""paasctl config — Show resolved paasctl configuration."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

console = Console()


def config_show():
    """Show the resolved paasctl configuration.

    Reads from environment variables and .env file.

    Example:
        paasctl config
    """
    from paasctl.config import PaasctlConfig
    from paasctl.plugins import current_platform
    cfg = PaasctlConfig()

    table = Table(
        box=box.ROUNDED,
        header_style="bold dim",
        show_lines=False,
        title="[bold]paasctl Configuration[/bold]",
    )
    table.add_column("Key", style="cyan", width=24)
    table.add_column("Value", width=50)
    table.add_column("Env Var", style="dim", width=30)

    sections = [
        ("App", [
            ("home", "PAASCTL_HOME"),
            ("log_level", "PAASCTL_LOG_LEVEL"),
        ]),
        ("HTTP", [
            ("index_timeout", "PAASCTL_INDEX_TIMEOUT"),
            ("download_timeout", "PAASCTL_DOWNLOAD_TIMEOUT"),
            ("max_redirects", "PAASCTL_MAX_REDIRECTS"),
        ]),
        ("Install", [
            ("install_deadline", "PAASCTL_INSTALL_DEADLINE"),
            ("platform", "PAASCTL_PLATFORM"),
            ("require_checksum", "PAASCTL_REQUIRE_CHECKSUM"),
            ("staging_root", "PAASCTL_STAGING_ROOT"),
        ]),
    ]

    first = True
    for section_name, fields in sections:
        if not first:
            table.add_row("", "", "")
        first = False
        table.add_row(f"[bold dim]── {section_name} ──[/bold dim]", "", "")
        for attr, env_var in fields:
            val = getattr(cfg, attr, None)
            if val is None or val == "":
                display = "[dim](not set)[/dim]"
            else:
                display = escape(str(val))
            table.add_row(f"  {attr}", display, env_var)

    console.print()
    console.print(table)
    console.print()
    console.print(f"Detected platform: [bold]{escape(current_platform(cfg.platform))}[/bold]")
    console.print(f"Config file: {escape(str(cfg.config_file))}")
    console.print("[dim]Source: environment variables + .env file (prefix: PAASCTL_)[/dim]")
