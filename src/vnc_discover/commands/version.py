"""Version command."""
import shutil
from importlib.metadata import PackageNotFoundError, version as get_version

import typer
from rich.console import Console
from rich.table import Table

from ..discovery.config import DEFAULT_COMMAND

PACKAGE_NAME = "vnc-discover"
FALLBACK_VERSION = "0.1.0"

CORE_DEPS = ["typer", "rich", "python-dotenv"]


def package_version() -> str:
    try:
        return get_version(PACKAGE_NAME)
    except PackageNotFoundError:
        return FALLBACK_VERSION


def version(
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Also show dependency versions"),
):
    """Show the version"""
    v = package_version()
    if not detailed:
        typer.echo(f"vnc-discover v{v}")
        return

    console = Console()
    table = Table(title=f"vnc-discover v{v}", border_style="cyan")
    table.add_column("Component", style="cyan")
    table.add_column("Version")

    for dep in CORE_DEPS:
        try:
            table.add_row(dep, get_version(dep))
        except PackageNotFoundError:
            table.add_row(dep, "[dim]not installed[/dim]")

    browse_path = shutil.which(DEFAULT_COMMAND)
    table.add_row(DEFAULT_COMMAND, browse_path or "[dim]not on PATH[/dim]")

    console.print(table)


def register_commands(app: typer.Typer):
    app.command("version")(version)
