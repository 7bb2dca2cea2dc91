"""
Discovery commands.

ローカルネットワーク内の VNC ホスト (_rfb._tcp) を dns-sd で検索するコマンド。
"""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console

from ..discovery import DiscoverySession, SessionConfig
from ..ui.report import OutputFormat, ResultReporter
from ..utils.env_loader import configure_logging

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)

EXIT_SPAWN_FAILURE = 3
EXIT_INTERRUPTED = 130


def load_config(**overrides) -> SessionConfig:
    """Environment defaults with CLI overrides applied; exits 1 on bad values."""
    try:
        return SessionConfig.from_env().with_overrides(**overrides)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def run_scan(config: SessionConfig, output_format: OutputFormat = OutputFormat.PLAIN) -> None:
    """Run one session, report it and exit with the matching status."""
    session = DiscoverySession(config)
    reporter = ResultReporter(
        service_type=config.service_type,
        timeout=config.timeout,
        console=console,
        output_format=output_format,
    )

    try:
        result = asyncio.run(session.run())
    except KeyboardInterrupt:
        # 中断されても、それまでに見つかったホストは表示する
        if session.result is not None:
            reporter.report(session.result)
        err_console.print("\n[dim]Cancelled.[/dim]")
        raise typer.Exit(code=EXIT_INTERRUPTED)

    if result.partial:
        logger.warning(
            f"Timed out after {config.timeout:g}s; the host list may be incomplete"
        )

    reporter.report(result)

    if result.spawn_failed:
        raise typer.Exit(code=EXIT_SPAWN_FAILURE)


def scan_hosts(
    service_type: Optional[str] = typer.Option(
        None, "--service-type", "-s", help="Service type to browse (default: _rfb._tcp)"
    ),
    domain: Optional[str] = typer.Option(
        None, "--domain", "-d", help="Browse domain (default: local.)"
    ),
    timeout: Optional[str] = typer.Option(
        None, "--timeout", "-t", help="Time limit, e.g. 500ms, 2s (default: 500ms)"
    ),
    header_lines: Optional[int] = typer.Option(
        None, "--header-lines", min=0, help="Banner lines to skip (default: 4)"
    ),
    command: Optional[str] = typer.Option(
        None, "--command", help="Browse executable (default: dns-sd)"
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.PLAIN, "--format", "-f", help="Output format", case_sensitive=False
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
):
    """
    Browse for advertised services and list them.

    Stops when the browse tool finishes its current batch, or when the
    time limit is reached.
    """
    configure_logging(verbose)
    config = load_config(
        service_type=service_type,
        domain=domain,
        timeout=timeout,
        header_line_count=header_lines,
        command=command,
    )
    run_scan(config, output_format)


def register_commands(app: typer.Typer):
    """メインCLIアプリにコマンドを登録"""
    app.command("scan")(scan_hosts)
