#!/usr/bin/env python3
"""vnc-discover CLI"""

# ruff: noqa: E402
# ========================================
# Early initialization (must happen before other imports)
# ========================================
from .utils.env_loader import load_dotenv_early

# SessionConfig.from_env() reads VNC_DISCOVER_* at call time, but keep
# .env loaded before anything else touches os.environ
load_dotenv_early()

import typer

from .commands.discover import load_config, run_scan, register_commands as register_discover
from .commands.version import register_commands as register_version
from .utils.env_loader import configure_logging

app = typer.Typer(
    name="vnc-discover",
    help="Find VNC (or other dns-sd advertised) hosts on the local network",
    add_completion=False,
)

register_discover(app)
register_version(app)


@app.callback(invoke_without_command=True)
def default_scan(ctx: typer.Context):
    """Without a subcommand, run a scan with the configured defaults."""
    if ctx.invoked_subcommand is not None:
        return
    configure_logging()
    run_scan(load_config())


def main():
    app()


if __name__ == "__main__":
    main()
