"""Unified CLI entry point for Sidecar.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (SIDECAR_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import logging

import typer

from sidecar.cli.action_cmd import action_app
from sidecar.cli.catalog_cmd import catalog_app
from sidecar.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("sidecar")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "sidecar — run scripted readers and writers against live web pages. "
    "Config precedence: settings.default.toml -> settings.local.toml -> env vars (SIDECAR_* with __) -> CLI flags."
)

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

app = typer.Typer(add_completion=True, help=APP_HELP)

app.add_typer(catalog_app, name="catalog")
app.add_typer(action_app, name="action")
app.add_typer(settings_app, name="settings")


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging from settings (``--verbose`` forces DEBUG)."""
    from sidecar.settings import get_settings

    level = "DEBUG" if verbose else get_settings().effective_log_level
    logging.basicConfig(level=level, format=LOG_FORMAT)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"sidecar {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()
    configure_logging(verbose)


if __name__ == "__main__":
    app()
