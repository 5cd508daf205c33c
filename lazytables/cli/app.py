"""Typer-based CLI wiring."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lazytables.core.config import ConfigManager, LazyTablesSettings
from lazytables.core.connections import ConnectionStore
from lazytables.utils.errors import ConfigurationError, ConnectionStoreError
from lazytables.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

APP_VERSION = "0.1.0"

app = typer.Typer(help="LazyTables terminal database browser", add_completion=False)


@dataclass
class CLIState:
    config_path: Optional[Path]
    debug: bool


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"LazyTables {APP_VERSION}")
        raise typer.Exit()


def _fail(message: str) -> typer.Exit:
    typer.secho(message, err=True, fg=typer.colors.RED)
    return typer.Exit(code=1)


def _initialise(state: CLIState, *, console: bool) -> LazyTablesSettings:
    """Load settings and configure logging, exiting with status 1 on failure."""

    try:
        settings = asyncio.run(ConfigManager(state.config_path).load())
    except ConfigurationError as exc:
        raise _fail(f"Configuration error: {exc}") from exc
    level = "DEBUG" if state.debug else settings.app.log_level
    try:
        log_file = configure_logging(level=level, console=console)
    except (OSError, ValueError) as exc:
        raise _fail(f"Could not configure logging: {exc}") from exc
    logger.debug("logging to %s", log_file)
    return settings


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
    debug: bool = typer.Option(False, "--debug", help="Write debug output to the log file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a YAML or TOML config file"),
) -> None:
    """Launch the TUI when no subcommand is given."""

    state = CLIState(config_path=config, debug=debug)
    ctx.obj = state
    if ctx.invoked_subcommand is not None:
        return
    settings = _initialise(state, console=False)
    from lazytables.ui_tui import launch_tui

    logger.info("starting LazyTables %s", APP_VERSION)
    asyncio.run(launch_tui(settings))


@app.command()
def connections(ctx: typer.Context) -> None:
    """List saved connections."""

    state: CLIState = ctx.obj
    settings = _initialise(state, console=True)
    store = ConnectionStore(settings.app.connections_path)
    try:
        saved = store.load_connections()
    except ConnectionStoreError as exc:
        raise _fail(str(exc)) from exc
    if not saved:
        typer.echo(f"No saved connections in {store.path}")
        return
    table = Table(title="Saved Connections")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Target")
    for item in saved:
        table.add_row(item.id, item.name, item.kind, item.describe())
    Console().print(table)


def main() -> None:
    """Console script entry point used by setuptools."""

    app()


__all__ = ["APP_VERSION", "app", "main"]
