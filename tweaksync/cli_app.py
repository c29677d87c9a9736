from __future__ import annotations

import json

import typer
from rich import print

from . import __version__
from .commands.common import configure_logging, load_config_or_exit, update_config_or_exit
from .commands.session_cmds import console_cmd, set_cmd, watch_cmd
from .config import get_config_path

app = typer.Typer(help="tweaksync: live tunable client for a tweak host")


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Qualified name, e.g. physics::gravity"),
    value: str = typer.Argument(..., help="New value, sent as typed"),
    kind: str = typer.Option("f64", help="Value kind (string, bool, f64, i32, ...)"),
    host: str = typer.Option(None, help="Host address (defaults to config)"),
    port: int = typer.Option(None, help="Host port (defaults to config)"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Send one edit and print the group's declarations."""
    configure_logging(log_level)
    config = load_config_or_exit(host=host, port=port)
    set_cmd(config=config, key=key, value=value, kind=kind)


@app.command()
def watch(
    host: str = typer.Option(None, help="Host address (defaults to config)"),
    port: int = typer.Option(None, help="Host port (defaults to config)"),
    interval_ms: int = typer.Option(None, help="Poll interval in milliseconds"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Poll the host and report when the tunable set is invalidated."""
    configure_logging(log_level)
    config = load_config_or_exit(host=host, port=port, interval_ms=interval_ms)
    watch_cmd(config=config)


@app.command()
def console(
    kind: str = typer.Option("f64", help="Default kind for edits without one"),
    host: str = typer.Option(None, help="Host address (defaults to config)"),
    port: int = typer.Option(None, help="Host port (defaults to config)"),
    interval_ms: int = typer.Option(None, help="Poll interval in milliseconds"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Read edits from stdin while polling for invalidation."""
    configure_logging(log_level)
    config = load_config_or_exit(host=host, port=port, interval_ms=interval_ms)
    console_cmd(config=config, kind=kind)


@app.command("config")
def show_config(
    settings: list[str] = typer.Option(None, "--set", help="Persist KEY=VALUE (repeatable)"),
) -> None:
    """Print the effective configuration as JSON, or persist settings with --set."""
    if settings:
        path = update_config_or_exit(settings)
        print(f"[green]Updated {path}[/green]")
        return
    config = load_config_or_exit()
    payload = {"path": str(get_config_path()), **config.to_dict(), "base_url": config.base_url}
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def version() -> None:
    """Print version."""
    print(__version__)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
