from __future__ import annotations

import logging
import warnings
from pathlib import Path
from typing import Any

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from tweaksync.config import TweakConfig, load_config, read_config_file, write_config_file


def configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        print(f"[red]Unknown log level: {level}[/red]")
        raise typer.Exit(code=1)
    logging.basicConfig(
        level=numeric,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def load_config_or_exit(
    *,
    host: str | None = None,
    port: int | None = None,
    interval_ms: int | None = None,
) -> TweakConfig:
    read_config_or_exit()
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", RuntimeWarning)
        config = load_config()
    for warning in caught:
        print(f"[yellow]{warning.message}[/yellow]")
    if host:
        config.host = host
    if port is not None:
        config.port = port
    if interval_ms is not None:
        if interval_ms <= 0:
            print("[red]--interval-ms must be positive[/red]")
            raise typer.Exit(code=1)
        config.poll_interval_ms = interval_ms
    return config


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except ValueError as exc:
        print(f"[red]Invalid config file: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def write_config_or_exit(data: dict[str, Any]) -> Path:
    try:
        return write_config_file(data)
    except OSError as exc:
        print(f"[red]Failed to write config: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def update_config_or_exit(settings: list[str]) -> Path:
    """Persist KEY=VALUE pairs into the config file; values are parsed on load."""

    data = read_config_or_exit()
    known = list(TweakConfig().to_dict())
    for setting in settings:
        key, sep, value = setting.partition("=")
        key = key.strip()
        if not sep or key not in known:
            print(
                f"[red]Invalid setting '{escape(setting)}'; expected KEY=VALUE with KEY one of: "
                f"{', '.join(known)}[/red]"
            )
            raise typer.Exit(code=1)
        data[key] = value.strip()
    return write_config_or_exit(data)
