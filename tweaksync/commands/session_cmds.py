from __future__ import annotations

import asyncio
import shlex
import sys

import typer
from rich import print
from rich.markup import escape

from tweaksync import qualified_name
from tweaksync.config import TweakConfig
from tweaksync.declaration import normalize_value_kind
from tweaksync.page import MemoryPage
from tweaksync.session import TweakSession

CONSOLE_HELP = "Edit: KEY VALUE [KIND]   Commands: :show, :copy GROUP, :quit"


def parse_edit_line(line: str, default_kind: str) -> tuple[str, str, str]:
    parts = shlex.split(line)
    if len(parts) not in {2, 3}:
        raise ValueError("expected: KEY VALUE [KIND]")
    key, value = parts[0], parts[1]
    kind = parts[2] if len(parts) == 3 else default_kind
    return key, value, normalize_value_kind(kind)


def _print_block(group: str, block: str | None) -> None:
    title = group or "(root)"
    print(f"[bold]{escape(title)}[/bold]")
    if block:
        print(escape(block.rstrip("\n")))
    else:
        print("[dim](no changes)[/dim]")


async def _apply_once(
    config: TweakConfig, page: MemoryPage, key: str, value: str, kind: str
) -> None:
    session = TweakSession(config, page)
    try:
        session.apply(key, value, kind)
        await session.drain()
    finally:
        await session.close()


def set_cmd(*, config: TweakConfig, key: str, value: str, kind: str) -> None:
    """Send one edit to the host and print the group's declaration block."""

    page = MemoryPage(auto_create=True)
    try:
        asyncio.run(_apply_once(config, page, key, value, kind))
    except ValueError as exc:
        print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    group = qualified_name.parse(key, config.scope_separator).group
    _print_block(group, page.text_of(f"{group}{config.output_suffix}"))
    status = page.text_of(config.status_element)
    if status:
        print(f"[yellow]{escape(status)}[/yellow]")
        raise typer.Exit(code=1)


async def _watch(config: TweakConfig) -> None:
    page = MemoryPage(auto_create=True)

    def _reloaded(generation: int) -> None:
        print(f"[yellow]Host invalidated the tunable set (reload #{generation})[/yellow]")

    async with TweakSession(config, page, on_reload=_reloaded):
        await asyncio.Event().wait()


def watch_cmd(*, config: TweakConfig) -> None:
    """Poll the host for invalidation until interrupted."""

    print(f"Watching {config.base_url} every {config.poll_interval_ms}ms (Ctrl-C to stop)")
    try:
        asyncio.run(_watch(config))
    except KeyboardInterrupt:
        print("[dim]stopped[/dim]")


async def _console(config: TweakConfig, default_kind: str) -> None:
    page = MemoryPage(auto_create=True)
    status_element = page.get_element(config.status_element)
    last_status = ""

    def _reloaded(generation: int) -> None:
        print(f"[yellow]Host invalidated the tunable set; session reset (#{generation})[/yellow]")

    async with TweakSession(config, page, on_reload=_reloaded) as session:
        print(f"[dim]{escape(CONSOLE_HELP)}[/dim]")
        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            if line == ":quit":
                break
            if line == ":show":
                groups = session.change_log.groups()
                if not groups:
                    print("[dim](no changes)[/dim]")
                for group in groups:
                    _print_block(group, session.change_log.render_group(group))
                continue
            if line.startswith(":copy"):
                group = line[len(":copy") :].strip()
                output = page.get_element(f"{group}{config.output_suffix}")
                selected = output.select_all() if output is not None else ""
                _print_block(group, selected)
                continue
            try:
                key, value, kind = parse_edit_line(line, default_kind)
                session.apply(key, value, kind)
            except ValueError as exc:
                print(f"[red]{escape(str(exc))}[/red]")
                continue
            group = qualified_name.parse(key, config.scope_separator).group
            _print_block(group, page.text_of(f"{group}{config.output_suffix}"))
            # Give the request a chance to fail before reporting status.
            await asyncio.sleep(0)
            if status_element is not None and status_element.text != last_status:
                last_status = status_element.text
                if last_status:
                    print(f"[yellow]{escape(last_status)}[/yellow]")
        await session.drain()


def console_cmd(*, config: TweakConfig, kind: str) -> None:
    """Interactive edit loop with invalidation polling alongside."""

    try:
        default_kind = normalize_value_kind(kind)
    except ValueError as exc:
        print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    try:
        asyncio.run(_console(config, default_kind))
    except KeyboardInterrupt:
        print("[dim]stopped[/dim]")
