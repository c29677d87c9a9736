from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .qualified_name import DEFAULT_SEPARATOR, parse


@dataclass
class ChangeLogEntry:
    key: str
    rendered_line: str


class ChangeLog:
    """Latest rendered declaration per edited tunable, in first-edit order.

    Re-recording a key replaces its line without moving it. Group blocks are
    rebuilt from scratch on every call; the log is bounded by the number of
    tunables the host exposes, not by the number of edits.
    """

    def __init__(self, separator: str = DEFAULT_SEPARATOR) -> None:
        self.separator = separator
        self._entries: dict[str, ChangeLogEntry] = {}

    def record(self, key: str, line: str) -> None:
        entry = self._entries.get(key)
        if entry is None:
            self._entries[key] = ChangeLogEntry(key=key, rendered_line=line)
            return
        entry.rendered_line = line

    def get(self, key: str) -> ChangeLogEntry | None:
        return self._entries.get(key)

    def render_group(self, group: str) -> str:
        lines: list[str] = []
        for entry in self._entries.values():
            if parse(entry.key, self.separator).group != group:
                continue
            lines.append(f"{entry.rendered_line}\n")
        return "".join(lines)

    def groups(self) -> list[str]:
        seen: dict[str, None] = {}
        for entry in self._entries.values():
            seen.setdefault(parse(entry.key, self.separator).group, None)
        return list(seen)

    def __iter__(self) -> Iterator[ChangeLogEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
