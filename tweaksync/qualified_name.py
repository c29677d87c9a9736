from __future__ import annotations

from typing import Final, NamedTuple

DEFAULT_SEPARATOR: Final[str] = "::"


class QualifiedName(NamedTuple):
    group: str
    variable: str


def parse(name: str, separator: str = DEFAULT_SEPARATOR) -> QualifiedName:
    """Split a qualified name into its owning group and leaf variable.

    The group is everything before the last separator, so `a::b::c` belongs to
    group `a::b`. A name without a separator has an empty group.
    """

    if not separator:
        raise ValueError("separator must not be empty")
    segments = name.split(separator)
    return QualifiedName(separator.join(segments[:-1]), segments[-1])

