from __future__ import annotations

from typing import Final

STRING_KIND: Final[str] = "string"

KNOWN_VALUE_KINDS: Final[tuple[str, ...]] = (
    STRING_KIND,
    "bool",
    "f32",
    "f64",
    "i8",
    "u8",
    "i16",
    "u16",
    "i32",
    "u32",
    "i64",
    "u64",
    "i128",
    "u128",
    "usize",
)

_KIND_ALIASES: Final[dict[str, str]] = {
    "str": STRING_KIND,
    "&str": STRING_KIND,
}


def normalize_value_kind(kind: str) -> str:
    normalized = (kind or "").strip().lower()
    if not normalized:
        raise ValueError(
            f"Invalid value kind {kind!r}. Known kinds: {', '.join(KNOWN_VALUE_KINDS)}"
        )
    normalized = _KIND_ALIASES.get(normalized, normalized)
    if not normalized.isidentifier():
        raise ValueError(f"Invalid value kind {kind!r}: must be a type name")
    return normalized


def render(variable: str, value: str, kind: str) -> str:
    """Render the declaration line for one tunable.

    String values are quoted and declared `&str`; every other kind is emitted
    verbatim and typed by the kind name. The value is trusted as-is.
    """

    kind_name = normalize_value_kind(kind)
    if kind_name == STRING_KIND:
        return f'const {variable}: &str = "{value}";'
    return f"const {variable}: {kind_name} = {value};"
