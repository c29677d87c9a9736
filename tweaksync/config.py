from __future__ import annotations

import json
import os
import warnings
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .http_client import build_base_url

DEFAULT_CONFIG_PATH = Path("~/.config/tweaksync/config.json").expanduser()

CONFIG_ENV_OVERRIDES = {
    "host": "TWEAKSYNC_HOST",
    "port": "TWEAKSYNC_PORT",
    "poll_interval_ms": "TWEAKSYNC_POLL_INTERVAL_MS",
    "request_timeout_s": "TWEAKSYNC_REQUEST_TIMEOUT_S",
    "scope_separator": "TWEAKSYNC_SCOPE_SEPARATOR",
}

_INT_KEYS = {"port", "poll_interval_ms"}
_FLOAT_KEYS = {"request_timeout_s"}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("TWEAKSYNC_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    return config_path


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class TweakConfig:
    host: str = "127.0.0.1"
    port: int = 9938
    # The host has shipped with both 1000 and 3000 ms poll intervals.
    poll_interval_ms: int = 1000
    request_timeout_s: float = 3.0
    scope_separator: str = "::"
    label_suffix: str = "_label"
    output_suffix: str = "_output"
    status_element: str = "status"

    @property
    def base_url(self) -> str:
        return build_base_url(f"{self.host}:{self.port}")

    @property
    def poll_interval_s(self) -> float:
        return self.poll_interval_ms / 1000.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _parse_int(value: object, default: int, *, key: str) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed <= 0:
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def _parse_float(value: object, default: float, *, key: str) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed <= 0:
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def _coerce_str(value: object, default: str, *, key: str) -> str:
    if isinstance(value, str) and value:
        return value
    warnings.warn(f"Invalid string for {key}: {value!r}", RuntimeWarning, stacklevel=2)
    return default


def load_config(path: Path | None = None) -> TweakConfig:
    cfg = TweakConfig()
    config_path = get_config_path(path)
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text() or "{}")
        except json.JSONDecodeError:
            data = {}
        if isinstance(data, dict):
            cfg = _apply_dict(cfg, data)
    cfg = _apply_dict(cfg, get_env_overrides())
    return cfg


def _apply_dict(cfg: TweakConfig, data: dict[str, Any]) -> TweakConfig:
    for key, value in data.items():
        if not hasattr(cfg, key) or key in {"base_url", "poll_interval_s"}:
            continue
        if key in _INT_KEYS:
            setattr(cfg, key, _parse_int(value, getattr(cfg, key), key=key))
            continue
        if key in _FLOAT_KEYS:
            setattr(cfg, key, _parse_float(value, getattr(cfg, key), key=key))
            continue
        setattr(cfg, key, _coerce_str(value, getattr(cfg, key), key=key))
    return cfg
