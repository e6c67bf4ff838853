"""Runtime configuration.

Resolution order, last wins: built-in defaults, then ``config.json`` in the
data directory, then ``CAB_*`` environment variables.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, fields, replace
from typing import Dict, List, Tuple

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

_ENV_INT_FIELDS = (
    ("CAB_STALE_SECONDS", "stale_seconds"),
    ("CAB_POLL_INTERVAL_MS", "poll_interval_ms"),
    ("CAB_MAX_BLOCKING_SECONDS", "max_blocking_seconds"),
    ("CAB_MAX_INBOX_SIZE", "max_inbox_size"),
    ("CAB_MAX_MESSAGE_BYTES", "max_message_bytes"),
    ("CAB_RETENTION_DAYS", "retention_days"),
    ("CAB_HEARTBEAT_TICK_MS", "heartbeat_tick_ms"),
    ("CAB_AUTO_GC_HOURS", "auto_gc_hours"),
)


class ConfigError(Exception):
    """The configuration could not be resolved."""


@dataclass
class Config:
    """All tunable runtime parameters."""

    data_dir: str
    stale_seconds: int = 300
    poll_interval_ms: int = 1000
    max_blocking_seconds: int = 540
    max_inbox_size: int = 100
    max_message_bytes: int = 65536
    retention_days: int = 7
    heartbeat_tick_ms: int = 30000
    auto_gc_hours: int = 24


def default_config() -> Config:
    """Return the built-in defaults, with data_dir under the user's home."""
    home = os.path.expanduser("~")
    if home == "~":
        home = ""
    return Config(data_dir=os.path.join(home, ".claude", "cli-agents-bridge"))


def load() -> Tuple[Config, List[str]]:
    """Resolve the configuration and return it with any non-fatal warnings.

    Raises ConfigError when the user file exists but cannot be read or parsed.
    """
    cfg = default_config()
    warnings: List[str] = []

    env_dir = os.environ.get("CAB_DATA_DIR", "")
    if env_dir:
        cfg.data_dir = env_dir

    user_file = os.path.join(cfg.data_dir, "config.json")
    try:
        cfg = _apply_user_file(cfg, user_file)
    except FileNotFoundError:
        pass
    except (OSError, ValueError) as exc:
        raise ConfigError(f"user config {json.dumps(user_file)}: {exc}") from exc

    warnings.extend(_apply_env(cfg))

    if not os.path.isabs(cfg.data_dir):
        absolute = os.path.abspath(cfg.data_dir)
        warnings.append(
            f"data_dir {json.dumps(cfg.data_dir)} was relative, "
            f"resolved to absolute {json.dumps(absolute)}"
        )
        cfg.data_dir = absolute

    return cfg, warnings


def _parse_user_json(text: str) -> Dict[str, object]:
    try:
        data, _ = json.JSONDecoder().raw_decode(text.lstrip())
    except json.JSONDecodeError as exc:
        raise ValueError(f"parse json: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("parse json: top-level value must be an object")

    known = {f.name: f for f in fields(Config)}
    parsed: Dict[str, object] = {}
    for key, value in data.items():
        name = key.lower()
        if name == "_comment":
            if value is not None and not isinstance(value, str):
                raise ValueError(f"parse json: field {key!r} must be a string")
            continue
        if name not in known:
            raise ValueError(f"parse json: unknown field {json.dumps(key)}")
        if value is None:
            continue
        if name == "data_dir":
            if not isinstance(value, str):
                raise ValueError(f"parse json: field {key!r} must be a string")
        elif isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"parse json: field {key!r} must be an integer")
        parsed[name] = value
    return parsed


def _apply_user_file(cfg: Config, path: str) -> Config:
    with open(path, encoding="utf-8") as handle:
        text = handle.read()
    overrides = {name: value for name, value in _parse_user_json(text).items() if value}
    return replace(cfg, **overrides)


def _apply_env(cfg: Config) -> List[str]:
    warnings: List[str] = []
    env_dir = os.environ.get("CAB_DATA_DIR", "")
    if env_dir:
        cfg.data_dir = env_dir
    for env_name, attr in _ENV_INT_FIELDS:
        raw = os.environ.get(env_name, "")
        if not raw:
            continue
        if not _INT_PATTERN.fullmatch(raw):
            warnings.append(
                f"env {env_name}={json.dumps(raw)} is not a valid int, "
                f"using default {getattr(cfg, attr)}"
            )
            continue
        setattr(cfg, attr, int(raw))
    return warnings