# -------------------------------------
# settings
# -------------------------------------
"""
Sheet settings, read from an optional YAML file (calcsheet.yml):

    definitions: variables.md   # relative to the settings file
    delay: 0.3                  # debounce, seconds
    strategy: rewrite           # rewrite | overlay
    interval: 0.1               # watch polling, seconds
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from .definitions import DEFAULT_PATH
from .render import STRATEGIES
from .scheduler import DEFAULT_DELAY

__all__ = ["ConfigError", "Settings", "SETTINGS_FILE", "load_settings", "find_settings"]

SETTINGS_FILE = "calcsheet.yml"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    definitions: Path = field(default_factory=lambda: Path(DEFAULT_PATH))
    delay: float = DEFAULT_DELAY
    strategy: str = "rewrite"
    interval: float = 0.1

    def merged(self, **overrides: Any) -> "Settings":
        """Return a copy with the non-None overrides applied, validated."""
        return _validated(replace(self, **{k: v for k, v in overrides.items() if v is not None}))


def _non_negative(name: str, value: Any) -> float:
    try:
        x = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None
    if x < 0:
        raise ConfigError(f"{name} must be >= 0, got {value!r}")
    return x


def _validated(s: Settings) -> Settings:
    if not isinstance(s.strategy, str) or s.strategy not in STRATEGIES:
        raise ConfigError(f"strategy must be one of {sorted(STRATEGIES)}, got {s.strategy!r}")
    interval = _non_negative("interval", s.interval)
    if interval == 0:
        raise ConfigError("interval must be > 0")
    return replace(
        s,
        definitions=Path(s.definitions),
        delay=_non_negative("delay", s.delay),
        interval=interval,
    )


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load settings from a YAML file; defaults when path is None.

    Raises:
        ConfigError: unreadable YAML, unknown keys or bad values
    """
    if path is None:
        return Settings()
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown settings {unknown}")

    data["definitions"] = path.parent / str(data.get("definitions", DEFAULT_PATH))
    return _validated(Settings(**data))


def find_settings(directory: str | Path) -> Path | None:
    """The settings file in `directory`, if there is one."""
    p = Path(directory) / SETTINGS_FILE
    return p if p.is_file() else None
