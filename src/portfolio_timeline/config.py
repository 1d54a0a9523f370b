from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, fields, replace
from typing import Any

import yaml

# Defaults for the timeline tuning knobs.
DEFAULT_EPOCH = _dt.date(2024, 1, 1)  # date at scroll offset 0
ZOOM_MIN = 1  # days per column
ZOOM_MAX = 30
FAST_SCROLL_MULTIPLIER = 7  # columns per fast scroll step
MIN_TICK_SPACING = 1  # columns between ticks of the chosen granularity
DEFAULT_WIDTH = 80  # assumed grid width before the first resize


class ConfigError(Exception):
    """Raised when a configuration file is malformed or holds invalid values."""


@dataclass(frozen=True)
class TimelineConfig:
    epoch: _dt.date = DEFAULT_EPOCH
    zoom_min: int = ZOOM_MIN
    zoom_max: int = ZOOM_MAX
    fast_scroll_multiplier: int = FAST_SCROLL_MULTIPLIER
    min_tick_spacing: int = MIN_TICK_SPACING
    default_width: int = DEFAULT_WIDTH

    def clamp_zoom(self, zoom: int) -> int:
        return max(self.zoom_min, min(self.zoom_max, zoom))


DEFAULT_CONFIG = TimelineConfig()

_INT_KEYS = {"zoom_min", "zoom_max", "fast_scroll_multiplier", "min_tick_spacing", "default_width"}


def load_config(path: str | None) -> TimelineConfig:
    """Load a TimelineConfig from YAML; a missing path yields the defaults."""

    if path is None:
        return DEFAULT_CONFIG

    with open(path, "r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: invalid YAML: {exc}") from exc
        except ValueError as exc:
            raise ConfigError(f"{path}: unreadable config: {exc}") from exc

    return config_from_mapping(raw, source=path)


def config_from_mapping(raw: Any, source: str = "config") -> TimelineConfig:
    if raw is None:
        return DEFAULT_CONFIG
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: expected mapping at top level")

    section = raw.get("timeline", {})
    if section is None:
        return DEFAULT_CONFIG
    if not isinstance(section, dict):
        raise ConfigError(f"{source}.timeline: expected mapping")

    allowed = {f.name for f in fields(TimelineConfig)}
    extras = sorted(set(section) - allowed)
    if extras:
        raise ConfigError(f"{source}.timeline: unexpected fields {extras}")

    overrides: dict[str, Any] = {}
    for key, value in section.items():
        if key == "epoch":
            overrides[key] = _parse_epoch(value, f"{source}.timeline.epoch")
        elif key in _INT_KEYS:
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{source}.timeline.{key}: expected positive integer")
            overrides[key] = value

    config = replace(DEFAULT_CONFIG, **overrides)
    if config.zoom_min > config.zoom_max:
        raise ConfigError(f"{source}.timeline: zoom_min must not exceed zoom_max")
    return config


def _parse_epoch(value: Any, where: str) -> _dt.date:
    # PyYAML already turns unquoted ISO dates into date objects.
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    if isinstance(value, str):
        try:
            return _dt.date.fromisoformat(value)
        except ValueError as exc:
            raise ConfigError(f"{where}: expected YYYY-MM-DD") from exc
    raise ConfigError(f"{where}: expected YYYY-MM-DD")
