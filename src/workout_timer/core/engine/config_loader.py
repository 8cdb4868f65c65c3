"""
YAML → TimerSettings loader.

Starts from the defaults in config.py and optionally merges user overrides
from ~/.workout-timer/settings.yaml, e.g.:

    pre_countdown_seconds: 10
    default_rep_count: 12
    sound: false

Usage:
    from workout_timer.core.engine.config_loader import load_settings
    settings = load_settings()

If the user file is missing, the defaults are returned.  If it exists but
cannot be parsed, a warning is logged and the file is ignored.  Individual
bad values fall back to their default.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from ..config import SETTINGS_FILE_NAME, USER_DIR_NAME, TimerSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; return {} (with a warning) on any error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring settings file %s: %s", path, e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a mapping", path)
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _positive_int(raw: Any, default: int, name: str) -> int:
    if isinstance(raw, bool):
        logger.warning("settings: %s must be an integer, using %s", name, default)
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("settings: %s=%r is not an integer, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("settings: %s must be positive, using %s", name, default)
        return default
    return value


def _positive_float(raw: Any, default: float, name: str) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("settings: %s=%r is not a number, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("settings: %s must be positive, using %s", name, default)
        return default
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_dir() -> Path:
    """Return ~/.workout-timer (not created)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / USER_DIR_NAME


def get_user_settings_path() -> Path | None:
    """Return ~/.workout-timer/settings.yaml if it exists, else None."""
    p = get_user_dir() / SETTINGS_FILE_NAME
    return p if p.exists() else None


def settings_from_dict(data: dict[str, Any]) -> TimerSettings:
    """
    Build TimerSettings from a raw mapping.

    Unknown keys are ignored; invalid values keep their defaults.
    """
    defaults = TimerSettings()
    merged = _deep_merge(asdict(defaults), data)
    return TimerSettings(
        pre_countdown_seconds=_positive_int(
            merged["pre_countdown_seconds"], defaults.pre_countdown_seconds, "pre_countdown_seconds"
        ),
        default_rep_count=_positive_int(
            merged["default_rep_count"], defaults.default_rep_count, "default_rep_count"
        ),
        cue_window_seconds=_positive_int(
            merged["cue_window_seconds"], defaults.cue_window_seconds, "cue_window_seconds"
        ),
        tick_interval_seconds=_positive_float(
            merged["tick_interval_seconds"], defaults.tick_interval_seconds, "tick_interval_seconds"
        ),
        sound=bool(merged["sound"]),
    )


def load_settings(path: Path | None = None) -> TimerSettings:
    """
    Load timer settings.

    Load order (later overrides earlier):
    1. Defaults from config.py
    2. User override at ~/.workout-timer/settings.yaml (or *path*)

    Returns:
        Resolved TimerSettings
    """
    if path is None:
        path = get_user_settings_path()
    if path is None or not Path(path).exists():
        return TimerSettings()
    return settings_from_dict(_load_yaml_file(Path(path)))
