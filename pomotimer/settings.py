"""User configuration with JSON persistence.

Settings are stored at:
    ~/.pomotimer/settings.json

Usage::

    settings = load_settings()
    settings.work_duration = 50
    save_settings(settings)

Storage failures never propagate: ``load_settings`` falls back to the
defaults and ``save_settings`` reports failure through its return value.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


APP_SUPPORT_DIR = Path.home() / ".pomotimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


class ThemeMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


@dataclass
class Settings:
    """Timer configuration.  Durations are whole minutes."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: int = 25
    break_duration: int = 5
    long_break_duration: int = 15
    total_sets: int = 4
    long_break_interval: int = 4   # every Nth work session → long break

    # ── collaborators ─────────────────────────────────────────────────
    sound_enabled: bool = True
    notification_enabled: bool = True
    theme_mode: ThemeMode = ThemeMode.SYSTEM


DEFAULT_SETTINGS = Settings()

_FIELD_NAMES = frozenset(f.name for f in fields(Settings))

_DURATION_FIELDS = frozenset(
    {"work_duration", "break_duration", "long_break_duration"}
)
_COUNT_FIELDS = frozenset({"total_sets", "long_break_interval"})
_FLAG_FIELDS = frozenset({"sound_enabled", "notification_enabled"})


def merge_settings(
    base: Settings, partial: Settings | Mapping[str, Any] | None
) -> Settings:
    """Return a new ``Settings`` with *partial* laid over *base*.

    Unknown keys are dropped, and so are values of the wrong type (the
    *base* value is kept).  Values are not range-checked.
    """
    if partial is None:
        return replace(base)
    if isinstance(partial, Settings):
        data = asdict(partial)
    else:
        data = {k: v for k, v in partial.items() if k in _FIELD_NAMES}
    for name in list(data):
        if name != "theme_mode" and not _valid_value(name, data[name]):
            logger.warning(
                "Ignoring %s=%r, keeping %r", name, data[name], getattr(base, name)
            )
            del data[name]
    if "theme_mode" in data:
        data["theme_mode"] = _coerce_theme(data["theme_mode"])
    return replace(base, **data)


def _valid_value(name: str, value: Any) -> bool:
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool):
        return name in _FLAG_FIELDS
    if name in _COUNT_FIELDS:
        return isinstance(value, int)
    if name in _DURATION_FIELDS:
        return isinstance(value, (int, float)) and math.isfinite(value)
    return False


def _coerce_theme(value: Any) -> ThemeMode:
    try:
        return ThemeMode(value)
    except ValueError:
        logger.warning("Unknown theme mode %r, using system", value)
        return ThemeMode.SYSTEM


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    data = asdict(settings)
    data["theme_mode"] = settings.theme_mode.value
    return data


def load_settings() -> Settings:
    """Load settings from disk, filling gaps from the defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("settings file does not hold an object")
            return merge_settings(DEFAULT_SETTINGS, data)
    except (OSError, ValueError) as exc:
        logger.warning("Could not load settings from %s: %s", SETTINGS_PATH, exc)
    return replace(DEFAULT_SETTINGS)


def save_settings(settings: Settings) -> bool:
    """Write settings to disk as JSON.  Returns False on failure."""
    try:
        SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
        SETTINGS_PATH.write_text(
            json.dumps(settings_to_dict(settings), indent=2) + "\n",
            encoding="utf-8",
        )
    except OSError as exc:
        logger.error("Could not save settings to %s: %s", SETTINGS_PATH, exc)
        return False
    return True


def reset_settings() -> None:
    """Remove the stored settings file so the defaults apply again."""
    try:
        SETTINGS_PATH.unlink(missing_ok=True)
    except OSError as exc:
        logger.error("Could not reset settings at %s: %s", SETTINGS_PATH, exc)


def storage_available() -> bool:
    """True if the settings directory can be written to."""
    probe = SETTINGS_PATH.parent / ".__storage_test__"
    try:
        SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
        probe.write_text("probe", encoding="utf-8")
        probe.unlink()
    except OSError:
        return False
    return True
