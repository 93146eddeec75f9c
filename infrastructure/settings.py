"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import calendar
from datetime import tzinfo
import json
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger

from core.models import CalendarConfig

_WEEKDAY_NAMES = {
    "monday": calendar.MONDAY,
    "tuesday": calendar.TUESDAY,
    "wednesday": calendar.WEDNESDAY,
    "thursday": calendar.THURSDAY,
    "friday": calendar.FRIDAY,
    "saturday": calendar.SATURDAY,
    "sunday": calendar.SUNDAY,
}


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path | None = None, data: dict | None = None) -> None:
        """Load settings from `settings_path`, or wrap `data` directly.

        Raises:
            FileNotFoundError: If `settings_path` is given but missing.
        """
        self._path = Path(settings_path) if settings_path is not None else None
        if self._path is None:
            self._data: dict[str, Any] = dict(data or {})
            return
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def get_int(self, key: str, default: int) -> int:
        """Return `key` as int, falling back to `default` on bad values."""
        raw = self.get(key, default)
        try:
            return int(raw if raw is not None else default)
        except (ValueError, TypeError):
            logger.warning("Setting {} is not an integer: {!r}", key, raw)
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        raw = self.get(key, default)
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            return raw.strip().lower() in {"1", "true", "yes", "on"}
        if isinstance(raw, (int, float)):
            return bool(raw)
        return default


def parse_timezone(value: Any) -> tzinfo | None:
    """Resolve an IANA name; "local" (or empty) gives None, the system zone."""
    if not value or str(value).strip().lower() == "local":
        return None
    try:
        return ZoneInfo(str(value).strip())
    except (ZoneInfoNotFoundError, ValueError) as ex:
        logger.warning("Unknown timezone {!r} ({}), using local time", value, ex)
        return None


def parse_first_weekday(value: Any, default: int = calendar.SUNDAY) -> int:
    """Accept a weekday name ("sunday") or a Python weekday number (0-6)."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        if 0 <= value <= 6:
            return value
        logger.warning("first_weekday out of range: {}", value)
        return default
    name = str(value).strip().lower()
    if name in _WEEKDAY_NAMES:
        return _WEEKDAY_NAMES[name]
    if name.isdigit() and 0 <= int(name) <= 6:
        return int(name)
    logger.warning("Unknown first_weekday {!r}, using default", value)
    return default


def calendar_config_from_settings(settings: JsonSettings | None) -> CalendarConfig:
    """Build the calendar rules from `calendar.timezone` / `calendar.first_weekday`."""
    if settings is None:
        return CalendarConfig()
    return CalendarConfig(
        tz=parse_timezone(settings.get("calendar.timezone", "local")),
        first_weekday=parse_first_weekday(settings.get("calendar.first_weekday", "sunday")),
    )
