"""Utilities for capture date extraction (EXIF and filesystem).

This module centralizes capture date lookup so the rest of the app can depend
on a single behavior. It uses best-effort parsing and will not raise on
errors; callers should expect `None` when data is not available.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
import os
from typing import Any

from loguru import logger

try:
    from PIL import Image  # type: ignore
except ImportError:
    Image = None  # type: ignore

# Optional rawpy for RAW metadata (DNG)
try:  # pragma: no cover - optional dependency
    import rawpy  # type: ignore

    RAWPY_AVAILABLE = True
except ImportError:  # pragma: no cover - optional dependency
    RAWPY_AVAILABLE = False

EXIF_DT_FMT = "%Y:%m:%d %H:%M:%S"
TAG_DATETIME = 306
TAG_DATETIME_ORIGINAL = 36867
TAG_OFFSET_TIME_ORIGINAL = 36881
EXIF_IFD_POINTER = 0x8769


def parse_exif_datetime(value: Any, offset: Any = None) -> datetime | None:
    """Parse an EXIF timestamp ("YYYY:MM:DD HH:MM:SS").

    When `offset` holds an EXIF OffsetTime value ("+02:00") the result is
    timezone-aware, otherwise naive. Returns None for blank or invalid input.
    """
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    text = str(value).strip().rstrip("\x00")
    if not text or text.startswith("0000"):
        return None
    try:
        if len(text) >= 19 and text[4] == ":" and text[7] == ":":
            dt = datetime.strptime(text[:19], EXIF_DT_FMT)
        else:
            dt = datetime.fromisoformat(text.replace("/", "-"))
    except (ValueError, TypeError):
        logger.debug("Unparseable EXIF datetime: {!r}", text)
        return None
    if offset and dt.tzinfo is None:
        off_text = str(offset).strip().rstrip("\x00")
        try:
            aware = datetime.fromisoformat(f"{dt.isoformat()}{off_text}")
            return aware
        except ValueError:
            logger.debug("Unparseable EXIF offset: {!r}", off_text)
    return dt


def localize(dt: datetime, tz: tzinfo | None) -> datetime:
    """Attach `tz` to naive `dt`; aware values are returned unchanged.

    With `tz` None the naive value is read as system local time.
    """
    if dt.tzinfo is None or dt.utcoffset() is None:
        if tz is None:
            return dt.astimezone()
        return dt.replace(tzinfo=tz)
    return dt


def get_file_modified_datetime(path: str) -> datetime | None:
    """Best-effort file modification time as an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(os.path.getmtime(path), tz=timezone.utc)
    except (OSError, ValueError, OverflowError) as ex:
        logger.debug("getmtime failed for {}: {}", path, ex)
        return None


def get_exif_datetime_original(path: str) -> datetime | None:
    """Extract EXIF DateTimeOriginal (falling back to DateTime) via Pillow.

    Returns None if Pillow is unavailable or EXIF lacks both fields.
    """
    if Image is None:
        return _get_raw_datetime(path)

    try:
        with Image.open(path) as im:
            exif = im.getexif()
            if not exif:
                return _get_raw_datetime(path)
            try:
                sub = exif.get_ifd(EXIF_IFD_POINTER) or {}
            except (KeyError, ValueError, TypeError):
                sub = {}
            dt = parse_exif_datetime(
                sub.get(TAG_DATETIME_ORIGINAL), sub.get(TAG_OFFSET_TIME_ORIGINAL)
            )
            if dt is None:
                dt = parse_exif_datetime(exif.get(TAG_DATETIME_ORIGINAL) or exif.get(TAG_DATETIME))
            return dt if dt is not None else _get_raw_datetime(path)
    except (OSError, ValueError, TypeError) as ex:
        logger.debug("EXIF read failed for {}: {}", path, ex)
        return _get_raw_datetime(path)


def _get_raw_datetime(path: str) -> datetime | None:
    """rawpy metadata timestamp for DNG files, when rawpy is installed."""
    if not RAWPY_AVAILABLE or not path.lower().endswith(".dng"):
        return None
    try:
        with rawpy.imread(path) as raw:  # type: ignore[attr-defined]
            md = getattr(raw, "metadata", None)
            ts = None
            if md is not None:
                ts = getattr(md, "timestamp", None) or getattr(md, "shooting_datetime", None)
            if isinstance(ts, datetime):
                return ts
            if ts:
                return datetime.fromtimestamp(float(ts), tz=timezone.utc)
    except Exception as ex:  # pragma: no cover  # pylint: disable=broad-exception-caught
        logger.debug("rawpy metadata read failed for {}: {}", path, ex)
    return None


def resolve_capture_datetime(
    path: str, tz: tzinfo | None, fallback_to_file_date: bool = True
) -> datetime | None:
    """Capture instant for `path`: EXIF (localized to `tz`), else file mtime."""
    dt = get_exif_datetime_original(path)
    if dt is not None:
        return localize(dt, tz)
    if fallback_to_file_date:
        return get_file_modified_datetime(path)
    return None
