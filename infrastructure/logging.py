"""Logging initialization utilities using loguru."""

from __future__ import annotations

import os
from pathlib import Path
import subprocess
import sys

from loguru import logger


def get_log_directory() -> str:
    """Get the main log directory path."""
    if os.name == "nt":
        return str(Path.home() / "AppData" / "Local" / "PictoCal" / "logs")
    return str(Path.home() / ".local" / "state" / "pictocal" / "logs")


def init_logging(log_dir: str | None = None, level: str = "INFO", console: bool = False) -> Path:
    """Initialize rotating file logging under the given directory.

    Returns the directory the log files are written to.
    """
    if log_dir is None:
        log_dir = get_log_directory()
    log_path = Path(os.path.expandvars(os.path.expanduser(log_dir)))
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "pictocal_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    if console:
        logger.add(sys.stderr, level=level)
    return log_path


def find_latest_log_file(log_dir: str | None = None) -> Path | None:
    """Find the latest log file in the specified directory."""
    if log_dir is None:
        log_dir = get_log_directory()

    try:
        log_path = Path(log_dir)
        if not log_path.exists():
            return None
        log_files = list(log_path.glob("pictocal_*.log"))
        if not log_files:
            return None
        return max(log_files, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None


def open_in_default_app(path: str) -> bool:
    """Open a file or directory with the platform's default handler."""
    try:
        if os.name == "nt":
            os.startfile(path)  # type: ignore[attr-defined]  # pylint: disable=no-member
        elif sys.platform == "darwin":
            subprocess.run(["open", path], check=True)
        else:
            subprocess.run(["xdg-open", path], check=True)
        return True
    except (OSError, subprocess.CalledProcessError) as ex:
        logger.warning("Could not open {}: {}", path, ex)
        return False


def open_log_directory(log_dir: str | None = None) -> bool:
    """Open the log directory in the file explorer."""
    return open_in_default_app(log_dir or get_log_directory())


def open_latest_log(log_dir: str | None = None) -> bool:
    """Open the latest log file in the default application."""
    log_file = find_latest_log_file(log_dir)
    if log_file:
        return open_in_default_app(str(log_file))
    return False
