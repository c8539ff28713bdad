"""Logging initialization utilities using loguru."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger

from lightcull.infrastructure.utils import user_data_root

APP_DIR_NAME = "LightCull"


def get_log_directory() -> str:
    """Get the main log directory path."""
    return str(user_data_root() / APP_DIR_NAME / "logs")


def get_delete_log_directory() -> str:
    """Get the directory holding trash purge audit logs."""
    return str(user_data_root() / APP_DIR_NAME / "delete_logs")


def init_logging(log_dir: str | None = None, level: str = "INFO", console: bool = False) -> None:
    """Initialize rotating file logging under the given directory.

    Args:
        log_dir: Directory for `app_*.log` files; defaults to `get_log_directory()`.
        level: Minimum level for all sinks.
        console: Also log to stderr (used by the command line).
    """
    if log_dir is None:
        log_dir = get_log_directory()
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "app_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level,
    )
    if console:
        logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")


def find_latest_log_file(log_dir: str | None = None) -> Path | None:
    """Find the latest log file in the specified directory."""
    if log_dir is None:
        log_dir = get_log_directory()

    try:
        log_path = Path(log_dir)
        if not log_path.exists():
            return None

        log_files = list(log_path.glob("app_*.log"))
        if not log_files:
            return None

        return max(log_files, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None


def find_latest_delete_log_file(log_dir: str | None = None) -> Path | None:
    """Find the latest trash purge audit log."""
    delete_path = Path(log_dir or get_delete_log_directory())
    try:
        if not delete_path.exists():
            return None
        files = list(delete_path.glob("purge_*.csv"))
        if not files:
            return None
        return max(files, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None
