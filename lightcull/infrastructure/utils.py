"""Filesystem and platform helpers shared by the infrastructure services.

Moves here never overwrite: a destination that already exists is reported
as failure before anything is touched. Helpers log and return False/None
instead of raising; callers decide what a failure means.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import sys

from loguru import logger


def user_cache_root() -> Path:
    """Platform cache root (e.g. `~/Library/Caches`, `~/.cache`, `%LOCALAPPDATA%`)."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"
    xdg = os.environ.get("XDG_CACHE_HOME")
    return Path(xdg) if xdg else Path.home() / ".cache"


def user_data_root() -> Path:
    """Platform per-user data root, used for logs and audit files."""
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Local"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_STATE_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "state"


def user_config_root() -> Path:
    """Platform per-user configuration root."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        return Path(base) if base else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def is_hidden(name: str) -> bool:
    """True for dot-files such as `.DS_Store`."""
    return name.startswith(".")


def extension_of(name: str) -> str:
    """Extension of `name` without the dot, original case preserved."""
    suffix = Path(name).suffix
    return suffix[1:] if suffix else ""


def format_file_size(size_bytes: int) -> str:
    """Format a byte count as KB or MB with one decimal (e.g. `"2.4 MB"`)."""
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def ensure_folder(path: Path) -> bool:
    """Create directory `path` (with parents) unless it exists.

    Returns False if a non-directory occupies the name or creation fails.
    """
    if path.exists():
        if path.is_dir():
            return True
        logger.error("'{}' exists as a file, not as a folder", path)
        return False
    try:
        path.mkdir(parents=True, exist_ok=True)
        logger.info("Folder created: {}", path)
        return True
    except OSError as ex:
        logger.error("Error creating folder {}: {}", path, ex)
        return False


def move_file(source: Path, destination: Path) -> bool:
    """Move `source` to `destination` without overwriting.

    Returns False if the destination is occupied, the source is missing, or
    the move itself fails.
    """
    if os.path.lexists(destination):
        logger.error("Destination file already exists: {}", destination)
        return False
    if not os.path.lexists(source):
        logger.error("Source file does not exist: {}", source)
        return False
    try:
        shutil.move(str(source), str(destination))
        return True
    except OSError as ex:
        logger.error("Error moving {} -> {}: {}", source, destination, ex)
        return False
