"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from lightcull.core.constants import THUMBNAIL_QUALITY, THUMBNAIL_SIZE
from lightcull.core.errors import SettingsError
from lightcull.infrastructure.utils import user_config_root

DEFAULTS: dict[str, Any] = {
    "thumbnails": {
        "size": THUMBNAIL_SIZE,
        "quality": THUMBNAIL_QUALITY,
        "max_workers": None,
    },
    "cache": {"root": None},
    "logging": {"dir": None, "delete_dir": None, "level": "INFO"},
}


def default_settings_path() -> Path:
    """`<config-root>/LightCull/settings.json`."""
    return user_config_root() / "LightCull" / "settings.json"


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access.

    Keys missing from the file fall back to `DEFAULTS`.
    """

    def __init__(self, settings_path: str | Path | None = None) -> None:
        """Load settings.

        Args:
            settings_path: Explicit file to read; it must exist. When None, the
                default location is read if present, otherwise defaults apply.

        Raises:
            FileNotFoundError: An explicit `settings_path` does not exist.
            SettingsError: The file is not valid JSON or not a JSON object.
        """
        self._data: dict[str, Any] = {}
        if settings_path is not None:
            self._path: Path | None = Path(settings_path)
            if not self._path.exists():
                raise FileNotFoundError(f"settings.json not found: {self._path}")
        else:
            candidate = default_settings_path()
            self._path = candidate if candidate.exists() else None

        if self._path is not None:
            try:
                with self._path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as ex:
                raise SettingsError(f"Cannot read settings {self._path}: {ex}") from ex
            if not isinstance(data, dict):
                raise SettingsError(f"Settings root must be an object: {self._path}")
            self._data = data
            logger.info("Settings loaded: {}", self._path)

    @property
    def path(self) -> Path | None:
        """File the settings were read from, if any."""
        return self._path

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key` from the file, then `DEFAULTS`, then `default`."""
        for source in (self._data, DEFAULTS):
            found, value = _lookup(source, key)
            if found and value is not None:
                return value
        return default

    def get_int(self, key: str, default: int) -> int:
        """Return an integer setting, falling back to `default` when invalid."""
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Invalid value for {}: {!r}, using {}", key, value, default)
            return default


def _lookup(node: Any, key: str) -> tuple[bool, Any]:
    for part in key.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        else:
            return False, None
    return True, node
