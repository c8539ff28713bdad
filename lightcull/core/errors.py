"""Exception types raised by the few operations that do not report via return values."""

from __future__ import annotations

from pathlib import Path


class LightCullError(Exception):
    """Base class for LightCull errors."""


class FolderReadError(LightCullError):
    """A folder could not be listed (missing, not a directory, or unreadable).

    Distinct from an empty result so callers can tell "nothing here" apart
    from "could not look".
    """

    def __init__(self, folder: str | Path, cause: OSError | None = None) -> None:
        self.folder = Path(folder)
        self.cause = cause
        reason = cause.strerror if cause is not None and cause.strerror else str(cause or "")
        super().__init__(f"Cannot read folder {self.folder}: {reason}".rstrip(": "))


class SettingsError(LightCullError):
    """Settings file exists but cannot be parsed."""
