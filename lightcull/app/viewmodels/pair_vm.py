"""Lightweight view model wrapper around `ImagePair`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lightcull.core.models import ImagePair


@dataclass
class PairVM:
    """Expose convenient properties for bindings and listings."""

    pair: ImagePair

    @property
    def file_name(self) -> str:
        """JPEG file name."""
        return self.pair.file_name

    @property
    def folder_path(self) -> str:
        """Folder portion of the JPEG path."""
        return str(self.pair.jpeg_path.parent)

    @property
    def raw_name(self) -> str | None:
        """RAW file name, if paired."""
        return self.pair.raw_path.name if self.pair.raw_path is not None else None

    @property
    def has_raw(self) -> bool:
        """True if the JPEG has a RAW sibling."""
        return self.pair.has_raw

    @property
    def is_top(self) -> bool:
        """True if the pair carries the TOP tag."""
        return self.pair.has_top_tag

    @property
    def thumbnail(self) -> Path | None:
        """Cached thumbnail, if generated."""
        return self.pair.thumbnail_path

    @property
    def badges(self) -> str:
        """Compact status column: `R` when paired, `*` when tagged."""
        return ("R" if self.has_raw else "-") + ("*" if self.is_top else " ")

    def row(self) -> str:
        """One listing line: badges, then the JPEG name."""
        return f"{self.badges} {self.file_name}"
