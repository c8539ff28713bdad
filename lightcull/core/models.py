"""Core domain models for image pairs, move history, and folder statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class ImagePair:
    """A JPEG file with its optional same-named RAW sibling.

    Two pairs are equal when they point at the same files; tag and thumbnail
    state are ignored so an updated copy can replace the old one in a list.
    """

    jpeg_path: Path
    raw_path: Path | None = None
    has_top_tag: bool = field(default=False, compare=False)
    thumbnail_path: Path | None = field(default=None, compare=False)

    @property
    def has_raw(self) -> bool:
        """True if a RAW sibling was found."""
        return self.raw_path is not None

    @property
    def file_name(self) -> str:
        """File name of the JPEG."""
        return self.jpeg_path.name

    @property
    def base_name(self) -> str:
        """JPEG file name without extension."""
        return self.jpeg_path.stem

    @property
    def paths(self) -> list[Path]:
        """JPEG path followed by the RAW path when present."""
        return [self.jpeg_path] + ([self.raw_path] if self.raw_path is not None else [])


@dataclass(frozen=True)
class MoveOperation:
    """Record of one completed pair relocation, kept for undo.

    Attributes:
        original_jpeg_path: Where the JPEG was before the move.
        moved_jpeg_path: Where the JPEG is now.
        original_raw_path: Where the RAW was, if the pair had one.
        moved_raw_path: Where the RAW is now, if the pair had one.
        timestamp: When the move completed.
        destination_folder_name: Subfolder the pair was moved into.
    """

    original_jpeg_path: Path
    moved_jpeg_path: Path
    original_raw_path: Path | None
    moved_raw_path: Path | None
    timestamp: datetime
    destination_folder_name: str = ""

    @property
    def moved_paths(self) -> list[Path]:
        """Current locations of the moved files, JPEG first."""
        return [self.moved_jpeg_path] + (
            [self.moved_raw_path] if self.moved_raw_path is not None else []
        )


@dataclass(frozen=True)
class FolderStatistics:
    """Snapshot of counters for the selected folder."""

    total_files: int = 0
    jpeg_with_raw: int = 0
    jpeg_without_raw: int = 0
    deleted_files: int = 0
    tagged_pairs: int = 0
    raw_files: int = 0

    @property
    def total_pairs(self) -> int:
        """Number of JPEGs in the folder, paired or not."""
        return self.jpeg_with_raw + self.jpeg_without_raw


@dataclass(frozen=True)
class ImageMetadata:
    """Display-ready file and EXIF information for one image."""

    file_name: str
    file_size: str
    camera_make: str | None = None
    camera_model: str | None = None
    focal_length: str | None = None
    aperture: str | None = None
    shutter_speed: str | None = None
    iso: str | None = None
