"""Core service interfaces and shared result structures.

The move and rename services depend on these protocols rather than on the
concrete tag store or thumbnail cache, so tests can substitute fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from lightcull.core.models import ImagePair


class TagStoreProtocol(Protocol):
    """Named boolean markers stored on individual files."""

    def add_tag(self, tag: str, path: Path) -> bool:
        """Add `tag` to `path`; True if the tag is present afterwards."""
        ...

    def remove_tag(self, tag: str, path: Path) -> bool:
        """Remove `tag` from `path`; True if the tag is absent afterwards."""
        ...

    def has_tag(self, tag: str, path: Path) -> bool:
        """Return True if `path` carries `tag`."""
        ...


class ThumbnailShadowProtocol(Protocol):
    """Thumbnail bookkeeping that mirrors moves and renames of originals.

    All methods are best effort and report failure as False.
    """

    def thumbnail_path_for(self, original_path: Path) -> Path:
        """Cache location of the thumbnail for `original_path`."""
        ...

    def move_to_deleted_folder(self, original_path: Path) -> bool:
        """Shadow-move the thumbnail into the cache's delete folder."""
        ...

    def restore_from_deleted_folder(self, original_path: Path) -> bool:
        """Move the thumbnail back out of the cache's delete folder."""
        ...

    def rename(self, old_path: Path, new_path: Path) -> bool:
        """Rename the thumbnail to follow a renamed original."""
        ...


@dataclass
class RenameBatchResult:
    """Outcome of renaming several pairs with one prefix.

    Attributes:
        renamed: Pairs as they are after a successful rename.
        failed: Pairs (as given) whose rename failed and was rolled back.
    """

    renamed: list[ImagePair] = field(default_factory=list)
    failed: list[ImagePair] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        """True when no pair failed."""
        return not self.failed


@dataclass
class PurgeResult:
    """Outcome of sending the delete folder's contents to the trash.

    Attributes:
        success_paths: Paths sent to the trash.
        failed: Tuples of (path, reason) for failures.
        log_path: Audit CSV written for this purge, if any.
    """

    success_paths: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    log_path: str | None = None
