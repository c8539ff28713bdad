"""Prefix renaming of JPEG/RAW pairs.

`DSCF0100.JPG` + `DSCF0100.RAF` renamed with prefix `Rome` become
`Rome_DSCF0100.JPG` + `Rome_DSCF0100.RAF`, or neither file changes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
import os
from pathlib import Path

from loguru import logger

from lightcull.core.models import ImagePair
from lightcull.core.services.interfaces import RenameBatchResult, ThumbnailShadowProtocol
from lightcull.core.services.saga import Saga
from lightcull.infrastructure.utils import move_file

_FORBIDDEN_PREFIX_CHARS = ("/", "\\", "\x00")


def prefixed_path(path: Path, prefix: str) -> Path:
    """`<folder>/<prefix>_<name>` for `path`."""
    return path.with_name(f"{prefix}_{path.name}")


class RenameService:
    """Renames pairs with a prefix, rolling back the JPEG if the RAW fails."""

    def __init__(self, thumbnails: ThumbnailShadowProtocol | None = None) -> None:
        self._thumbs = thumbnails

    def rename_pair(self, pair: ImagePair, prefix: str) -> ImagePair | None:
        """Rename both files of `pair` to `<prefix>_<old name>`.

        An empty prefix is a no-op and returns `pair` unchanged.

        Returns:
            The renamed pair (same tag state), or None if the pair could not
            be renamed and all files keep their old names.
        """
        prefix = prefix.strip()
        if not prefix:
            logger.debug("Prefix is empty - nothing to rename")
            return pair
        if any(ch in prefix for ch in _FORBIDDEN_PREFIX_CHARS):
            logger.error("Invalid rename prefix: {!r}", prefix)
            return None

        new_jpeg = prefixed_path(pair.jpeg_path, prefix)
        new_raw = prefixed_path(pair.raw_path, prefix) if pair.raw_path is not None else None
        for target in (new_jpeg, new_raw):
            if target is not None and os.path.lexists(target):
                logger.error("File already exists: {}", target.name)
                return None

        saga = Saga(f"rename {pair.file_name}")
        if not saga.step(
            "rename jpeg",
            lambda: move_file(pair.jpeg_path, new_jpeg),
            lambda: move_file(new_jpeg, pair.jpeg_path),
        ):
            logger.error("Error renaming JPEG: {}", pair.file_name)
            return None
        logger.info("JPEG renamed: {} -> {}", pair.file_name, new_jpeg.name)

        thumb_moved = saga.step(
            "rename thumbnail",
            lambda: self._rename_thumbnail(pair.jpeg_path, new_jpeg),
            lambda: self._rename_thumbnail(new_jpeg, pair.jpeg_path),
        )
        if not thumb_moved:
            logger.warning("Thumbnail could not be renamed (non-critical): {}", pair.file_name)

        if pair.raw_path is not None and new_raw is not None:
            raw_path = pair.raw_path
            if not saga.step(
                "rename raw",
                lambda: move_file(raw_path, new_raw),
                lambda: move_file(new_raw, raw_path),
            ):
                logger.error("RAW rename failed - undoing JPEG rename: {}", raw_path.name)
                if not saga.rollback():
                    logger.critical(
                        "Pair names diverged, manual recovery needed: JPEG {}, RAW {}",
                        new_jpeg,
                        raw_path,
                    )
                return None
            logger.info("RAW renamed: {} -> {}", raw_path.name, new_raw.name)

        thumbnail = None
        if pair.thumbnail_path is not None and thumb_moved and self._thumbs is not None:
            thumbnail = self._thumbs.thumbnail_path_for(new_jpeg)
        return replace(pair, jpeg_path=new_jpeg, raw_path=new_raw, thumbnail_path=thumbnail)

    def rename_pairs(self, pairs: Iterable[ImagePair], prefix: str) -> RenameBatchResult:
        """Rename each pair in turn.

        Each pair is all-or-nothing on its own; a failure does not undo
        pairs renamed earlier in the batch.
        """
        result = RenameBatchResult()
        for pair in pairs:
            renamed = self.rename_pair(pair, prefix)
            if renamed is None:
                logger.warning("Error renaming: {}", pair.file_name)
                result.failed.append(pair)
            else:
                result.renamed.append(renamed)
        logger.info(
            "Batch rename with prefix {!r}: {} renamed, {} failed",
            prefix,
            len(result.renamed),
            len(result.failed),
        )
        return result

    def _rename_thumbnail(self, old_path: Path, new_path: Path) -> bool:
        if self._thumbs is None:
            return True
        return self._thumbs.rename(old_path, new_path)
