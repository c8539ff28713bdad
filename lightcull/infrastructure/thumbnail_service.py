"""Thumbnail generation and the on-disk thumbnail cache.

Thumbnails live under `<cache-root>/LightCull/current/` with the same file
name as their original. The cache is a performance aid only: every
operation here is best effort, logs its failures, and reports them as
False/None rather than raising, so a broken cache never blocks a move or
rename of the originals.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
import os
from pathlib import Path
import shutil
import time

from PIL import Image, ImageOps
from loguru import logger

from lightcull.core.constants import (
    CACHE_APP_FOLDER,
    CACHE_CURRENT_FOLDER,
    DELETE_FOLDER,
    THUMBNAIL_MAX_WORKERS,
    THUMBNAIL_QUALITY,
    THUMBNAIL_SIZE,
)
from lightcull.core.models import ImagePair
from lightcull.infrastructure.utils import user_cache_root

ProgressCallback = Callable[[int, int], None]


def _ensure_dir(p: Path) -> None:
    """Create directory `p` if missing (including parents)."""
    p.mkdir(parents=True, exist_ok=True)


class ThumbnailCache:
    """Creates, relocates and purges cached thumbnails keyed by file name."""

    def __init__(
        self,
        cache_root: str | Path | None = None,
        size: int = THUMBNAIL_SIZE,
        quality: int = THUMBNAIL_QUALITY,
        max_workers: int | None = None,
    ) -> None:
        """Create a cache.

        Args:
            cache_root: Platform cache root to build under; defaults to the
                user's cache directory.
            size: Long edge of generated thumbnails in pixels.
            quality: JPEG quality used when saving thumbnails.
            max_workers: Upper bound on parallel generation tasks.
        """
        self._root = Path(cache_root) if cache_root else user_cache_root()
        self._size = max(1, int(size))
        self._quality = min(95, max(1, int(quality)))
        self._max_workers = max_workers or min(THUMBNAIL_MAX_WORKERS, os.cpu_count() or 1)

    @property
    def max_workers(self) -> int:
        """Upper bound on parallel generation tasks."""
        return self._max_workers

    # Cache directory management
    def root_directory(self) -> Path:
        """`<cache-root>/LightCull`, the folder removed by `clear()`."""
        return self._root / CACHE_APP_FOLDER

    def cache_directory(self) -> Path:
        """`<cache-root>/LightCull/current`, where thumbnails are stored."""
        return self.root_directory() / CACHE_CURRENT_FOLDER

    def deleted_directory(self) -> Path:
        """Shadow folder for thumbnails of pairs moved out of the active folder."""
        return self.cache_directory() / DELETE_FOLDER

    def clear(self) -> None:
        """Delete the entire LightCull cache root (on startup and folder change)."""
        root = self.root_directory()
        if not root.exists():
            logger.debug("Cache directory does not exist - nothing to clear")
            return
        try:
            shutil.rmtree(root)
            logger.info("Cache cleared: {}", root)
        except OSError as ex:
            logger.error("Error clearing cache {}: {}", root, ex)

    def clear_deleted(self, names: Iterable[str] | None = None) -> None:
        """Drop shadow thumbnails from the delete folder.

        Args:
            names: File names whose shadows should go. When None the whole
                shadow folder is removed.
        """
        folder = self.deleted_directory()
        if not folder.exists():
            return
        if names is None:
            try:
                shutil.rmtree(folder)
            except OSError as ex:
                logger.warning("Could not clear deleted thumbnails {}: {}", folder, ex)
            return
        for name in names:
            try:
                (folder / Path(name).name).unlink(missing_ok=True)
            except OSError as ex:
                logger.warning("Could not remove deleted thumbnail {}: {}", name, ex)

    def thumbnail_path_for(self, original_path: Path) -> Path:
        """Thumbnail location for `original_path` (same name, cache directory)."""
        return self.cache_directory() / Path(original_path).name

    # Generation
    def generate_all(
        self, pairs: Sequence[ImagePair], on_progress: ProgressCallback | None = None
    ) -> list[ImagePair]:
        """Generate missing thumbnails for `pairs` in parallel.

        `on_progress(done, total)` is called on the calling thread after each
        completion, with `done` strictly increasing up to `total`.

        Returns:
            Pairs in input order with `thumbnail_path` set where generation
            succeeded. If the cache directory cannot be created the input is
            returned unchanged.
        """
        pairs = list(pairs)
        total = len(pairs)
        if not total:
            return []
        try:
            _ensure_dir(self.cache_directory())
        except OSError as ex:
            logger.error("Cache directory could not be created ({}) - returning original pairs", ex)
            return pairs

        started = time.perf_counter()
        results: dict[int, ImagePair] = {}
        done = 0
        workers = max(1, min(self._max_workers, total))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="thumb") as pool:
            futures = {
                pool.submit(self.generate, pair.jpeg_path): index
                for index, pair in enumerate(pairs)
            }
            for future in as_completed(futures):
                index = futures[future]
                try:
                    thumb = future.result()
                except Exception as ex:  # pylint: disable=broad-exception-caught
                    logger.error("Thumbnail task failed for {}: {}", pairs[index].file_name, ex)
                    thumb = None
                results[index] = replace(pairs[index], thumbnail_path=thumb)
                done += 1
                if on_progress is not None:
                    on_progress(done, total)

        elapsed = time.perf_counter() - started
        generated = sum(1 for p in results.values() if p.thumbnail_path is not None)
        logger.info(
            "Thumbnail generation complete: {}/{} in {:.2f}s (avg {:.0f} ms)",
            generated,
            total,
            elapsed,
            elapsed / total * 1000,
        )
        return [results[i] for i in sorted(results)]

    def generate(self, original_path: Path) -> Path | None:
        """Create the thumbnail for `original_path` unless it already exists."""
        target = self.thumbnail_path_for(original_path)
        if target.exists():
            logger.debug("Thumbnail already exists: {}", target.name)
            return target
        # Written under a temporary name so a half-written file is never taken as cached
        tmp = target.with_name(f".{target.name}.{os.getpid()}.tmp")
        try:
            _ensure_dir(target.parent)
            with Image.open(original_path) as im:
                # JPEG draft mode decodes at a reduced scale, far cheaper than a full decode
                im.draft("RGB", (self._size, self._size))
                thumb = ImageOps.exif_transpose(im)
                if thumb.mode not in ("RGB", "L"):
                    thumb = thumb.convert("RGB")
                resampling = getattr(Image, "Resampling", Image)
                thumb.thumbnail((self._size, self._size), resampling.LANCZOS)
                thumb.save(tmp, "JPEG", quality=self._quality)
            os.replace(tmp, target)
        except (OSError, ValueError, Image.DecompressionBombError) as ex:
            logger.error("Could not create thumbnail for {}: {}", Path(original_path).name, ex)
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            return None
        logger.debug("Thumbnail generated: {}", target.name)
        return target

    # Shadow relocation for file operations
    def move_to_deleted_folder(self, original_path: Path) -> bool:
        """Move the thumbnail of `original_path` into the cache's delete folder.

        No thumbnail to move counts as success.
        """
        source = self.thumbnail_path_for(original_path)
        if not source.exists():
            logger.debug("No thumbnail to move: {}", source.name)
            return True
        destination = self.deleted_directory() / source.name
        try:
            _ensure_dir(destination.parent)
            os.replace(source, destination)
            logger.debug("Thumbnail moved to {}: {}", DELETE_FOLDER, source.name)
            return True
        except OSError as ex:
            logger.warning("Could not move thumbnail {}: {}", source.name, ex)
            return False

    def restore_from_deleted_folder(self, original_path: Path) -> bool:
        """Move the thumbnail of `original_path` back out of the delete folder.

        No thumbnail to restore counts as success.
        """
        target = self.thumbnail_path_for(original_path)
        source = self.deleted_directory() / target.name
        if not source.exists():
            logger.debug("No thumbnail in {} folder: {}", DELETE_FOLDER, target.name)
            return True
        try:
            _ensure_dir(target.parent)
            os.replace(source, target)
            logger.debug("Thumbnail restored from {}: {}", DELETE_FOLDER, target.name)
            return True
        except OSError as ex:
            logger.warning("Could not restore thumbnail {}: {}", target.name, ex)
            return False

    def rename(self, old_path: Path, new_path: Path) -> bool:
        """Rename the thumbnail to follow a renamed original.

        No thumbnail counts as success; an occupied destination is a failure.
        """
        source = self.thumbnail_path_for(old_path)
        target = self.thumbnail_path_for(new_path)
        if not source.exists():
            logger.debug("No thumbnail to rename: {}", source.name)
            return True
        if target.exists():
            logger.warning("Destination thumbnail already exists: {}", target.name)
            return False
        try:
            os.rename(source, target)
            logger.debug("Thumbnail renamed: {} -> {}", source.name, target.name)
            return True
        except OSError as ex:
            logger.warning("Could not rename thumbnail {}: {}", source.name, ex)
            return False
