"""ViewModel coordinating scanning, tagging, moves, renames and undo for one folder."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
import os
from pathlib import Path

from loguru import logger

from lightcull.core.constants import DELETE_FOLDER, TOP_TAG
from lightcull.core.errors import FolderReadError
from lightcull.core.models import FolderStatistics, ImageMetadata, ImagePair, MoveOperation
from lightcull.core.services.interfaces import PurgeResult, RenameBatchResult, TagStoreProtocol
from lightcull.core.services.saga import Saga
from lightcull.core.services.selection_service import SelectionService
from lightcull.core.services.undo_log import UndoLog
from lightcull.infrastructure.file_scanner import PairScanner
from lightcull.infrastructure.metadata_service import MetadataService
from lightcull.infrastructure.move_service import MoveService
from lightcull.infrastructure.rename_service import RenameService, prefixed_path
from lightcull.infrastructure.thumbnail_service import ProgressCallback, ThumbnailCache
from lightcull.infrastructure.trash_service import TrashService


class MainVM:
    """Main application view-model.

    Owns the pair list, the current selection and the undo history. Services
    only return new values; this class is the one place that replaces the
    list, so hosts read `pairs`, `selected` and `statistics` after each call.
    """

    def __init__(
        self,
        tag_store: TagStoreProtocol,
        thumbnails: ThumbnailCache,
        scanner: PairScanner | None = None,
        mover: MoveService | None = None,
        renamer: RenameService | None = None,
        trash: TrashService | None = None,
        metadata: MetadataService | None = None,
        selection: SelectionService | None = None,
    ) -> None:
        """Create a MainVM.

        Args:
            tag_store: Store used for reading and toggling the TOP tag.
            thumbnails: Thumbnail cache shadowing moves and renames.
            scanner: Pair scanner (defaults to one over `tag_store`).
            mover: Move service (defaults to one over `thumbnails`).
            renamer: Rename service (defaults to one over `thumbnails`).
            trash: Trash purge service.
            metadata: EXIF reader for the selected pair.
            selection: Selection rules.
        """
        self._tags = tag_store
        self._thumbs = thumbnails
        self._scanner = scanner or PairScanner(tag_store)
        self._mover = mover or MoveService(thumbnails)
        self._renamer = renamer or RenameService(thumbnails)
        self._trash = trash or TrashService()
        self._metadata = metadata or MetadataService()
        self._selection = selection or SelectionService()
        self._undo = UndoLog()

        self.folder: Path | None = None
        self.pairs: list[ImagePair] = []
        self.selected: ImagePair | None = None
        self.statistics: FolderStatistics = FolderStatistics()
        self.last_error: str | None = None

    # Folder lifecycle
    def open_folder(self, folder: str | Path) -> bool:
        """Switch to `folder`: drop cache and history, scan, select the first pair.

        Returns False if the folder could not be read; `last_error` says why.
        """
        self.folder = Path(folder)
        self._thumbs.clear()
        self._undo.clear()
        ok = self.rescan()
        self.selected = self.pairs[0] if self.pairs else None
        logger.info("Folder opened: {} ({} pairs)", self.folder, len(self.pairs))
        return ok

    def rescan(self) -> bool:
        """Re-read pairs and statistics for the current folder, keeping known thumbnails."""
        if self.folder is None:
            return False
        try:
            fresh = self._scanner.scan(self.folder)
            self.last_error = None
        except FolderReadError as ex:
            logger.error("Rescan failed: {}", ex)
            self.last_error = str(ex)
            self.pairs = []
            self.selected = None
            self.statistics = FolderStatistics()
            return False
        self.pairs = [self._with_cached_thumbnail(p) for p in fresh]
        self.selected = self._selection.remap(self.pairs, self.selected)
        self.refresh_statistics()
        return True

    def refresh_statistics(self) -> FolderStatistics:
        """Recompute folder statistics."""
        if self.folder is not None:
            self.statistics = self._scanner.compute_statistics(self.folder)
        return self.statistics

    def generate_thumbnails(self, on_progress: ProgressCallback | None = None) -> list[ImagePair]:
        """Generate thumbnails for all pairs and swap in the updated list."""
        if not self.pairs:
            logger.debug("No pairs to generate thumbnails for")
            return []
        logger.info("Starting thumbnail generation for {} pairs", len(self.pairs))
        self.pairs = self._thumbs.generate_all(self.pairs, on_progress)
        self.selected = self._selection.remap(self.pairs, self.selected)
        return self.pairs

    def clear_thumbnail_cache(self) -> None:
        """Remove all cached thumbnails and forget them on the current pairs."""
        self._thumbs.clear()
        self.pairs = [replace(p, thumbnail_path=None) for p in self.pairs]
        self.selected = self._selection.remap(self.pairs, self.selected)

    # Selection
    def select(self, pair: ImagePair | None) -> ImagePair | None:
        """Select `pair` if it is in the list; None clears the selection."""
        self.selected = self._selection.remap(self.pairs, pair) if pair is not None else None
        return self.selected

    def select_by_name(self, file_name: str) -> ImagePair | None:
        """Select the pair whose JPEG is called `file_name`."""
        for pair in self.pairs:
            if pair.file_name == file_name:
                self.selected = pair
                return pair
        return None

    def select_next(self) -> ImagePair | None:
        """Move the selection one pair forward."""
        self.selected = self._selection.next(self.pairs, self.selected)
        return self.selected

    def select_previous(self) -> ImagePair | None:
        """Move the selection one pair back."""
        self.selected = self._selection.previous(self.pairs, self.selected)
        return self.selected

    def selected_metadata(self) -> ImageMetadata | None:
        """Metadata of the selected pair's JPEG."""
        if self.selected is None:
            return None
        return self._metadata.extract(self.selected.jpeg_path)

    # Tagging
    def toggle_top_tag(self, pair: ImagePair | None = None) -> ImagePair | None:
        """Flip the TOP tag on both files of `pair` (default: the selection).

        If the second file cannot be updated, the first is put back and the
        pair is returned unchanged. A file that already carries the target
        state is not written, so a rollback never undoes an outside edit.
        """
        pair = pair or self.selected
        if pair is None:
            logger.info("No image selected - cannot toggle tag")
            return None

        tagged = not pair.has_top_tag
        if tagged:
            apply, revert, verb = self._tags.add_tag, self._tags.remove_tag, "added"
        else:
            apply, revert, verb = self._tags.remove_tag, self._tags.add_tag, "removed"

        saga = Saga(f"toggle {TOP_TAG} {pair.file_name}")
        for f in pair.paths:
            if self._tags.has_tag(TOP_TAG, f) == tagged:
                continue
            if not saga.step(
                f"tag {f.name}",
                lambda f=f: apply(TOP_TAG, f),
                lambda f=f: revert(TOP_TAG, f),
            ):
                logger.error("Error updating {} tag on {}", TOP_TAG, f.name)
                if not saga.rollback():
                    logger.critical("Tag state differs between files of {}", pair.file_name)
                return pair

        updated = replace(pair, has_top_tag=tagged)
        logger.info("{} tag {}: {}", TOP_TAG, verb, pair.file_name)
        self._patch(updated)
        return updated

    # Moves and undo
    def delete_selected(self) -> bool:
        """Move the selected pair to `_toDelete`."""
        return self._move_selected(self._mover.delete_pair, "delete")

    def archive_selected(self) -> bool:
        """Move the selected pair to `_Archive`."""
        return self._move_selected(self._mover.archive_pair, "archive")

    def outtake_selected(self) -> bool:
        """Move the selected pair to `_Outtakes`."""
        return self._move_selected(self._mover.outtake_pair, "outtake")

    def move_pair(self, pair: ImagePair, destination_folder_name: str) -> bool:
        """Move `pair` to an arbitrary subfolder and record it for undo."""
        if self.folder is None:
            return False
        operation = self._mover.move_pair(pair, self.folder, destination_folder_name)
        return self._after_move(pair, operation, destination_folder_name)

    @property
    def can_undo(self) -> bool:
        """True if there is a move to undo."""
        return not self._undo.is_empty

    @property
    def thumbnails(self) -> ThumbnailCache:
        """The thumbnail cache backing this view-model."""
        return self._thumbs

    @property
    def undo_log(self) -> UndoLog:
        """The undo history (read access for hosts and tests)."""
        return self._undo

    def undo_last_move(self, completion: Callable[[bool], None] | None = None) -> bool:
        """Reverse the most recent move.

        A failed undo goes back on the history so it can be retried.
        `completion`, if given, receives the same result as the return value.
        """
        operation = self._undo.pop_last()
        if operation is None:
            logger.info("No move operations to undo")
            return self._finish(completion, False)

        logger.debug("Undoing move: {}", operation.original_jpeg_path.name)
        if not self._mover.undo_move(operation):
            logger.error("Undo failed: {}", operation.original_jpeg_path.name)
            self._undo.push(operation)
            return self._finish(completion, False)

        logger.info("Undo successful - history now contains {} operations", len(self._undo))
        self.rescan()
        restored = ImagePair(operation.original_jpeg_path, operation.original_raw_path)
        self.selected = self._selection.remap(self.pairs, restored) or (
            self.pairs[-1] if self.pairs else None
        )
        return self._finish(completion, True)

    # Rename
    def rename_selected(
        self, prefix: str, pairs: Iterable[ImagePair] | None = None
    ) -> RenameBatchResult:
        """Rename `pairs` (default: the selection) with `prefix`, then rescan."""
        if pairs is None:
            pairs = [self.selected] if self.selected is not None else []
        pairs = list(pairs)
        result = self._renamer.rename_pairs(pairs, prefix)
        prefix = prefix.strip()
        current = self.selected
        if prefix and current is not None and current in pairs and current not in result.failed:
            self.selected = ImagePair(
                prefixed_path(current.jpeg_path, prefix),
                prefixed_path(current.raw_path, prefix) if current.raw_path is not None else None,
            )
        self.rescan()
        return result

    # Trash
    def purge_deleted(self) -> PurgeResult:
        """Send `_toDelete` to the trash and forget undo entries for trashed pairs.

        Entries whose files could not be trashed stay on the history. A pair
        only partly trashed cannot be undone any more and is dropped with a
        critical log entry.
        """
        if self.folder is None:
            return PurgeResult()
        result = self._trash.purge_folder(self.folder)
        trashed = {os.path.normpath(p) for p in result.success_paths}

        def gone(op: MoveOperation) -> bool:
            if op.destination_folder_name != DELETE_FOLDER:
                return False
            moved = [os.path.normpath(str(p)) for p in op.moved_paths]
            hits = sum(1 for p in moved if p in trashed)
            if 0 < hits < len(moved):
                logger.critical(
                    "Pair only partly sent to trash, manual recovery needed: {}",
                    op.moved_jpeg_path.name,
                )
            return hits > 0

        removed = self._undo.discard(gone)
        if removed:
            logger.info("Dropped {} undo entries for trashed files", removed)
        self._thumbs.clear_deleted(Path(p).name for p in result.success_paths)
        self.refresh_statistics()
        return result

    # Internal helpers
    def _move_selected(
        self, action: Callable[[ImagePair, Path], MoveOperation | None], verb: str
    ) -> bool:
        if self.selected is None:
            logger.info("No image selected - cannot {}", verb)
            return False
        if self.folder is None:
            logger.info("No folder selected - cannot {}", verb)
            return False
        pair = self.selected
        operation = action(pair, self.folder)
        return self._after_move(pair, operation, verb)

    def _after_move(self, pair: ImagePair, operation: MoveOperation | None, verb: str) -> bool:
        if operation is None:
            logger.error("{} failed: {}", verb.capitalize(), pair.file_name)
            return False
        self._undo.push(operation)
        logger.info(
            "{} successful: {} - history now contains {} operations",
            verb.capitalize(),
            pair.file_name,
            len(self._undo),
        )
        index = self._selection.index_of(self.pairs, pair)
        self.rescan()
        if self.selected is None or self.selected == pair:
            self.selected = self._selection.after_removal(self.pairs, index)
        return True

    def _patch(self, updated: ImagePair) -> None:
        """Replace the pair equal to `updated` in place and refresh statistics."""
        index = self._selection.index_of(self.pairs, updated)
        if index is None:
            logger.info("ImagePair not found in list: {}", updated.file_name)
            return
        self.pairs[index] = updated
        if self.selected == updated:
            self.selected = updated
        self.refresh_statistics()

    def _with_cached_thumbnail(self, pair: ImagePair) -> ImagePair:
        thumb = self._thumbs.thumbnail_path_for(pair.jpeg_path)
        return replace(pair, thumbnail_path=thumb) if thumb.exists() else pair

    @staticmethod
    def _finish(completion: Callable[[bool], None] | None, ok: bool) -> bool:
        if completion is not None:
            completion(ok)
        return ok
