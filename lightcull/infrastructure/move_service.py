"""Pair relocation between the selected folder and its culling subfolders.

Moves the JPEG and its RAW together into `_toDelete`, `_Archive` or
`_Outtakes` and back again for undo. Each operation either completes for
both files or is rolled back; the thumbnail cache follows along on a best
effort basis and never decides the outcome.
"""

from __future__ import annotations

from datetime import datetime
import os
from pathlib import Path

from loguru import logger

from lightcull.core.constants import ARCHIVE_FOLDER, DELETE_FOLDER, OUTTAKES_FOLDER
from lightcull.core.models import ImagePair, MoveOperation
from lightcull.core.services.interfaces import ThumbnailShadowProtocol
from lightcull.core.services.saga import Saga
from lightcull.infrastructure.utils import ensure_folder, move_file


class MoveService:
    """Moves pairs into destination subfolders and reverses those moves."""

    def __init__(self, thumbnails: ThumbnailShadowProtocol | None = None) -> None:
        self._thumbs = thumbnails

    # Public API
    def move_pair(
        self, pair: ImagePair, source_folder: str | Path, destination_folder_name: str
    ) -> MoveOperation | None:
        """Move `pair` into `<source_folder>/<destination_folder_name>`.

        Returns:
            A `MoveOperation` for the undo log, or None if nothing was moved
            (or everything that was moved has been put back).
        """
        destination = Path(source_folder) / destination_folder_name
        if not ensure_folder(destination):
            logger.error("Could not create {} folder", destination_folder_name)
            return None

        new_jpeg = destination / pair.jpeg_path.name
        new_raw = destination / pair.raw_path.name if pair.raw_path is not None else None

        # Refuse before touching anything if either target is taken
        for target in (new_jpeg, new_raw):
            if target is not None and os.path.lexists(target):
                logger.error("Destination file already exists: {}", target)
                return None

        saga = Saga(f"move {pair.file_name} -> {destination_folder_name}")
        if not saga.step(
            "move jpeg",
            lambda: move_file(pair.jpeg_path, new_jpeg),
            lambda: move_file(new_jpeg, pair.jpeg_path),
        ):
            logger.error("JPEG could not be moved: {}", pair.file_name)
            return None
        logger.info("JPEG moved to {}: {}", destination_folder_name, pair.file_name)

        saga.step(
            "shadow thumbnail",
            lambda: self._shadow_thumbnail(pair.jpeg_path),
            lambda: self._unshadow_thumbnail(pair.jpeg_path),
        )

        if pair.raw_path is not None and new_raw is not None:
            raw_path = pair.raw_path
            if not saga.step(
                "move raw",
                lambda: move_file(raw_path, new_raw),
                lambda: move_file(new_raw, raw_path),
            ):
                logger.error("RAW could not be moved: {}", raw_path.name)
                if saga.rollback():
                    logger.warning("JPEG was moved back: {}", pair.file_name)
                else:
                    logger.critical(
                        "Pair split across folders, manual recovery needed: JPEG at {}, RAW at {}",
                        new_jpeg,
                        raw_path,
                    )
                return None
            logger.info("RAW moved to {}: {}", destination_folder_name, raw_path.name)

        return MoveOperation(
            original_jpeg_path=pair.jpeg_path,
            moved_jpeg_path=new_jpeg,
            original_raw_path=pair.raw_path,
            moved_raw_path=new_raw,
            timestamp=datetime.now(),
            destination_folder_name=destination_folder_name,
        )

    def delete_pair(self, pair: ImagePair, source_folder: str | Path) -> MoveOperation | None:
        """Move `pair` to the `_toDelete` folder."""
        return self.move_pair(pair, source_folder, DELETE_FOLDER)

    def archive_pair(self, pair: ImagePair, source_folder: str | Path) -> MoveOperation | None:
        """Move `pair` to the `_Archive` folder."""
        return self.move_pair(pair, source_folder, ARCHIVE_FOLDER)

    def outtake_pair(self, pair: ImagePair, source_folder: str | Path) -> MoveOperation | None:
        """Move `pair` to the `_Outtakes` folder."""
        return self.move_pair(pair, source_folder, OUTTAKES_FOLDER)

    def undo_move(self, operation: MoveOperation) -> bool:
        """Put the files of `operation` back where they were.

        On failure the files are left where the move had put them, so the
        operation can be retried.
        """
        restore_raw = (
            operation.moved_raw_path is not None and operation.original_raw_path is not None
        )
        targets = [operation.original_jpeg_path]
        if restore_raw:
            targets.append(operation.original_raw_path)  # type: ignore[arg-type]
        for target in targets:
            if os.path.lexists(target):
                logger.error("Cannot undo, original location is occupied: {}", target)
                return False

        name = operation.original_jpeg_path.name
        saga = Saga(f"undo {name}")
        if not saga.step(
            "restore jpeg",
            lambda: move_file(operation.moved_jpeg_path, operation.original_jpeg_path),
            lambda: move_file(operation.original_jpeg_path, operation.moved_jpeg_path),
        ):
            logger.error("JPEG could not be moved back: {}", name)
            return False
        logger.info("JPEG restored: {}", name)

        saga.step(
            "restore thumbnail",
            lambda: self._unshadow_thumbnail(operation.original_jpeg_path),
            lambda: self._shadow_thumbnail(operation.original_jpeg_path),
        )

        if restore_raw:
            moved_raw: Path = operation.moved_raw_path  # type: ignore[assignment]
            original_raw: Path = operation.original_raw_path  # type: ignore[assignment]
            if not saga.step(
                "restore raw",
                lambda: move_file(moved_raw, original_raw),
                lambda: move_file(original_raw, moved_raw),
            ):
                logger.error("RAW could not be moved back: {}", original_raw.name)
                if saga.rollback():
                    logger.warning("JPEG was moved back to {}", operation.moved_jpeg_path.parent)
                else:
                    logger.critical(
                        "Pair split across folders, manual recovery needed: JPEG at {}, RAW at {}",
                        operation.original_jpeg_path,
                        moved_raw,
                    )
                return False
            logger.info("RAW restored: {}", original_raw.name)

        return True

    # Internal helpers
    def _shadow_thumbnail(self, original_path: Path) -> bool:
        if self._thumbs is None:
            return True
        if not self._thumbs.move_to_deleted_folder(original_path):
            logger.warning("Thumbnail could not be moved (non-critical): {}", original_path.name)
        # Thumbnail bookkeeping never fails the primary operation
        return True

    def _unshadow_thumbnail(self, original_path: Path) -> bool:
        if self._thumbs is None:
            return True
        if not self._thumbs.restore_from_deleted_folder(original_path):
            logger.warning("Thumbnail could not be restored (non-critical): {}", original_path.name)
        return True
