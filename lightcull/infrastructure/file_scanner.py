"""Folder scanning: JPEG/RAW pairing and folder statistics.

A scan is a pure function of the folder contents. Nothing is indexed or
remembered between scans; every call re-derives pairs and tag state.
"""

from __future__ import annotations

import os
from pathlib import Path

from loguru import logger

from lightcull.core.constants import DELETE_FOLDER, JPEG_EXTENSIONS, RAW_EXTENSION, TOP_TAG
from lightcull.core.errors import FolderReadError
from lightcull.core.models import FolderStatistics, ImagePair
from lightcull.core.services.interfaces import TagStoreProtocol
from lightcull.core.services.sort_service import SortService
from lightcull.infrastructure.utils import extension_of, is_hidden


def is_jpeg_name(name: str) -> bool:
    """True if `name` has a JPEG extension (any case)."""
    return extension_of(name).lower() in JPEG_EXTENSIONS


def is_raw_name(name: str) -> bool:
    """True if `name` has the RAW extension (exact case)."""
    return extension_of(name) == RAW_EXTENSION


def raw_sibling_name(jpeg_name: str) -> str:
    """File name of the RAW that would pair with `jpeg_name`."""
    return f"{Path(jpeg_name).stem}.{RAW_EXTENSION}"


class PairScanner:
    """Finds JPEG/RAW pairs in a folder and reads their TOP tag."""

    def __init__(self, tag_store: TagStoreProtocol, sorter: SortService | None = None) -> None:
        self._tags = tag_store
        self._sorter = sorter or SortService()

    def scan(self, folder: str | Path) -> list[ImagePair]:
        """Return the pairs in `folder` in natural filename order.

        Raises:
            FolderReadError: If `folder` is missing, not a directory, or unreadable.
        """
        folder = Path(folder)
        files = self._list_files(folder)
        names = set(files)

        jpegs = self._sorter.sort_names(n for n in files if is_jpeg_name(n))
        pairs: list[ImagePair] = []
        for name in jpegs:
            jpeg_path = folder / name
            raw_name = raw_sibling_name(name)
            raw_path = folder / raw_name if raw_name in names else None
            # Tags are written to both files; the JPEG is authoritative for reads
            has_top = self._tags.has_tag(TOP_TAG, jpeg_path)
            pairs.append(ImagePair(jpeg_path=jpeg_path, raw_path=raw_path, has_top_tag=has_top))

        logger.info(
            "Scanned {}: {} pairs ({} with RAW)",
            folder,
            len(pairs),
            sum(1 for p in pairs if p.has_raw),
        )
        return pairs

    def compute_statistics(self, folder: str | Path) -> FolderStatistics:
        """Count JPEGs, RAWs, pairings, tagged pairs and files waiting in the delete folder.

        Returns all-zero statistics if the folder cannot be read.
        """
        folder = Path(folder)
        try:
            files = self._list_files(folder)
        except FolderReadError as ex:
            logger.warning("Statistics unavailable: {}", ex)
            return FolderStatistics()

        names = set(files)
        jpegs = [n for n in files if is_jpeg_name(n)]
        raw_count = sum(1 for n in files if is_raw_name(n))
        with_raw = sum(1 for n in jpegs if raw_sibling_name(n) in names)
        tagged = sum(1 for n in jpegs if self._tags.has_tag(TOP_TAG, folder / n))

        deleted = 0
        delete_dir = folder / DELETE_FOLDER
        if delete_dir.is_dir():
            try:
                deleted = sum(
                    1 for n in self._list_files(delete_dir) if is_jpeg_name(n) or is_raw_name(n)
                )
            except FolderReadError as ex:
                logger.warning("Delete folder unreadable: {}", ex)

        return FolderStatistics(
            total_files=len(jpegs) + raw_count,
            jpeg_with_raw=with_raw,
            jpeg_without_raw=len(jpegs) - with_raw,
            deleted_files=deleted,
            tagged_pairs=tagged,
            raw_files=raw_count,
        )

    # Internal helpers
    @staticmethod
    def _list_files(folder: Path) -> list[str]:
        """Names of visible regular files directly inside `folder`."""
        try:
            with os.scandir(folder) as it:
                return [
                    entry.name
                    for entry in it
                    if not is_hidden(entry.name) and entry.is_file(follow_symlinks=True)
                ]
        except OSError as ex:
            logger.error("Cannot read folder {}: {}", folder, ex)
            raise FolderReadError(folder, ex) from ex
