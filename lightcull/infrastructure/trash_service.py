"""Emptying the `_toDelete` folder into the system trash.

Files are never unlinked directly: `send2trash` hands them to the OS
recycle bin so a purge can still be recovered from there. Each purge writes
an audit CSV listing what was trashed and what failed.
"""

from __future__ import annotations

import csv
from datetime import datetime
import os
from pathlib import Path

from loguru import logger
from send2trash import send2trash

from lightcull.core.constants import DELETE_FOLDER
from lightcull.core.services.interfaces import PurgeResult
from lightcull.infrastructure.file_scanner import is_jpeg_name, is_raw_name
from lightcull.infrastructure.logging import get_delete_log_directory
from lightcull.infrastructure.utils import is_hidden


class TrashService:
    """Sends culled files to the recycle bin and writes an audit log."""

    def __init__(self, log_dir: str | Path | None = None) -> None:
        self._log_dir = Path(log_dir) if log_dir else Path(get_delete_log_directory())

    def purge_candidates(self, folder: str | Path) -> list[Path]:
        """JPEG/RAW files currently waiting in `<folder>/_toDelete`."""
        delete_dir = Path(folder) / DELETE_FOLDER
        if not delete_dir.is_dir():
            return []
        try:
            with os.scandir(delete_dir) as it:
                names = [
                    e.name
                    for e in it
                    if e.is_file()
                    and not is_hidden(e.name)
                    and (is_jpeg_name(e.name) or is_raw_name(e.name))
                ]
        except OSError as ex:
            logger.error("Cannot read {}: {}", delete_dir, ex)
            return []
        return sorted(delete_dir / n for n in names)

    def purge_folder(self, folder: str | Path) -> PurgeResult:
        """Send every file in `<folder>/_toDelete` to the trash."""
        result = self.send_to_trash(self.purge_candidates(folder))
        self._write_audit_log(result)
        return result

    def send_to_trash(self, paths: list[Path]) -> PurgeResult:
        """Send files to the recycle bin and report per-path results."""
        result = PurgeResult()
        for p in paths:
            path = os.path.normpath(str(p))
            if not os.path.exists(path):
                logger.error("File does not exist: {}", path)
                result.failed.append((path, "File does not exist"))
                continue
            try:
                send2trash(path)
                result.success_paths.append(path)
            except OSError as ex:
                logger.error("Failed to trash {}: {}", path, ex)
                result.failed.append((path, str(ex)))
        logger.info(
            "Trash purge: {} sent to trash, {} failed",
            len(result.success_paths),
            len(result.failed),
        )
        return result

    def _write_audit_log(self, result: PurgeResult) -> None:
        if not result.success_paths and not result.failed:
            return
        try:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_path = self._log_dir / f"purge_{ts}.csv"
            with log_path.open("w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(["FilePath", "Success", "Reason"])
                for p in result.success_paths:
                    writer.writerow([p, 1, ""])
                for p, reason in result.failed:
                    writer.writerow([p, 0, reason])
            result.log_path = str(log_path)
            logger.info("Purge log written: {}", log_path)
        except OSError as ex:
            logger.error("Write purge log failed: {}", ex)
