"""LIFO history of completed move operations."""

from __future__ import annotations

from collections.abc import Callable
import threading

from loguru import logger

from lightcull.core.models import MoveOperation


class UndoLog:
    """Ordered stack of `MoveOperation`; the newest entry is undone first.

    Guarded by a lock so a host may touch it from more than one thread.
    """

    def __init__(self) -> None:
        self._ops: list[MoveOperation] = []
        self._lock = threading.Lock()

    def push(self, operation: MoveOperation) -> None:
        """Append `operation` as the most recent entry."""
        with self._lock:
            self._ops.append(operation)
            size = len(self._ops)
        logger.debug("Undo log push: {} (size={})", operation.original_jpeg_path.name, size)

    def pop_last(self) -> MoveOperation | None:
        """Remove and return the most recent entry, or None if empty."""
        with self._lock:
            if not self._ops:
                return None
            return self._ops.pop()

    def peek_last(self) -> MoveOperation | None:
        """Return the most recent entry without removing it."""
        with self._lock:
            return self._ops[-1] if self._ops else None

    @property
    def is_empty(self) -> bool:
        """True if there is nothing to undo."""
        with self._lock:
            return not self._ops

    def clear(self) -> None:
        """Drop all entries (called when the active folder changes)."""
        with self._lock:
            count = len(self._ops)
            self._ops.clear()
        if count:
            logger.debug("Undo log cleared ({} entries)", count)

    def discard(self, predicate: Callable[[MoveOperation], bool]) -> int:
        """Remove every entry matching `predicate`; return how many were removed."""
        with self._lock:
            kept = [op for op in self._ops if not predicate(op)]
            removed = len(self._ops) - len(kept)
            self._ops = kept
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._ops)
