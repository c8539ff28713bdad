"""Natural filename ordering for scanned image files.

Digit runs compare by numeric value and letters compare case-insensitively,
so `IMG_2.jpg` sorts before `IMG_10.jpg` the way a file browser shows them.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import re
from typing import Any

_DIGITS = re.compile(r"(\d+)")


def natural_sort_key(name: str) -> tuple[Any, ...]:
    """Return a sort key for `name` that orders digit runs numerically.

    Text chunks are case folded. The untouched name is appended as a final
    tie-breaker so names differing only in case or zero padding keep a
    stable, total order.
    """
    parts: list[tuple[int, Any]] = []
    for chunk in _DIGITS.split(name):
        if not chunk:
            continue
        if chunk.isdecimal():
            # (0, n) sorts numbers ahead of text at the same position
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk.casefold()))
    return (tuple(parts), name)


class SortService:
    """Provides natural ordering for paths and pairs."""

    def sort_paths(self, paths: Iterable[Path]) -> list[Path]:
        """Return `paths` sorted by natural order of their file names."""
        return sorted(paths, key=lambda p: natural_sort_key(p.name))

    def sort_names(self, names: Iterable[str]) -> list[str]:
        """Return `names` in natural order."""
        return sorted(names, key=natural_sort_key)
