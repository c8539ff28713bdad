"""Selection rules for moving through a pair list.

Kept free of any UI toolkit so the coordinator and tests share the same
behavior: which pair becomes current after a removal, and stepping
forwards/backwards through the list.
"""

from __future__ import annotations

from collections.abc import Sequence

from lightcull.core.models import ImagePair


class SelectionService:
    """Pure helpers that pick a pair from a list by identity or position."""

    def index_of(self, pairs: Sequence[ImagePair], pair: ImagePair | None) -> int | None:
        """Index of `pair` in `pairs` by pairing identity, or None."""
        if pair is None:
            return None
        for i, candidate in enumerate(pairs):
            if candidate == pair:
                return i
        return None

    def after_removal(
        self, pairs: Sequence[ImagePair], removed_index: int | None
    ) -> ImagePair | None:
        """Pair to select after the pair at `removed_index` left the list.

        The pair that slid into the removed slot wins; if the removed pair
        was last, the new last pair is chosen. Without an index, the first.
        """
        if not pairs:
            return None
        if removed_index is None:
            return pairs[0]
        if removed_index >= len(pairs):
            return pairs[-1]
        return pairs[max(0, removed_index)]

    def next(self, pairs: Sequence[ImagePair], current: ImagePair | None) -> ImagePair | None:
        """Pair after `current`; stays on `current` at the end of the list."""
        idx = self.index_of(pairs, current)
        if idx is None:
            return pairs[0] if pairs else None
        return pairs[min(idx + 1, len(pairs) - 1)]

    def previous(self, pairs: Sequence[ImagePair], current: ImagePair | None) -> ImagePair | None:
        """Pair before `current`; stays on `current` at the start of the list."""
        idx = self.index_of(pairs, current)
        if idx is None:
            return pairs[0] if pairs else None
        return pairs[max(idx - 1, 0)]

    def remap(self, pairs: Sequence[ImagePair], current: ImagePair | None) -> ImagePair | None:
        """Return the instance in `pairs` equal to `current` (fresh tag/thumbnail state)."""
        idx = self.index_of(pairs, current)
        return pairs[idx] if idx is not None else None
