"""File tags stored as extended attributes.

Tags live in the `user.xdg.tags` attribute as a comma-separated UTF-8 list,
the convention file managers on Linux read and write. Every call goes to
disk; nothing is cached, so tags edited in a file manager are picked up
immediately.
"""

from __future__ import annotations

import errno
import os
from pathlib import Path

from loguru import logger

TAGS_ATTRIBUTE = "user.xdg.tags"

# errno values meaning "this file simply has no tags"
_NO_ATTRIBUTE = {getattr(errno, "ENODATA", errno.ENOENT), getattr(errno, "ENOATTR", -1)}


def _xattr_available() -> bool:
    return all(hasattr(os, fn) for fn in ("getxattr", "setxattr", "removexattr"))


class TagStore:
    """Reads and writes named markers such as `TOP` on single files."""

    def __init__(self, attribute: str = TAGS_ATTRIBUTE) -> None:
        self._attribute = attribute
        if not _xattr_available():
            logger.warning("Extended attributes not supported on this platform; tags disabled")

    # Public API
    def add_tag(self, tag: str, path: Path) -> bool:
        """Add `tag` to `path`. Already present counts as success."""
        current = self.get_tags(path)
        tags = list(current) if current is not None else []
        if tag in tags:
            return True
        tags.append(tag)
        return self._set_tags(path, tags)

    def remove_tag(self, tag: str, path: Path) -> bool:
        """Remove `tag` from `path`. An absent tag or unreadable tags count as success."""
        current = self.get_tags(path)
        if current is None or tag not in current:
            return True
        return self._set_tags(path, [t for t in current if t != tag])

    def has_tag(self, tag: str, path: Path) -> bool:
        """True if `path` carries `tag` (case-sensitive). Unreadable means False."""
        tags = self.get_tags(path)
        return tags is not None and tag in tags

    def get_tags(self, path: Path) -> list[str] | None:
        """Return the tag list of `path`, `[]` if it has none, or None if unreadable."""
        if not _xattr_available():
            return None
        try:
            raw = os.getxattr(path, self._attribute)
        except OSError as ex:
            if ex.errno in _NO_ATTRIBUTE:
                return []
            logger.error("Error reading tags from {}: {}", Path(path).name, ex)
            return None
        return self._decode(raw)

    def supported(self, path: Path) -> bool:
        """Probe whether the filesystem holding `path` accepts user attributes."""
        if not _xattr_available():
            return False
        probe = "user.lightcull.probe"
        try:
            os.setxattr(path, probe, b"1")
            os.removexattr(path, probe)
            return True
        except OSError:
            return False

    # Internal helpers
    def _set_tags(self, path: Path, tags: list[str]) -> bool:
        """Write the complete tag list, removing the attribute when it is empty."""
        if not _xattr_available():
            return False
        try:
            if tags:
                os.setxattr(path, self._attribute, self._encode(tags))
            else:
                try:
                    os.removexattr(path, self._attribute)
                except OSError as ex:
                    if ex.errno not in _NO_ATTRIBUTE:
                        raise
            logger.info("Tags written to {}: {}", Path(path).name, tags)
            return True
        except OSError as ex:
            logger.error("Error writing tags to {}: {}", Path(path).name, ex)
            return False

    @staticmethod
    def _decode(raw: bytes) -> list[str]:
        text = raw.decode("utf-8", errors="replace").strip("\x00")
        return [t for t in (part.strip() for part in text.split(",")) if t]

    @staticmethod
    def _encode(tags: list[str]) -> bytes:
        return ",".join(tags).encode("utf-8")
