"""EXIF and file information for the metadata panel.

Best effort throughout: a file without EXIF (or one Pillow cannot parse)
still yields its name and size; only a missing file yields None.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from PIL import Image
from loguru import logger

from lightcull.core.models import ImageMetadata
from lightcull.infrastructure.utils import format_file_size

# EXIF tag ids
_MAKE = 271
_MODEL = 272
_EXIF_IFD = 0x8769
_EXPOSURE_TIME = 33434
_F_NUMBER = 33437
_ISO = 34855
_FOCAL_LENGTH = 37386


def _as_float(value: Any) -> float | None:
    """Convert an EXIF rational/number (or 1-tuple of one) to float."""
    if isinstance(value, (tuple, list)):
        value = value[0] if value else None
    try:
        result = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    return result if result == result else None  # NaN from 0/0 rationals


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    text = str(value).strip().strip("\x00").strip()
    return text or None


def format_focal_length(value: Any) -> str | None:
    """`"23.0 mm"`."""
    f = _as_float(value)
    return f"{f:.1f} mm" if f is not None else None


def format_aperture(value: Any) -> str | None:
    """`"f/2.8"`."""
    f = _as_float(value)
    return f"f/{f:.1f}" if f is not None else None


def format_shutter_speed(value: Any) -> str | None:
    """`"1/250s"` below one second, `"2.5s"` otherwise."""
    t = _as_float(value)
    if t is None or t <= 0:
        return None
    if t >= 1.0:
        return f"{t:.1f}s"
    return f"1/{int(round(1.0 / t))}s"


def format_iso(value: Any) -> str | None:
    """`"ISO 400"`."""
    f = _as_float(value)
    return f"ISO {int(f)}" if f is not None else None


class MetadataService:
    """Reads display metadata for an image file."""

    def extract(self, path: str | Path) -> ImageMetadata | None:
        """Return metadata for `path`, or None if the file does not exist."""
        path = Path(path)
        try:
            size = os.path.getsize(path)
        except OSError as ex:
            logger.debug("Metadata unavailable for {}: {}", path, ex)
            return None

        base = ImageMetadata(file_name=path.name, file_size=format_file_size(size))
        try:
            with Image.open(path) as im:
                exif = im.getexif()
                if not exif:
                    return base
                sub = exif.get_ifd(_EXIF_IFD)
                return ImageMetadata(
                    file_name=base.file_name,
                    file_size=base.file_size,
                    camera_make=_as_text(exif.get(_MAKE)),
                    camera_model=_as_text(exif.get(_MODEL)),
                    focal_length=format_focal_length(sub.get(_FOCAL_LENGTH)),
                    aperture=format_aperture(sub.get(_F_NUMBER)),
                    shutter_speed=format_shutter_speed(sub.get(_EXPOSURE_TIME)),
                    iso=format_iso(sub.get(_ISO)),
                )
        except (OSError, ValueError, SyntaxError) as ex:
            logger.debug("EXIF read failed for {}: {}", path, ex)
            return base
