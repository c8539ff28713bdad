"""
Fixed names and thresholds shared by the scanning, move and cache services.

Folder names and extensions are part of the on-disk layout; changing them
breaks folders culled by earlier sessions.
"""

from __future__ import annotations

# Pairing
JPEG_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg"})
RAW_EXTENSION: str = "RAF"  # exact case, matched as "<base>.RAF"

# Tagging
TOP_TAG: str = "TOP"

# Destination subfolders under the selected folder
DELETE_FOLDER: str = "_toDelete"
ARCHIVE_FOLDER: str = "_Archive"
OUTTAKES_FOLDER: str = "_Outtakes"

# Thumbnail cache: <cache-root>/LightCull/current/
CACHE_APP_FOLDER: str = "LightCull"
CACHE_CURRENT_FOLDER: str = "current"
THUMBNAIL_SIZE: int = 200  # long edge in pixels
THUMBNAIL_QUALITY: int = 80  # Pillow JPEG quality (0.8 on a 0..1 scale)
THUMBNAIL_MAX_WORKERS: int = 8
