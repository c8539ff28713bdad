"""Shared fixtures: photo folders with real tiny JPEGs, caches and tag stores in tmp_path."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from PIL import Image
import pytest

from lightcull.app.viewmodels.main_vm import MainVM
from lightcull.infrastructure.tag_service import TagStore
from lightcull.infrastructure.thumbnail_service import ThumbnailCache
from lightcull.infrastructure.trash_service import TrashService


class MemoryTagStore:
    """In-memory tag store with per-file failure injection.

    Files listed in `fail_on` reject every write, standing in for a file on
    a read-only or attribute-less filesystem.
    """

    def __init__(self) -> None:
        self.tags: dict[str, list[str]] = {}
        self.fail_on: set[str] = set()

    def add_tag(self, tag: str, path: Path) -> bool:
        key = str(path)
        if key in self.fail_on:
            return False
        tags = self.tags.setdefault(key, [])
        if tag not in tags:
            tags.append(tag)
        return True

    def remove_tag(self, tag: str, path: Path) -> bool:
        key = str(path)
        if key in self.fail_on:
            return False
        self.tags[key] = [t for t in self.tags.get(key, []) if t != tag]
        return True

    def has_tag(self, tag: str, path: Path) -> bool:
        return tag in self.tags.get(str(path), [])


def write_jpeg(path: Path, size: tuple[int, int] = (64, 48), color: str = "red") -> Path:
    """Write a real (tiny) JPEG to `path`."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, "JPEG")
    return path


def write_files(folder: Path, names: Iterable[str]) -> list[Path]:
    """Create `names` in `folder`: real JPEGs for .jpg/.jpeg, placeholder bytes otherwise."""
    folder.mkdir(parents=True, exist_ok=True)
    created = []
    for name in names:
        path = folder / name
        if path.suffix.lower() in (".jpg", ".jpeg"):
            write_jpeg(path)
        else:
            path.write_bytes(b"RAW" + name.encode("utf-8"))
        created.append(path)
    return created


@pytest.fixture(scope="session")
def make_files() -> Callable[[Path, Iterable[str]], list[Path]]:
    """Factory writing photo files into a folder (session scoped, safe under hypothesis)."""
    return write_files


@pytest.fixture(scope="session")
def make_jpeg() -> Callable[..., Path]:
    """Factory writing a single real JPEG."""
    return write_jpeg


@pytest.fixture
def folder(tmp_path: Path) -> Path:
    """An empty selected folder."""
    path = tmp_path / "shoot"
    path.mkdir()
    return path


@pytest.fixture
def shoot(folder: Path) -> Path:
    """Folder with two RAW pairs and one JPEG-only pair."""
    write_files(
        folder,
        ["DSCF0100.JPG", "DSCF0100.RAF", "DSCF0101.JPG", "DSCF0102.JPG", "DSCF0102.RAF"],
    )
    return folder


@pytest.fixture(scope="session")
def memory_tags_factory() -> Callable[[], MemoryTagStore]:
    """Factory for fresh in-memory tag stores (for hypothesis tests)."""
    return MemoryTagStore


@pytest.fixture
def memory_tags() -> MemoryTagStore:
    """Tag store that needs no filesystem support."""
    return MemoryTagStore()


@pytest.fixture
def tag_store(tmp_path: Path) -> TagStore:
    """Real xattr-backed tag store; skips where user attributes are unsupported."""
    store = TagStore()
    sample = tmp_path / "xattr-check"
    sample.write_bytes(b"")
    if not store.supported(sample):
        pytest.skip("filesystem does not support user extended attributes")
    return store


@pytest.fixture
def thumbs(tmp_path: Path) -> ThumbnailCache:
    """Thumbnail cache rooted in tmp_path."""
    return ThumbnailCache(cache_root=tmp_path / "cache", max_workers=2)


@pytest.fixture
def trash(tmp_path: Path) -> TrashService:
    """Trash service writing its audit logs into tmp_path."""
    return TrashService(log_dir=tmp_path / "delete_logs")


@pytest.fixture
def vm(memory_tags: MemoryTagStore, thumbs: ThumbnailCache, trash: TrashService) -> MainVM:
    """View-model over the in-memory tag store."""
    return MainVM(memory_tags, thumbs, trash=trash)
