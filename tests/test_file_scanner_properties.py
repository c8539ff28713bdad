"""Properties of folder scanning: pairing, ordering and statistics."""

from __future__ import annotations

from pathlib import Path
import tempfile

from hypothesis import given, settings
from hypothesis import strategies as st
import pytest

from lightcull.core.errors import FolderReadError
from lightcull.core.services.sort_service import SortService, natural_sort_key
from lightcull.infrastructure.file_scanner import (
    PairScanner,
    is_jpeg_name,
    is_raw_name,
    raw_sibling_name,
)

# Maps a frame number to whether the JPEG has a RAW sibling
frames_strategy = st.dictionaries(
    keys=st.integers(min_value=0, max_value=99999), values=st.booleans(), max_size=25
)
orphans_strategy = st.sets(st.integers(min_value=100000, max_value=199999), max_size=5)


@settings(max_examples=30, deadline=None)
@given(frames=frames_strategy, orphans=orphans_strategy)
def test_pairing_counts_match_folder_contents(make_files, memory_tags_factory, frames, orphans):
    """N JPEGs with M RAW siblings give N pairs, M with a RAW; orphan RAWs give none."""
    names = []
    for n, has_raw in frames.items():
        names.append(f"IMG_{n}.JPG")
        if has_raw:
            names.append(f"IMG_{n}.RAF")
    names += [f"ORPHAN_{n}.RAF" for n in orphans]

    with tempfile.TemporaryDirectory() as tmp:
        folder = Path(tmp)
        make_files(folder, names)
        pairs = PairScanner(memory_tags_factory()).scan(folder)

        assert len(pairs) == len(frames)
        assert sum(1 for p in pairs if p.has_raw) == sum(frames.values())
        for pair in pairs:
            assert pair.jpeg_path.suffix == ".JPG"
            if pair.raw_path is not None:
                assert pair.raw_path.stem == pair.jpeg_path.stem
                assert pair.raw_path.exists()


@settings(max_examples=30, deadline=None)
@given(
    numbers=st.lists(
        st.integers(min_value=0, max_value=10**6), min_size=1, max_size=20, unique=True
    )
)
def test_scan_orders_numbers_numerically(make_files, memory_tags_factory, numbers):
    with tempfile.TemporaryDirectory() as tmp:
        folder = Path(tmp)
        make_files(folder, [f"IMG_{n}.jpg" for n in numbers])
        pairs = PairScanner(memory_tags_factory()).scan(folder)

    assert [p.file_name for p in pairs] == [f"IMG_{n}.jpg" for n in sorted(numbers)]


def test_natural_order_example(folder, make_files, memory_tags):
    make_files(folder, ["IMG_10.jpg", "IMG_2.jpg", "IMG_1.jpg"])

    pairs = PairScanner(memory_tags).scan(folder)

    assert [p.file_name for p in pairs] == ["IMG_1.jpg", "IMG_2.jpg", "IMG_10.jpg"]


@given(names=st.lists(st.text(alphabet="abcXYZ019_", min_size=1, max_size=8), max_size=15))
def test_natural_sort_is_total_and_stable(names):
    once = SortService().sort_names(names)
    assert sorted(once, key=natural_sort_key) == once
    assert sorted(once) == sorted(names)


def test_natural_sort_ignores_case():
    assert SortService().sort_names(["b.jpg", "A1.jpg", "a10.jpg", "a2.jpg"]) == [
        "A1.jpg",
        "a2.jpg",
        "a10.jpg",
        "b.jpg",
    ]


def test_jpeg_extension_any_case_raw_exact_case():
    assert is_jpeg_name("x.JPG") and is_jpeg_name("x.jpeg") and is_jpeg_name("x.JpEg")
    assert not is_jpeg_name("x.png")
    assert is_raw_name("x.RAF")
    assert not is_raw_name("x.raf")
    assert raw_sibling_name("DSCF0001.jpeg") == "DSCF0001.RAF"


def test_lowercase_raw_is_not_paired(folder, make_files, memory_tags):
    make_files(folder, ["DSCF0001.JPG", "DSCF0001.raf"])

    (pair,) = PairScanner(memory_tags).scan(folder)

    assert pair.raw_path is None


def test_hidden_files_and_subfolders_are_ignored(folder, make_files, memory_tags):
    make_files(folder, ["A.JPG", ".B.JPG", "._A.JPG"])
    make_files(folder / "_toDelete", ["C.JPG"])
    make_files(folder / "nested.jpg", ["D.JPG"])

    pairs = PairScanner(memory_tags).scan(folder)

    assert [p.file_name for p in pairs] == ["A.JPG"]


def test_scan_reads_top_tag_from_jpeg(shoot, memory_tags):
    memory_tags.add_tag("TOP", shoot / "DSCF0101.JPG")

    pairs = PairScanner(memory_tags).scan(shoot)

    assert [p.has_top_tag for p in pairs] == [False, True, False]


def test_empty_folder_gives_no_pairs(folder, memory_tags):
    assert PairScanner(memory_tags).scan(folder) == []


def test_missing_folder_raises_folder_read_error(tmp_path, memory_tags):
    missing = tmp_path / "nope"

    with pytest.raises(FolderReadError) as info:
        PairScanner(memory_tags).scan(missing)

    assert info.value.folder == missing
    assert isinstance(info.value.cause, OSError)


def test_file_instead_of_folder_raises_folder_read_error(tmp_path, memory_tags):
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x")

    with pytest.raises(FolderReadError):
        PairScanner(memory_tags).scan(not_a_dir)


def test_statistics_counts_pairs_and_delete_folder(folder, make_files, memory_tags):
    make_files(
        folder,
        ["A.JPG", "A.RAF", "B.JPG", "B.RAF", "C.JPG", "C.RAF", "D.JPG", "E.JPG"],
    )
    make_files(folder / "_toDelete", ["X.JPG", "X.RAF"])
    memory_tags.add_tag("TOP", folder / "A.JPG")

    stats = PairScanner(memory_tags).compute_statistics(folder)

    assert stats.jpeg_with_raw == 3
    assert stats.jpeg_without_raw == 2
    assert stats.deleted_files == 2
    assert stats.raw_files == 3
    assert stats.total_files == 8
    assert stats.total_pairs == 5
    assert stats.tagged_pairs == 1


def test_statistics_for_unreadable_folder_are_zero(tmp_path, memory_tags):
    stats = PairScanner(memory_tags).compute_statistics(tmp_path / "missing")

    assert stats.total_files == 0
    assert stats.total_pairs == 0
    assert stats.deleted_files == 0
