"""Pair moves: atomicity, collision guard and undo."""

from __future__ import annotations

from pathlib import Path
import tempfile

from hypothesis import given, settings
from hypothesis import strategies as st
import pytest

from lightcull.core.constants import ARCHIVE_FOLDER, DELETE_FOLDER, OUTTAKES_FOLDER
from lightcull.core.models import ImagePair
from lightcull.infrastructure import move_service as move_module
from lightcull.infrastructure.move_service import MoveService


@pytest.fixture
def pair(shoot) -> ImagePair:
    return ImagePair(shoot / "DSCF0100.JPG", shoot / "DSCF0100.RAF")


def _fail_on_raw(monkeypatch):
    """Make moving any .RAF file fail while JPEG moves still work."""
    real = move_module.move_file

    def flaky(source: Path, destination: Path) -> bool:
        if Path(source).suffix == ".RAF":
            return False
        return real(source, destination)

    monkeypatch.setattr(move_module, "move_file", flaky)


@pytest.mark.parametrize(
    "method, destination",
    [
        ("delete_pair", DELETE_FOLDER),
        ("archive_pair", ARCHIVE_FOLDER),
        ("outtake_pair", OUTTAKES_FOLDER),
    ],
)
def test_move_relocates_both_files(shoot, pair, method, destination):
    op = getattr(MoveService(), method)(pair, shoot)

    assert op is not None
    assert op.destination_folder_name == destination
    assert op.moved_jpeg_path == shoot / destination / "DSCF0100.JPG"
    assert op.moved_raw_path == shoot / destination / "DSCF0100.RAF"
    assert op.moved_jpeg_path.exists() and op.moved_raw_path.exists()
    assert not pair.jpeg_path.exists() and not pair.raw_path.exists()


def test_move_jpeg_only_pair(shoot):
    lone = ImagePair(shoot / "DSCF0101.JPG")

    op = MoveService().delete_pair(lone, shoot)

    assert op is not None
    assert op.original_raw_path is None and op.moved_raw_path is None
    assert (shoot / DELETE_FOLDER / "DSCF0101.JPG").exists()


def test_raw_failure_puts_jpeg_back(shoot, pair, monkeypatch):
    _fail_on_raw(monkeypatch)

    assert MoveService().delete_pair(pair, shoot) is None
    assert pair.jpeg_path.exists()
    assert pair.raw_path.exists()
    assert not (shoot / DELETE_FOLDER / "DSCF0100.JPG").exists()


def test_occupied_raw_target_leaves_jpeg_at_original_path(shoot, pair, make_files):
    make_files(shoot / DELETE_FOLDER, ["DSCF0100.RAF"])

    assert MoveService().delete_pair(pair, shoot) is None
    assert pair.jpeg_path.exists()
    assert not (shoot / DELETE_FOLDER / "DSCF0100.JPG").exists()


def test_occupied_jpeg_target_moves_nothing(shoot, pair, make_files):
    (blocker,) = make_files(shoot / DELETE_FOLDER, ["DSCF0100.JPG"])
    before = blocker.read_bytes()

    assert MoveService().delete_pair(pair, shoot) is None
    assert pair.jpeg_path.exists() and pair.raw_path.exists()
    assert not (shoot / DELETE_FOLDER / "DSCF0100.RAF").exists()
    assert blocker.read_bytes() == before


def test_file_in_place_of_destination_folder_moves_nothing(shoot, pair):
    (shoot / DELETE_FOLDER).write_bytes(b"not a folder")

    assert MoveService().delete_pair(pair, shoot) is None
    assert pair.jpeg_path.exists() and pair.raw_path.exists()
    assert (shoot / DELETE_FOLDER).is_file()


def test_failed_rollback_reports_failure(shoot, pair, monkeypatch):
    real = move_module.move_file

    def stuck(source: Path, destination: Path) -> bool:
        # RAW never moves and nothing leaves the destination folder again
        if Path(source).suffix == ".RAF" or Path(source).parent.name == DELETE_FOLDER:
            return False
        return real(source, destination)

    monkeypatch.setattr(move_module, "move_file", stuck)

    assert MoveService().delete_pair(pair, shoot) is None
    assert (shoot / DELETE_FOLDER / "DSCF0100.JPG").exists()
    assert pair.raw_path.exists()


def test_undo_restores_exact_paths(shoot, pair):
    mover = MoveService()
    op = mover.delete_pair(pair, shoot)

    assert mover.undo_move(op)
    assert pair.jpeg_path.exists() and pair.raw_path.exists()
    assert not op.moved_jpeg_path.exists() and not op.moved_raw_path.exists()


def test_undo_refuses_when_original_is_occupied(shoot, pair, make_files):
    mover = MoveService()
    op = mover.delete_pair(pair, shoot)
    make_files(shoot, ["DSCF0100.JPG"])

    assert not mover.undo_move(op)
    assert op.moved_jpeg_path.exists() and op.moved_raw_path.exists()


def test_undo_raw_failure_returns_jpeg_to_destination(shoot, pair, monkeypatch):
    mover = MoveService()
    op = mover.delete_pair(pair, shoot)
    _fail_on_raw(monkeypatch)

    assert not mover.undo_move(op)
    assert op.moved_jpeg_path.exists() and op.moved_raw_path.exists()
    assert not pair.jpeg_path.exists()


def test_thumbnail_follows_move_and_undo(shoot, pair, thumbs):
    thumbs.generate(pair.jpeg_path)
    mover = MoveService(thumbs)

    op = mover.delete_pair(pair, shoot)
    assert (thumbs.deleted_directory() / "DSCF0100.JPG").exists()
    assert not thumbs.thumbnail_path_for(pair.jpeg_path).exists()

    assert mover.undo_move(op)
    assert thumbs.thumbnail_path_for(pair.jpeg_path).exists()


def test_thumbnail_failure_does_not_fail_the_move(shoot, pair, thumbs, monkeypatch):
    monkeypatch.setattr(thumbs, "move_to_deleted_folder", lambda path: False)

    assert MoveService(thumbs).delete_pair(pair, shoot) is not None


@settings(max_examples=20, deadline=None)
@given(
    layout=st.lists(st.booleans(), min_size=1, max_size=6),
    destination=st.sampled_from([DELETE_FOLDER, ARCHIVE_FOLDER, OUTTAKES_FOLDER]),
)
def test_move_then_undo_is_identity(make_files, layout, destination):
    """Whatever the pairing, a move followed by its undo restores the folder listing."""
    with tempfile.TemporaryDirectory() as tmp:
        folder = Path(tmp)
        names = []
        for i, has_raw in enumerate(layout):
            names.append(f"F{i}.JPG")
            if has_raw:
                names.append(f"F{i}.RAF")
        make_files(folder, names)
        before = sorted(p.name for p in folder.iterdir())
        mover = MoveService()

        ops = []
        for i, has_raw in enumerate(layout):
            pair = ImagePair(folder / f"F{i}.JPG", folder / f"F{i}.RAF" if has_raw else None)
            ops.append(mover.move_pair(pair, folder, destination))
        assert all(op is not None for op in ops)

        for op in reversed(ops):
            assert mover.undo_move(op)

        after = sorted(p.name for p in folder.iterdir() if p.is_file())
        assert after == before
