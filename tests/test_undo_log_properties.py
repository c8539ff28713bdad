"""LIFO behaviour of the undo history."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from hypothesis import given
from hypothesis import strategies as st

from lightcull.core.models import MoveOperation
from lightcull.core.services.undo_log import UndoLog


def _op(name: str, destination: str = "_toDelete") -> MoveOperation:
    return MoveOperation(
        original_jpeg_path=Path("/shoot") / name,
        moved_jpeg_path=Path("/shoot") / destination / name,
        original_raw_path=None,
        moved_raw_path=None,
        timestamp=datetime(2024, 5, 1, 12, 0),
        destination_folder_name=destination,
    )


# True pushes a new entry, False pops one
@given(actions=st.lists(st.booleans(), max_size=40))
def test_behaves_like_a_stack(actions):
    log = UndoLog()
    model: list[MoveOperation] = []
    for i, push in enumerate(actions):
        if push:
            op = _op(f"F{i}.JPG")
            log.push(op)
            model.append(op)
        else:
            assert log.pop_last() == (model.pop() if model else None)
        assert len(log) == len(model)
        assert log.is_empty == (not model)
        assert log.peek_last() == (model[-1] if model else None)


def test_pop_on_empty_returns_none():
    log = UndoLog()

    assert log.pop_last() is None
    assert log.is_empty


def test_clear_drops_everything():
    log = UndoLog()
    log.push(_op("A.JPG"))
    log.push(_op("B.JPG"))

    log.clear()

    assert len(log) == 0


def test_discard_keeps_order_of_remaining_entries():
    log = UndoLog()
    log.push(_op("A.JPG", "_toDelete"))
    log.push(_op("B.JPG", "_Archive"))
    log.push(_op("C.JPG", "_toDelete"))
    log.push(_op("D.JPG", "_Outtakes"))

    removed = log.discard(lambda op: op.destination_folder_name == "_toDelete")

    assert removed == 2
    assert log.pop_last().original_jpeg_path.name == "D.JPG"
    assert log.pop_last().original_jpeg_path.name == "B.JPG"
    assert log.is_empty
