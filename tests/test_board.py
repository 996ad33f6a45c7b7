"""Tests for the pure Kanban board model (hospital_admin.board).

Covers:
- build_board grouping and record validation
- Same-column and cross-column moves (over a task, by index, empty region)
- No-op and ignored drops return the same Board
- Every task stays in exactly one column across random move sequences
- reconcile() placements
- DragController lifecycle
"""

import random
from datetime import date

import pytest

from hospital_admin.board import (
    Board,
    BoardError,
    BoardTask,
    DragController,
    DropTarget,
    MoveEvent,
    build_board,
    compute_new_board_state,
    reconcile,
)

COLUMNS = (("todo", "To Do"), ("doing", "Doing"), ("done", "Done"))


def _board(layout):
    """layout: {"todo": ["T1", "T2"], ...} -> Board."""
    records = [
        {"id": tid, "title": f"Task {tid}", "column": col}
        for col, _ in COLUMNS
        for tid in layout.get(col, [])
    ]
    return build_board(records, COLUMNS)


def _move(board, task_id, **target):
    return compute_new_board_state(board, MoveEvent(task_id, DropTarget(**target)))


def _assert_partition(board, expected_ids):
    seen = [tid for col in board.columns for tid in col.task_ids]
    assert sorted(seen) == sorted(expected_ids)
    assert len(seen) == len(set(seen))
    for col in board.columns:
        for tid in col.task_ids:
            assert board.tasks[tid].column == col.id


class TestBuildBoard:

    def test_groups_tasks_in_given_order(self):
        board = _board({"todo": ["T1", "T2"], "doing": ["T3"]})
        assert board.as_mapping() == {"todo": ["T1", "T2"], "doing": ["T3"], "done": []}
        assert [t.id for t in board.flatten()] == ["T1", "T2", "T3"]

    def test_duplicate_id_rejected(self):
        with pytest.raises(BoardError):
            build_board(
                [{"id": "T1", "title": "a", "column": "todo"},
                 {"id": "T1", "title": "b", "column": "doing"}],
                COLUMNS,
            )

    def test_unknown_column_rejected(self):
        with pytest.raises(BoardError):
            build_board([{"id": "T1", "title": "a", "column": "nowhere"}], COLUMNS)

    def test_record_without_title_rejected(self):
        with pytest.raises(BoardError):
            BoardTask.from_record({"id": "T1", "title": "  ", "column": "todo"})

    def test_invalid_priority_rejected(self):
        with pytest.raises(BoardError):
            BoardTask.from_record({"id": "T1", "title": "a", "column": "todo", "priority": "urgent"})

    def test_record_aliases(self):
        task = BoardTask.from_record(
            {"id": 7, "title": "Audit", "status": "doing", "dueDate": "2026-01-05"}
        )
        assert task.id == "7"
        assert task.column == "doing"
        assert task.due_date == date(2026, 1, 5)
        assert task.priority == "medium"
        assert task.to_dict()["due_date"] == "2026-01-05"

    def test_bad_due_date_rejected(self):
        with pytest.raises(BoardError):
            BoardTask.from_record({"id": "T1", "title": "a", "column": "todo", "due_date": "soon"})


class TestMoves:

    def test_drop_into_empty_column_region(self):
        board = _board({"todo": ["T1", "T2"]})
        new = _move(board, "T1", column_id="doing")
        assert new.as_mapping()["todo"] == ["T2"]
        assert new.as_mapping()["doing"] == ["T1"]
        assert new.tasks["T1"].column == "doing"

    def test_drag_before_first_in_same_column(self):
        board = _board({"todo": ["T1", "T2", "T3"]})
        new = _move(board, "T3", over_task_id="T1", side="before")
        assert new.as_mapping()["todo"] == ["T3", "T1", "T2"]
        assert new.tasks["T3"].column == "todo"

    def test_drag_after_last_in_same_column(self):
        board = _board({"todo": ["T1", "T2", "T3"]})
        new = _move(board, "T1", over_task_id="T3", side="after")
        assert new.as_mapping()["todo"] == ["T2", "T3", "T1"]

    def test_drag_over_task_in_other_column(self):
        board = _board({"todo": ["T1", "T2"], "doing": ["T3"]})
        new = _move(board, "T1", over_task_id="T3", side="before")
        assert new.as_mapping()["todo"] == ["T2"]
        assert new.as_mapping()["doing"] == ["T1", "T3"]
        assert new.tasks["T1"].column == "doing"

    def test_drop_by_index_clamped(self):
        board = _board({"todo": ["T1"], "doing": ["T2", "T3"]})
        assert _move(board, "T1", column_id="doing", index=1).as_mapping()["doing"] == ["T2", "T1", "T3"]
        assert _move(board, "T1", column_id="doing", index=99).as_mapping()["doing"] == ["T2", "T3", "T1"]
        assert _move(board, "T1", column_id="doing", index=-4).as_mapping()["doing"] == ["T1", "T2", "T3"]

    def test_over_task_wins_over_index(self):
        board = _board({"todo": ["T1", "T2", "T3"]})
        new = _move(board, "T3", column_id="todo", index=2, over_task_id="T1")
        assert new.as_mapping()["todo"] == ["T3", "T1", "T2"]

    def test_input_board_not_mutated(self):
        board = _board({"todo": ["T1", "T2"]})
        _move(board, "T1", column_id="doing")
        assert board.as_mapping()["todo"] == ["T1", "T2"]
        assert board.tasks["T1"].column == "todo"


class TestNoOpsAndIgnoredDrops:

    def test_same_position_returns_same_board(self):
        board = _board({"todo": ["T1", "T2", "T3"]})
        assert _move(board, "T1", over_task_id="T2", side="before") is board
        assert _move(board, "T2", column_id="todo", index=1) is board
        assert _move(board, "T3", column_id="todo") is board

    def test_drop_on_itself_ignored(self):
        board = _board({"todo": ["T1", "T2"]})
        assert _move(board, "T1", over_task_id="T1") is board

    def test_unknown_column_ignored(self):
        board = _board({"todo": ["T1"]})
        assert _move(board, "T1", column_id="archive") is board

    def test_unknown_over_task_ignored(self):
        board = _board({"todo": ["T1"]})
        assert _move(board, "T1", over_task_id="T99") is board

    def test_unknown_dragged_task_ignored(self):
        board = _board({"todo": ["T1"]})
        assert _move(board, "T99", column_id="doing") is board

    def test_empty_target_ignored(self):
        board = _board({"todo": ["T1"]})
        assert _move(board, "T1") is board

    def test_unknown_side_ignored(self):
        board = _board({"todo": ["T1", "T2"]})
        assert _move(board, "T1", over_task_id="T2", side="middle") is board


class TestInvariants:

    def test_random_moves_keep_every_task_in_one_column(self):
        ids = [f"T{i}" for i in range(1, 9)]
        board = _board({"todo": ids[:4], "doing": ids[4:6], "done": ids[6:]})
        rng = random.Random(20261019)
        columns = [c for c, _ in COLUMNS] + ["ghost"]

        for _ in range(300):
            task_id = rng.choice(ids + ["T404"])
            choice = rng.random()
            if choice < 0.4:
                target = DropTarget(
                    over_task_id=rng.choice(ids),
                    side=rng.choice(["before", "after"]),
                )
            elif choice < 0.8:
                target = DropTarget(
                    column_id=rng.choice(columns),
                    index=rng.randint(-2, 10),
                )
            else:
                target = DropTarget(column_id=rng.choice(columns))
            board = compute_new_board_state(board, MoveEvent(task_id, target))
            _assert_partition(board, ids)

    def test_repeating_a_move_is_idempotent(self):
        board = _board({"todo": ["T1", "T2"], "doing": ["T3"]})
        target = DropTarget(over_task_id="T3", side="after")
        once = compute_new_board_state(board, MoveEvent("T1", target))
        twice = compute_new_board_state(once, MoveEvent("T1", target))
        assert twice is once


class TestReconcile:

    def test_cross_column_placements(self):
        before = _board({"todo": ["T1", "T2"]})
        after = _move(before, "T1", column_id="doing")
        placements = {(p.task_id, p.column_id, p.position) for p in reconcile(before, after)}
        assert placements == {("T2", "todo", 0), ("T1", "doing", 0)}

    def test_reorder_placements(self):
        before = _board({"todo": ["T1", "T2", "T3"], "doing": ["T4"]})
        after = _move(before, "T3", over_task_id="T1")
        placements = [(p.task_id, p.position) for p in reconcile(before, after)]
        assert placements == [("T3", 0), ("T1", 1), ("T2", 2)]

    def test_no_changes(self):
        board = _board({"todo": ["T1"]})
        assert reconcile(board, board) == []


class TestDragController:

    def test_full_gesture(self):
        controller = DragController(_board({"todo": ["T1", "T2"]}))
        assert controller.start("T1") is True
        assert controller.active_task.title == "Task T1"
        controller.over(DropTarget(column_id="done"))
        board = controller.drop()
        assert board.as_mapping()["done"] == ["T1"]
        assert controller.board is board
        assert controller.active_id is None

    def test_explicit_drop_target_overrides_hover(self):
        controller = DragController(_board({"todo": ["T1", "T2"]}))
        controller.start("T2")
        controller.over(DropTarget(column_id="done"))
        board = controller.drop(DropTarget(over_task_id="T1"))
        assert board.as_mapping()["todo"] == ["T2", "T1"]
        assert board.as_mapping()["done"] == []

    def test_start_unknown_task(self):
        controller = DragController(_board({"todo": ["T1"]}))
        assert controller.start("T9") is False
        assert controller.active_task is None

    def test_cancel_leaves_board(self):
        original = _board({"todo": ["T1", "T2"]})
        controller = DragController(original)
        controller.start("T1")
        controller.over(DropTarget(column_id="doing"))
        controller.cancel()
        assert controller.drop() is original

    def test_drop_without_hover_is_noop(self):
        original = _board({"todo": ["T1"]})
        controller = DragController(original)
        controller.start("T1")
        assert controller.drop() is original

    def test_over_ignored_when_not_dragging(self):
        controller = DragController(_board({"todo": ["T1"]}))
        controller.over(DropTarget(column_id="doing"))
        assert controller.hover is None

    def test_board_to_dict_shape(self):
        board = _board({"doing": ["T1"]})
        data = board.to_dict()
        assert [c["id"] for c in data] == ["todo", "doing", "done"]
        assert data[1]["tasks"][0]["id"] == "T1"
        assert isinstance(board, Board)
