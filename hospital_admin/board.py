"""Kanban board model — columns, drag/drop moves, reconciliation.

Pure data and functions only: nothing here touches Flask or the database,
so the move rules can be exercised without a request or a UI.

  build_board(tasks)                    — flat task list -> Board
  compute_new_board_state(board, move)  — apply one drop, return new Board
  DragController                        — start / over / drop lifecycle
  reconcile(before, after)              — placements that changed

Invariant: every task id sits in exactly one column, no duplicates.
Invalid drops (unknown column or task, dropping a card onto itself) are
ignored and hand back the same Board.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

PRIORITIES: Tuple[str, ...] = ("low", "medium", "high")
SIDES: Tuple[str, ...] = ("before", "after")

# (column id, display title). Column ids double as task status values.
DEFAULT_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("pending", "Pending"),
    ("in-progress", "In Progress"),
    ("completed", "Completed"),
)


class BoardError(ValueError):
    """Raised when task records cannot form a valid board."""


def _parse_due_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise BoardError(f"Invalid due date '{value}'.")


@dataclass(frozen=True)
class BoardTask:
    """A single card on the board."""

    id: str
    title: str
    column: str
    description: str = ""
    priority: str = "medium"
    category: str = ""
    due_date: Optional[date] = None
    assignee: str = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "BoardTask":
        """Validate a loosely-typed task record (dict or row-like mapping).

        Accepts ``status`` as an alias for ``column`` and ``dueDate`` for
        ``due_date``. Raises BoardError on missing or invalid fields.
        """
        task_id = record.get("id")
        if task_id is None or str(task_id).strip() == "":
            raise BoardError("Task id is required.")
        title = (record.get("title") or "").strip()
        if not title:
            raise BoardError(f"Task {task_id} has no title.")
        column = record.get("column") or record.get("status")
        if not column:
            raise BoardError(f"Task {task_id} has no column.")
        priority = record.get("priority") or "medium"
        if priority not in PRIORITIES:
            raise BoardError(
                f"Invalid priority '{priority}'. Must be one of: {', '.join(PRIORITIES)}"
            )
        due = record.get("due_date", record.get("dueDate"))
        return cls(
            id=str(task_id),
            title=title,
            column=str(column),
            description=record.get("description") or "",
            priority=priority,
            category=record.get("category") or "",
            due_date=_parse_due_date(due),
            assignee=record.get("assignee") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "column": self.column,
            "description": self.description,
            "priority": self.priority,
            "category": self.category,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "assignee": self.assignee,
        }


@dataclass(frozen=True)
class Column:
    id: str
    title: str
    task_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DropTarget:
    """Where a dragged card was released.

    ``over_task_id`` wins over ``index``; with neither, the card is
    appended to ``column_id``.
    """

    column_id: Optional[str] = None
    index: Optional[int] = None
    over_task_id: Optional[str] = None
    side: str = "before"


@dataclass(frozen=True)
class MoveEvent:
    task_id: str
    target: DropTarget


@dataclass(frozen=True)
class Placement:
    """Resulting column and position of one task after a move."""

    task_id: str
    column_id: str
    position: int


@dataclass(frozen=True)
class Board:
    columns: Tuple[Column, ...]
    tasks: Mapping[str, BoardTask] = field(default_factory=dict)

    def column(self, column_id: str) -> Optional[Column]:
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def locate(self, task_id: str) -> Optional[Tuple[str, int]]:
        """Return (column id, index) of a task, or None."""
        for col in self.columns:
            if task_id in col.task_ids:
                return col.id, col.task_ids.index(task_id)
        return None

    def as_mapping(self) -> Dict[str, List[str]]:
        return {col.id: list(col.task_ids) for col in self.columns}

    def flatten(self) -> List[BoardTask]:
        """Tasks in column order, then position order."""
        return [self.tasks[tid] for col in self.columns for tid in col.task_ids]

    def to_dict(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": col.id,
                "title": col.title,
                "tasks": [self.tasks[tid].to_dict() for tid in col.task_ids],
            }
            for col in self.columns
        ]


def build_board(
    tasks: Iterable[Any],
    columns: Iterable[Tuple[str, str]] = DEFAULT_COLUMNS,
) -> Board:
    """Group a flat task list (already in display order) into columns.

    Items may be BoardTask instances or mappings accepted by
    BoardTask.from_record.
    """
    columns = tuple(columns)
    buckets: Dict[str, List[str]] = {col_id: [] for col_id, _ in columns}
    by_id: Dict[str, BoardTask] = {}

    for item in tasks:
        task = item if isinstance(item, BoardTask) else BoardTask.from_record(item)
        if task.id in by_id:
            raise BoardError(f"Duplicate task id '{task.id}'.")
        if task.column not in buckets:
            raise BoardError(
                f"Task {task.id} is in unknown column '{task.column}'."
            )
        by_id[task.id] = task
        buckets[task.column].append(task.id)

    return Board(
        columns=tuple(
            Column(id=col_id, title=title, task_ids=tuple(buckets[col_id]))
            for col_id, title in columns
        ),
        tasks=by_id,
    )


def _resolve_destination(board: Board, move: MoveEvent) -> Optional[Tuple[str, int]]:
    """Work out (column id, insertion index) in the list *without* the source.

    Returns None when the drop target is invalid.
    """
    target = move.target
    source_col = board.locate(move.task_id)[0]

    if target.over_task_id is not None:
        if target.over_task_id == move.task_id:
            return None
        found = board.locate(target.over_task_id)
        if found is None:
            return None
        dest_id = found[0]
        remaining = [
            tid for tid in board.column(dest_id).task_ids if tid != move.task_id
        ]
        index = remaining.index(target.over_task_id)
        if target.side == "after":
            index += 1
        return dest_id, index

    if target.column_id is None:
        return None
    dest = board.column(target.column_id)
    if dest is None:
        return None
    length = len(dest.task_ids) - (1 if dest.id == source_col else 0)
    if target.index is None:
        return dest.id, length
    return dest.id, max(0, min(target.index, length))


def compute_new_board_state(board: Board, move: MoveEvent) -> Board:
    """Apply a single drop to ``board`` and return the resulting Board.

    The input is never mutated. When the drop is invalid, or the task
    would land where it already is, the same Board object is returned.
    """
    origin = board.locate(move.task_id)
    if origin is None:
        return board
    if move.target.side not in SIDES:
        return board

    destination = _resolve_destination(board, move)
    if destination is None:
        return board
    if destination == origin:
        return board

    source_id, _ = origin
    dest_id, index = destination

    new_columns = []
    for col in board.columns:
        ids = [tid for tid in col.task_ids if tid != move.task_id]
        if col.id == dest_id:
            ids.insert(index, move.task_id)
        new_columns.append(replace(col, task_ids=tuple(ids)))

    tasks = board.tasks
    if dest_id != source_id:
        tasks = dict(board.tasks)
        tasks[move.task_id] = replace(tasks[move.task_id], column=dest_id)

    return Board(columns=tuple(new_columns), tasks=tasks)


def reconcile(before: Board, after: Board) -> List[Placement]:
    """Return placements for every task whose column or index changed."""
    changed = []
    for col in after.columns:
        for position, task_id in enumerate(col.task_ids):
            if before.locate(task_id) != (col.id, position):
                changed.append(Placement(task_id, col.id, position))
    return changed


class DragController:
    """Tracks one drag gesture over a board.

    Mirrors the pointer lifecycle: ``start`` picks up a card, ``over``
    records the latest hover target, ``drop`` applies the move. The board
    only changes on drop.
    """

    def __init__(self, board: Board):
        self.board = board
        self.active_id: Optional[str] = None
        self.hover: Optional[DropTarget] = None

    @property
    def active_task(self) -> Optional[BoardTask]:
        if self.active_id is None:
            return None
        return self.board.tasks.get(self.active_id)

    def start(self, task_id: str) -> bool:
        if self.board.locate(task_id) is None:
            return False
        self.active_id = task_id
        self.hover = None
        return True

    def over(self, target: Optional[DropTarget]) -> None:
        if self.active_id is not None:
            self.hover = target

    def drop(self, target: Optional[DropTarget] = None) -> Board:
        target = target or self.hover
        task_id = self.active_id
        self.cancel()
        if task_id is None or target is None:
            return self.board
        self.board = compute_new_board_state(self.board, MoveEvent(task_id, target))
        return self.board

    def cancel(self) -> None:
        self.active_id = None
        self.hover = None
