"""Task service — CRUD, Kanban moves, overdue/upcoming queries.

Moves go through the pure board model (hospital_admin.board): the current
rows are loaded into a Board, the drop is applied, and every row whose
column or position no longer matches the new Board is written back.
Invalid drop targets leave the board (and the database) untouched.

Functions flush but do NOT commit — the caller commits.
"""

import logging
from datetime import date, datetime, timedelta, timezone

from hospital_admin.board import (
    SIDES,
    DropTarget,
    MoveEvent,
    build_board,
    compute_new_board_state,
    reconcile,
)
from hospital_admin.errors import RecordNotFound
from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.permit import Permit
from hospital_admin.models.task import Task
from hospital_admin.services.validation import check_choice, parse_date, sanitize

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title",
    "description",
    "priority",
    "category",
    "due_date",
    "assignee",
    "notes",
    "permit_id",
)


def _ordered_tasks():
    return Task.query.order_by(Task.position, Task.created_at, Task.id).all()


def _get_task(task_id):
    task = db.session.get(Task, task_id)
    if task is None:
        raise RecordNotFound("Task", task_id)
    return task


def _next_position(status):
    max_pos = (
        db.session.query(db.func.max(Task.position))
        .filter(Task.status == status)
        .scalar()
    )
    return 0 if max_pos is None else max_pos + 1


def _clean_field(name, value):
    if name == "title":
        value = sanitize(value)
        if not value:
            raise ValueError("Title is required.")
        return value
    if name == "priority":
        return check_choice(value or "medium", Task.PRIORITIES, "priority")
    if name == "due_date":
        return parse_date(value, "due date")
    if name == "permit_id":
        if value and db.session.get(Permit, value) is None:
            raise RecordNotFound("Permit", value)
        return value or None
    return sanitize(value) or None


def _set_completed_at(task, new_status, now):
    if new_status == "completed" and task.status != "completed":
        task.completed_at = now
    elif new_status != "completed":
        task.completed_at = None


def get_board(tasks=None):
    """Build the Board from the current rows."""
    if tasks is None:
        tasks = _ordered_tasks()
    return build_board(t.board_record() for t in tasks)


def list_tasks(status=None, priority=None, assignee=None, permit_id=None, query=None):
    q = Task.query
    if status:
        q = q.filter(Task.status == status)
    if priority:
        q = q.filter(Task.priority == priority)
    if assignee:
        q = q.filter(Task.assignee == assignee)
    if permit_id:
        q = q.filter(Task.permit_id == permit_id)
    if query:
        like = f"%{query}%"
        q = q.filter(db.or_(Task.title.ilike(like), Task.description.ilike(like)))
    return q.order_by(Task.status, Task.position, Task.created_at).all()


def create_task(actor_user_id, title, status="pending", **fields):
    """Create a task at the bottom of its column.

    Args:
        actor_user_id: Creator's user id (None for API-key callers).
        title: Task title (will be sanitized).
        status: Board column id.
        **fields: Any of description, priority, category, due_date,
            assignee, notes, permit_id.

    Returns:
        The created Task.

    Raises:
        ValueError: On invalid status, priority, date or empty title.
        RecordNotFound: If permit_id does not exist.
    """
    check_choice(status, Task.STATUSES, "status")
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown task fields: {', '.join(sorted(unknown))}")

    values = {"title": _clean_field("title", title)}
    for name, value in fields.items():
        values[name] = _clean_field(name, value)
    values.setdefault("priority", "medium")

    now = datetime.now(timezone.utc)
    task = Task(
        status=status,
        position=_next_position(status),
        created_by_user_id=actor_user_id,
        completed_at=now if status == "completed" else None,
        **values,
    )
    db.session.add(task)
    db.session.flush()

    audit.record(
        "task.created", actor_user_id, entity=task,
        title=task.title, status=status,
    )
    db.session.flush()
    return task


def update_task(task_id, data, actor_user_id):
    """Update editable fields. A changed ``status`` moves the card to the
    end of that column, the same as dropping it on the column."""
    task = _get_task(task_id)

    changed = []
    for name in EDITABLE_FIELDS:
        if name in data:
            value = _clean_field(name, data[name])
            if getattr(task, name) != value:
                setattr(task, name, value)
                changed.append(name)

    new_status = data.get("status")
    if new_status and new_status != task.status:
        check_choice(new_status, Task.STATUSES, "status")
        move_task(task_id, DropTarget(column_id=new_status), actor_user_id)
        changed.append("status")

    if changed:
        task.updated_at = datetime.now(timezone.utc)
        audit.record("task.updated", actor_user_id, entity=task, fields=changed)
    db.session.flush()
    return task


def move_task(task_id, target, actor_user_id=None):
    """Apply a drag-and-drop move and persist the resulting placements.

    Args:
        task_id: The dragged task.
        target: DropTarget (column, index, over-task, side).
        actor_user_id: For the audit trail.

    Returns:
        (board, placements) — the new Board and the list of Placements
        that changed. An ignored drop returns the unchanged board and [].

    Raises:
        RecordNotFound: If the dragged task does not exist.
    """
    rows = _ordered_tasks()
    by_id = {t.id: t for t in rows}
    if task_id not in by_id:
        raise RecordNotFound("Task", task_id)

    before = get_board(rows)
    after = compute_new_board_state(before, MoveEvent(task_id, target))
    if after is before:
        return before, []

    placements = reconcile(before, after)
    from_column = by_id[task_id].status
    now = datetime.now(timezone.utc)

    # Rewrite every row whose stored placement disagrees with the new board
    for col in after.columns:
        for position, tid in enumerate(col.task_ids):
            row = by_id[tid]
            if row.status == col.id and row.position == position:
                continue
            if row.status != col.id:
                _set_completed_at(row, col.id, now)
                row.status = col.id
            row.position = position
            row.updated_at = now

    moved = next(p for p in placements if p.task_id == task_id)
    audit.record(
        "task.moved", actor_user_id, entity=by_id[task_id],
        from_column=from_column,
        to_column=moved.column_id,
        position=moved.position,
    )
    db.session.flush()

    logger.info(
        f"Task {task_id} moved {from_column} -> {moved.column_id} "
        f"@ {moved.position} ({len(placements)} placements changed)"
    )
    return after, placements


def complete_task(task_id, actor_user_id, notes=None):
    """Move a task to the end of the completed column, appending notes."""
    task = _get_task(task_id)
    notes = sanitize(notes)
    if notes:
        task.notes = f"{task.notes}\n{notes}" if task.notes else notes
    if task.status != "completed":
        move_task(task_id, DropTarget(column_id="completed"), actor_user_id)
    db.session.flush()
    return task


def delete_task(task_id, actor_user_id):
    task = _get_task(task_id)
    status = task.status
    audit.record("task.deleted", actor_user_id, entity=task, title=task.title)
    db.session.delete(task)
    db.session.flush()

    # Close the gap left in the column
    remaining = (
        Task.query.filter_by(status=status)
        .order_by(Task.position, Task.created_at)
        .all()
    )
    for position, row in enumerate(remaining):
        row.position = position
    db.session.flush()


def overdue_tasks(today=None):
    today = today or date.today()
    return (
        Task.query.filter(
            Task.due_date.isnot(None),
            Task.due_date < today,
            Task.status != "completed",
        )
        .order_by(Task.due_date)
        .all()
    )


def upcoming_tasks(days_ahead=7, today=None):
    today = today or date.today()
    return (
        Task.query.filter(
            Task.due_date.isnot(None),
            Task.due_date >= today,
            Task.due_date <= today + timedelta(days=days_ahead),
            Task.status != "completed",
        )
        .order_by(Task.due_date)
        .all()
    )


def task_stats(today=None):
    by_status = {status: 0 for status in Task.STATUSES}
    for status, count in (
        db.session.query(Task.status, db.func.count(Task.id)).group_by(Task.status)
    ):
        by_status[status] = count
    by_priority = {priority: 0 for priority in Task.PRIORITIES}
    for priority, count in (
        db.session.query(Task.priority, db.func.count(Task.id)).group_by(Task.priority)
    ):
        by_priority[priority] = count
    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_priority": by_priority,
        "overdue": len(overdue_tasks(today)),
    }


def _text(value):
    """Non-empty string or None; other JSON types count as no target."""
    return value if isinstance(value, str) and value else None


def drop_target_from_json(data):
    """Build a DropTarget from a request body.

    Accepts ``column`` / ``column_id`` (with an optional ``column-`` prefix
    as sent by the board UI), ``index``, ``over_task_id`` and ``side``.
    Non-string column or over-task values are treated as absent, so the
    drop is ignored.

    Raises:
        ValueError: If index is not an integer or side is unknown.
    """
    column_id = _text(data.get("column_id")) or _text(data.get("column"))
    if column_id and column_id.startswith("column-"):
        column_id = column_id[len("column-"):]
    index = data.get("index")
    if index is not None:
        try:
            index = int(index)
        except (TypeError, ValueError):
            raise ValueError("index must be an integer.")
    side = data.get("side") or "before"
    check_choice(side, SIDES, "side")
    return DropTarget(
        column_id=column_id or None,
        index=index,
        over_task_id=_text(data.get("over_task_id")),
        side=side,
    )
