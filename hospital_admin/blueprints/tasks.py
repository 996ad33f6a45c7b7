"""Tasks blueprint — /api/tasks/*

Task CRUD plus the Kanban board. Session or Bearer API key (bots).
CSRF-exempt: JSON only.

Route Map:
  GET    /api/tasks/board            — Columns with their tasks, in order
  POST   /api/tasks/move             — Apply a drag-and-drop move
  GET    /api/tasks                  — List (status, priority, assignee, permit_id, q)
  POST   /api/tasks                  — Create
  GET    /api/tasks/stats            — Counts, overdue, upcoming
  GET    /api/tasks/<id>             — Detail
  PUT    /api/tasks/<id>             — Update (status change = move to end of column)
  DELETE /api/tasks/<id>             — Delete
  POST   /api/tasks/<id>/complete    — Move to completed, append notes
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import actor_id, api_auth
from hospital_admin.extensions import db
from hospital_admin.models.task import Task
from hospital_admin.services import task_service

tasks_bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


def _body():
    return request.get_json(silent=True) or {}


# ─── Board ───────────────────────────────────────────────────────

@tasks_bp.route("/board")
@api_auth
def board():
    return jsonify({"columns": task_service.get_board().to_dict()})


@tasks_bp.route("/move", methods=["POST"])
@api_auth
def move():
    """Body: {task_id, column | column_id, index?, over_task_id?, side?}

    Invalid targets are ignored: 200 with the unchanged board and
    ``moved: false``.
    """
    data = _body()
    task_id = data.get("task_id")
    if not isinstance(task_id, str) or not task_id:
        return jsonify({"error": "task_id is required."}), 400

    target = task_service.drop_target_from_json(data)
    board, placements = task_service.move_task(task_id, target, actor_id())
    db.session.commit()
    return jsonify({
        "moved": bool(placements),
        "placements": [
            {"task_id": p.task_id, "column_id": p.column_id, "position": p.position}
            for p in placements
        ],
        "columns": board.to_dict(),
    })


# ─── CRUD ────────────────────────────────────────────────────────

@tasks_bp.route("", methods=["GET"])
@api_auth
def list_tasks():
    tasks = task_service.list_tasks(
        status=request.args.get("status"),
        priority=request.args.get("priority"),
        assignee=request.args.get("assignee"),
        permit_id=request.args.get("permit_id"),
        query=request.args.get("q"),
    )
    return jsonify({"tasks": [t.to_dict() for t in tasks], "total": len(tasks)})


@tasks_bp.route("", methods=["POST"])
@api_auth
def create_task():
    data = _body()
    fields = {k: v for k, v in data.items() if k in task_service.EDITABLE_FIELDS}
    fields.pop("title", None)
    task = task_service.create_task(
        actor_id(),
        data.get("title"),
        status=data.get("status") or "pending",
        **fields,
    )
    db.session.commit()
    return jsonify(task.to_dict()), 201


@tasks_bp.route("/stats")
@api_auth
def stats():
    result = task_service.task_stats()
    result["upcoming"] = [t.to_dict() for t in task_service.upcoming_tasks()]
    return jsonify(result)


@tasks_bp.route("/<task_id>")
@api_auth
def get_task(task_id):
    task = db.session.get(Task, task_id)
    if task is None:
        return jsonify({"error": "Task not found"}), 404
    return jsonify(task.to_dict())


@tasks_bp.route("/<task_id>", methods=["PUT"])
@api_auth
def update_task(task_id):
    task = task_service.update_task(task_id, _body(), actor_id())
    db.session.commit()
    return jsonify(task.to_dict())


@tasks_bp.route("/<task_id>", methods=["DELETE"])
@api_auth
def delete_task(task_id):
    task_service.delete_task(task_id, actor_id())
    db.session.commit()
    return jsonify({"success": True})


@tasks_bp.route("/<task_id>/complete", methods=["POST"])
@api_auth
def complete_task(task_id):
    task = task_service.complete_task(task_id, actor_id(), notes=_body().get("notes"))
    db.session.commit()
    return jsonify(task.to_dict())
