"""Tests for the tasks blueprint and task_service.

Covers:
- Auth: Bearer API key, session login, unauthenticated / bad key
- Board endpoint shape
- Moves persist status + position for every affected row
- completed_at set on entering / cleared on leaving the completed column
- Ignored drops leave the database untouched; unknown task -> 404
- Non-string drop targets are ignored; non-string task ids are rejected
- CRUD, complete, delete (positions compacted), stats
"""

from datetime import date, timedelta

from hospital_admin.extensions import db
from hospital_admin.models.audit import AuditEvent
from hospital_admin.models.task import Task
from hospital_admin.services import task_service


def _login(client, email="admin@hospital.local", password="admin123"):
    return client.post("/auth/login", json={"email": email, "password": password})


def _column_ids(resp, column_id):
    column = next(c for c in resp.get_json()["columns"] if c["id"] == column_id)
    return [t["id"] for t in column["tasks"]]


def _placement(task_id):
    task = db.session.get(Task, task_id)
    return task.status, task.position


class TestAccess:

    def test_board_requires_auth(self, client, seed_data):
        resp = client.get("/api/tasks/board")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "Unauthorized"

    def test_wrong_api_key(self, client, seed_data):
        resp = client.get("/api/tasks/board", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    def test_api_key(self, client, seed_data, api_headers):
        resp = client.get("/api/tasks/board", headers=api_headers)
        assert resp.status_code == 200

    def test_session_login(self, client, seed_data):
        assert _login(client, "hr@hospital.local", "hr12345").status_code == 200
        resp = client.get("/api/tasks/board")
        assert resp.status_code == 200


class TestBoard:

    def test_board_columns_in_order(self, client, seed_data, api_headers):
        resp = client.get("/api/tasks/board", headers=api_headers)
        columns = resp.get_json()["columns"]
        assert [c["id"] for c in columns] == ["pending", "in-progress", "completed"]
        assert [c["title"] for c in columns] == ["Pending", "In Progress", "Completed"]
        assert _column_ids(resp, "pending") == [seed_data["t1"], seed_data["t2"]]
        assert _column_ids(resp, "in-progress") == [seed_data["t3"]]


class TestMove:

    def test_reorder_within_column(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t2"],
            "over_task_id": seed_data["t1"],
            "side": "before",
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["moved"] is True
        assert _column_ids(resp, "pending") == [seed_data["t2"], seed_data["t1"]]
        assert _placement(seed_data["t2"]) == ("pending", 0)
        assert _placement(seed_data["t1"]) == ("pending", 1)

    def test_move_to_completed_sets_completed_at(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t1"],
            "column": "column-completed",
        })
        assert resp.status_code == 200
        assert _column_ids(resp, "completed") == [seed_data["t1"]]

        t1 = db.session.get(Task, seed_data["t1"])
        assert t1.status == "completed"
        assert t1.position == 0
        assert t1.completed_at is not None
        # The task left behind closes the gap
        assert _placement(seed_data["t2"]) == ("pending", 0)

        event = AuditEvent.query.filter_by(action="task.moved").first()
        assert event.entity_id == seed_data["t1"]
        assert event.metadata_["from_column"] == "pending"
        assert event.metadata_["to_column"] == "completed"

    def test_leaving_completed_clears_completed_at(self, client, seed_data, api_headers):
        client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t1"], "column_id": "completed",
        })
        client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t1"], "column_id": "in-progress", "index": 0,
        })
        t1 = db.session.get(Task, seed_data["t1"])
        assert t1.status == "in-progress"
        assert t1.completed_at is None
        assert _placement(seed_data["t3"]) == ("in-progress", 1)

    def test_move_over_task_in_other_column(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t3"],
            "over_task_id": seed_data["t2"],
            "side": "after",
        })
        assert _column_ids(resp, "pending") == [seed_data["t1"], seed_data["t2"], seed_data["t3"]]
        assert _placement(seed_data["t3"]) == ("pending", 2)

    def test_unknown_column_is_ignored(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t1"], "column_id": "archive",
        })
        assert resp.status_code == 200
        assert resp.get_json()["moved"] is False
        assert resp.get_json()["placements"] == []
        assert _placement(seed_data["t1"]) == ("pending", 0)
        assert AuditEvent.query.filter_by(action="task.moved").count() == 0

    def test_same_position_is_noop(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t2"], "column_id": "pending",
        })
        assert resp.get_json()["moved"] is False

    def test_unknown_task_is_404(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": "missing", "column_id": "pending",
        })
        assert resp.status_code == 404

    def test_missing_task_id(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={"column_id": "pending"})
        assert resp.status_code == 400

    def test_non_string_column_is_ignored(self, client, seed_data, api_headers):
        for body in ({"column": 5}, {"column_id": ["completed"]}, {"over_task_id": {"id": "x"}}):
            body["task_id"] = seed_data["t1"]
            resp = client.post("/api/tasks/move", headers=api_headers, json=body)
            assert resp.status_code == 200
            assert resp.get_json()["moved"] is False
        assert _placement(seed_data["t1"]) == ("pending", 0)

    def test_non_string_task_id(self, client, seed_data, api_headers):
        for task_id in (["x"], 7, ""):
            resp = client.post("/api/tasks/move", headers=api_headers, json={
                "task_id": task_id, "column": "pending",
            })
            assert resp.status_code == 400

    def test_bad_index(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks/move", headers=api_headers, json={
            "task_id": seed_data["t1"], "column_id": "completed", "index": "top",
        })
        assert resp.status_code == 400


class TestCrud:

    def test_create_appends_to_column(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks", headers=api_headers, json={
            "title": "Book residence ID appointment",
            "priority": "low",
            "due_date": "2026-11-02",
            "assignee": "HR Assistant",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == "pending"
        assert body["position"] == 2
        assert body["due_date"] == "2026-11-02"

    def test_create_strips_html(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks", headers=api_headers, json={
            "title": "<b>Collect</b> forms<script>x</script>",
        })
        assert resp.status_code == 201
        assert "<" not in resp.get_json()["title"]

    def test_create_validation(self, client, seed_data, api_headers):
        assert client.post("/api/tasks", headers=api_headers, json={}).status_code == 400
        assert client.post("/api/tasks", headers=api_headers, json={
            "title": "x", "priority": "urgent",
        }).status_code == 400
        assert client.post("/api/tasks", headers=api_headers, json={
            "title": "x", "due_date": "2026-13-01",
        }).status_code == 400
        assert client.post("/api/tasks", headers=api_headers, json={
            "title": "x", "status": "archived",
        }).status_code == 400

    def test_create_with_unknown_permit(self, client, seed_data, api_headers):
        resp = client.post("/api/tasks", headers=api_headers, json={
            "title": "x", "permit_id": "nope",
        })
        assert resp.status_code == 404

    def test_get_and_404(self, client, seed_data, api_headers):
        resp = client.get(f"/api/tasks/{seed_data['t1']}", headers=api_headers)
        assert resp.get_json()["title"] == "Renew medical license"
        assert client.get("/api/tasks/missing", headers=api_headers).status_code == 404

    def test_update_status_moves_to_end_of_column(self, client, seed_data, api_headers):
        resp = client.put(f"/api/tasks/{seed_data['t1']}", headers=api_headers, json={
            "status": "in-progress", "assignee": "Dr. Samuel",
        })
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "in-progress"
        assert _placement(seed_data["t1"]) == ("in-progress", 1)
        assert _placement(seed_data["t2"]) == ("pending", 0)
        assert db.session.get(Task, seed_data["t1"]).assignee == "Dr. Samuel"

    def test_complete_appends_notes(self, client, seed_data, api_headers):
        resp = client.post(f"/api/tasks/{seed_data['t3']}/complete", headers=api_headers, json={
            "notes": "Filed at immigration office",
        })
        body = resp.get_json()
        assert body["status"] == "completed"
        assert body["notes"] == "Filed at immigration office"
        assert body["completed_at"] is not None

    def test_delete_compacts_positions(self, client, seed_data, api_headers):
        resp = client.delete(f"/api/tasks/{seed_data['t1']}", headers=api_headers)
        assert resp.status_code == 200
        assert db.session.get(Task, seed_data["t1"]) is None
        assert _placement(seed_data["t2"]) == ("pending", 0)

    def test_list_filters(self, client, seed_data, api_headers):
        resp = client.get("/api/tasks?status=pending", headers=api_headers)
        assert resp.get_json()["total"] == 2
        resp = client.get("/api/tasks?q=passport", headers=api_headers)
        assert [t["id"] for t in resp.get_json()["tasks"]] == [seed_data["t2"]]


class TestStatsAndQueries:

    def test_stats(self, client, seed_data, api_headers):
        resp = client.get("/api/tasks/stats", headers=api_headers)
        body = resp.get_json()
        assert body["total"] == 3
        assert body["by_status"] == {"pending": 2, "in-progress": 1, "completed": 0}
        assert body["by_priority"]["high"] == 1

    def test_overdue_and_upcoming(self, seed_data):
        today = date(2026, 10, 19)
        task_service.update_task(seed_data["t1"], {"due_date": today - timedelta(days=2)}, None)
        task_service.update_task(seed_data["t2"], {"due_date": today + timedelta(days=3)}, None)
        task_service.update_task(seed_data["t3"], {"due_date": today + timedelta(days=30)}, None)

        assert [t.id for t in task_service.overdue_tasks(today)] == [seed_data["t1"]]
        assert [t.id for t in task_service.upcoming_tasks(7, today)] == [seed_data["t2"]]
        assert task_service.task_stats(today)["overdue"] == 1

    def test_completed_tasks_are_never_overdue(self, seed_data):
        today = date(2026, 10, 19)
        task_service.update_task(seed_data["t1"], {"due_date": "2026-01-01"}, None)
        task_service.complete_task(seed_data["t1"], None)
        assert task_service.overdue_tasks(today) == []
