"""Tests for people (foreign staff + dependents).

Covers:
- Create with generated FOR-NNNNNN ticket number
- Required names, duplicate passport -> 409 with existing id
- Guardian must exist; dependents listing
- Delete refused while permits exist; dependents detached
- Search + pagination, expiring papers, stats
"""

from datetime import date

from hospital_admin.extensions import db
from hospital_admin.models.person import Person
from hospital_admin.services import people_service, permit_service


class TestCreate:

    def test_create_person(self, client, seed_data, api_headers):
        resp = client.post("/api/people", headers=api_headers, json={
            "first_name": "Lars",
            "last_name": "Nilsson",
            "nationality": "Swedish",
            "gender": "MALE",
            "email": "Lars@Example.org",
            "passport_no": "SE7654321",
            "passport_expiry_date": "2027-03-01",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["ticket_number"] == "FOR-000002"
        assert body["email"] == "lars@example.org"
        assert body["passport_expiry_date"] == "2027-03-01"

    def test_names_required(self, client, seed_data, api_headers):
        resp = client.post("/api/people", headers=api_headers, json={"first_name": "Solo"})
        assert resp.status_code == 400

    def test_invalid_gender(self, client, seed_data, api_headers):
        resp = client.post("/api/people", headers=api_headers, json={
            "first_name": "A", "last_name": "B", "gender": "OTHER",
        })
        assert resp.status_code == 400

    def test_duplicate_passport(self, client, seed_data, api_headers):
        resp = client.post("/api/people", headers=api_headers, json={
            "first_name": "Other", "last_name": "Person", "passport_no": "SE1234567",
        })
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["code"] == "DUPLICATE_PASSPORT_NUMBER"
        assert body["existing_id"] == seed_data["person_id"]

    def test_unknown_guardian(self, client, seed_data, api_headers):
        resp = client.post("/api/people", headers=api_headers, json={
            "first_name": "Kid", "last_name": "Lindqvist", "guardian_id": "missing",
        })
        assert resp.status_code == 404


class TestDependents:

    def _add_child(self, seed_data):
        child = people_service.create_person({
            "first_name": "Elsa",
            "last_name": "Lindqvist",
            "guardian_id": seed_data["person_id"],
        }, seed_data["admin_id"])
        db.session.commit()
        return child

    def test_dependents_listed(self, client, seed_data, api_headers):
        child = self._add_child(seed_data)
        resp = client.get(f"/api/people/{seed_data['person_id']}/dependents", headers=api_headers)
        assert [d["id"] for d in resp.get_json()["dependents"]] == [child.id]

        detail = client.get(f"/api/people/{seed_data['person_id']}", headers=api_headers)
        assert len(detail.get_json()["dependents"]) == 1

    def test_cannot_be_own_guardian(self, client, seed_data, api_headers):
        resp = client.put(f"/api/people/{seed_data['person_id']}", headers=api_headers, json={
            "guardian_id": seed_data["person_id"],
        })
        assert resp.status_code == 400

    def test_delete_detaches_dependents(self, client, seed_data, api_headers):
        child = self._add_child(seed_data)
        resp = client.delete(f"/api/people/{seed_data['person_id']}", headers=api_headers)
        assert resp.status_code == 200
        assert db.session.get(Person, seed_data["person_id"]) is None
        assert db.session.get(Person, child.id).guardian_id is None

    def test_delete_refused_with_permits(self, client, seed_data, api_headers):
        permit_service.create_permit(seed_data["person_id"], "WORK_PERMIT", None)
        db.session.commit()
        resp = client.delete(f"/api/people/{seed_data['person_id']}", headers=api_headers)
        assert resp.status_code == 400
        assert db.session.get(Person, seed_data["person_id"]) is not None


class TestQueries:

    def test_search_and_pagination(self, client, seed_data, api_headers):
        for i in range(3):
            people_service.create_person(
                {"first_name": f"Staff{i}", "last_name": "Okafor", "nationality": "Nigerian"},
                None,
            )
        db.session.commit()

        resp = client.get("/api/people?q=okafor&limit=2", headers=api_headers)
        body = resp.get_json()
        assert body["total"] == 3
        assert len(body["people"]) == 2
        assert body["limit"] == 2

        resp = client.get("/api/people?nationality=Swedish", headers=api_headers)
        assert resp.get_json()["total"] == 1

    def test_bad_pagination(self, client, seed_data, api_headers):
        assert client.get("/api/people?limit=ten", headers=api_headers).status_code == 400

    def test_update(self, client, seed_data, api_headers):
        resp = client.put(f"/api/people/{seed_data['person_id']}", headers=api_headers, json={
            "phone": "+251 911 000 000", "work_permit_expiry_date": "2026-12-01",
        })
        assert resp.status_code == 200
        assert resp.get_json()["phone"] == "+251 911 000 000"

    def test_expiring_papers(self, seed_data):
        person = db.session.get(Person, seed_data["person_id"])
        person.passport_expiry_date = date(2026, 11, 1)
        person.medical_license_expiry_date = date(2026, 10, 25)
        person.work_permit_expiry_date = date(2027, 6, 1)
        db.session.commit()

        papers = people_service.expiring_papers(30, today=date(2026, 10, 19))
        assert [(p.id, paper) for p, paper, _ in papers] == [
            (seed_data["person_id"], "medical_license"),
            (seed_data["person_id"], "passport"),
        ]

    def test_stats(self, client, seed_data, api_headers):
        people_service.create_person({
            "first_name": "Elsa", "last_name": "Lindqvist", "guardian_id": seed_data["person_id"],
        }, None)
        db.session.commit()
        body = client.get("/api/people/stats", headers=api_headers).get_json()
        assert body == {"total": 2, "staff": 1, "dependents": 1, "with_permits": 0}
