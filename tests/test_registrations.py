"""Tests for vehicles / imports / companies (shared registration routes).

Covers:
- Ticket prefixes per kind
- Required title / category, stage validation
- Unique plate number and company name -> 409
- Search, status filter, stats, update, delete
- Unknown kind -> 404
"""

from hospital_admin.extensions import db
from hospital_admin.models.audit import AuditEvent
from hospital_admin.models.registration import Vehicle


def _vehicle(client, headers, **fields):
    payload = {
        "title": "Ambulance annual inspection",
        "category": "inspection",
        "plate_number": "AA-3-12345",
        "vehicle_model": "Land Cruiser",
    }
    payload.update(fields)
    return client.post("/api/vehicles", headers=headers, json=payload)


class TestCreate:

    def test_vehicle(self, client, seed_data, api_headers):
        resp = _vehicle(client, api_headers)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["ticket_number"] == "VEH-000001"
        assert body["status"] == "pending"
        assert body["plate_number"] == "AA-3-12345"
        assert body["documents"] == []

    def test_import(self, client, seed_data, api_headers):
        resp = client.post("/api/imports", headers=api_headers, json={
            "title": "Ultrasound machine",
            "category": "pip",
            "supplier_name": "MedEquip GmbH",
            "supplier_country": "Germany",
        })
        assert resp.status_code == 201
        assert resp.get_json()["ticket_number"] == "IMP-000001"

    def test_company(self, client, seed_data, api_headers):
        resp = client.post("/api/companies", headers=api_headers, json={
            "title": "Pharmacy licence",
            "company_name": "Soddo Pharmacy PLC",
            "stage": "apply_online",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["ticket_number"] == "CMP-000001"
        assert body["stage"] == "apply_online"

    def test_sequence_continues(self, client, seed_data, api_headers):
        _vehicle(client, api_headers)
        resp = _vehicle(client, api_headers, plate_number="AA-3-99999")
        assert resp.get_json()["ticket_number"] == "VEH-000002"

    def test_title_required(self, client, seed_data, api_headers):
        assert _vehicle(client, api_headers, title="").status_code == 400

    def test_category_required(self, client, seed_data, api_headers):
        resp = client.post("/api/vehicles", headers=api_headers, json={"title": "x"})
        assert resp.status_code == 400

    def test_bad_stage(self, client, seed_data, api_headers):
        resp = client.post("/api/companies", headers=api_headers, json={
            "title": "x", "stage": "done",
        })
        assert resp.status_code == 400

    def test_documents_must_be_list(self, client, seed_data, api_headers):
        assert _vehicle(client, api_headers, documents="a.pdf").status_code == 400


class TestUniqueness:

    def test_duplicate_plate(self, client, seed_data, api_headers):
        first = _vehicle(client, api_headers).get_json()
        resp = _vehicle(client, api_headers, title="Road fund renewal", category="road_fund")
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["code"] == "DUPLICATE_PLATE_NUMBER"
        assert body["existing_id"] == first["id"]
        assert Vehicle.query.count() == 1

    def test_duplicate_company_name(self, client, seed_data, api_headers):
        client.post("/api/companies", headers=api_headers, json={
            "title": "a", "company_name": "Soddo Pharmacy PLC",
        })
        resp = client.post("/api/companies", headers=api_headers, json={
            "title": "b", "company_name": "Soddo Pharmacy PLC",
        })
        assert resp.status_code == 409
        assert resp.get_json()["code"] == "DUPLICATE_COMPANY_NAME"

    def test_update_keeps_own_plate(self, client, seed_data, api_headers):
        record = _vehicle(client, api_headers).get_json()
        resp = client.put(f"/api/vehicles/{record['id']}", headers=api_headers, json={
            "plate_number": "AA-3-12345", "status": "in-progress",
        })
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "in-progress"


class TestQueries:

    def test_search_and_filter(self, client, seed_data, api_headers):
        _vehicle(client, api_headers)
        _vehicle(client, api_headers, title="Insurance", category="insurance", plate_number="AA-2-00001")

        body = client.get("/api/vehicles?q=12345", headers=api_headers).get_json()
        assert body["total"] == 1
        assert body["vehicles"][0]["plate_number"] == "AA-3-12345"

        body = client.get("/api/vehicles?category=insurance", headers=api_headers).get_json()
        assert body["total"] == 1

    def test_stats(self, client, seed_data, api_headers):
        _vehicle(client, api_headers)
        body = client.get("/api/vehicles/stats", headers=api_headers).get_json()
        assert body["total"] == 1
        assert body["by_status"]["pending"] == 1
        assert body["by_category"]["inspection"] == 1

    def test_status_change_audited(self, client, seed_data, api_headers):
        record = _vehicle(client, api_headers).get_json()
        client.put(f"/api/vehicles/{record['id']}", headers=api_headers, json={"status": "completed"})
        event = AuditEvent.query.filter_by(action="vehicle.updated").first()
        assert event.metadata_["from_status"] == "pending"
        assert event.metadata_["to_status"] == "completed"

    def test_delete(self, client, seed_data, api_headers):
        record = _vehicle(client, api_headers).get_json()
        assert client.delete(f"/api/vehicles/{record['id']}", headers=api_headers).status_code == 200
        assert db.session.get(Vehicle, record["id"]) is None
        assert client.get(f"/api/vehicles/{record['id']}", headers=api_headers).status_code == 404

    def test_unknown_kind(self, client, seed_data, api_headers):
        assert client.get("/api/boats", headers=api_headers).status_code == 404
