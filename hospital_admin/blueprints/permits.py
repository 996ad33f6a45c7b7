"""Permits blueprint — /api/permits/*

Work permits, residence IDs, medical licences and PIP import permits.
<permit_id> accepts either the id or the ticket number (WRK-2026-0001).

Route Map:
  GET    /api/permits                    — List (category, status, person_id, due_before)
  POST   /api/permits                    — Create (PENDING)
  GET    /api/permits/stats              — Counts
  GET    /api/permits/expiring           — Open permits due within ?days=
  GET    /api/permits/<id>               — Detail
  PUT    /api/permits/<id>               — Update due date / notes (category is fixed)
  DELETE /api/permits/<id>               — Delete (refused while tasks link to it)
  POST   /api/permits/<id>/status        — Status transition {status, notes?}
  GET    /api/permits/<id>/history       — Status history
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import actor_id, api_auth
from hospital_admin.extensions import db
from hospital_admin.services import permit_service
from hospital_admin.services.validation import page_bounds

permits_bp = Blueprint("permits", __name__, url_prefix="/api/permits")


@permits_bp.route("", methods=["GET"])
@api_auth
def list_permits():
    limit, offset = page_bounds(request.args.get("limit"), request.args.get("offset"))
    permits, total = permit_service.list_permits(
        category=request.args.get("category"),
        status=request.args.get("status"),
        person_id=request.args.get("person_id"),
        due_before=request.args.get("due_before"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "permits": [p.to_dict() for p in permits],
        "total": total,
        "limit": limit,
        "offset": offset,
    })


@permits_bp.route("", methods=["POST"])
@api_auth
def create_permit():
    data = request.get_json(silent=True) or {}
    permit = permit_service.create_permit(
        person_id=data.get("person_id"),
        category=data.get("category"),
        actor_user_id=actor_id(),
        due_date=data.get("due_date"),
        notes=data.get("notes"),
    )
    db.session.commit()
    return jsonify(permit.to_dict()), 201


@permits_bp.route("/stats")
@api_auth
def stats():
    return jsonify(permit_service.permit_stats())


@permits_bp.route("/expiring")
@api_auth
def expiring():
    days = request.args.get("days", 30, type=int)
    permits = permit_service.expiring_permits(days)
    return jsonify({"days": days, "permits": [p.to_dict() for p in permits]})


@permits_bp.route("/<permit_id>")
@api_auth
def get_permit(permit_id):
    permit = permit_service.get_permit(permit_id)
    data = permit.to_dict()
    data["tasks"] = [t.to_dict() for t in permit.tasks]
    return jsonify(data)


@permits_bp.route("/<permit_id>", methods=["PUT"])
@api_auth
def update_permit(permit_id):
    permit = permit_service.update_permit(
        permit_id, request.get_json(silent=True) or {}, actor_id()
    )
    db.session.commit()
    return jsonify(permit.to_dict())


@permits_bp.route("/<permit_id>", methods=["DELETE"])
@api_auth
def delete_permit(permit_id):
    permit_service.delete_permit(permit_id, actor_id())
    db.session.commit()
    return jsonify({"success": True})


@permits_bp.route("/<permit_id>/status", methods=["POST"])
@api_auth
def change_status(permit_id):
    data = request.get_json(silent=True) or {}
    if not data.get("status"):
        return jsonify({"error": "status is required."}), 400
    permit = permit_service.transition_status(
        permit_id, data["status"], actor_id(), notes=data.get("notes")
    )
    db.session.commit()
    return jsonify(permit.to_dict())


@permits_bp.route("/<permit_id>/history")
@api_auth
def history(permit_id):
    return jsonify({
        "history": [h.to_dict() for h in permit_service.get_history(permit_id)]
    })
