"""Registrations blueprint — /api/<kind>/* for vehicles, imports, companies.

One set of routes serves all three case types; <kind> picks the model
(see registration_service.KINDS). Unknown kinds answer 404.

Route Map:
  GET    /api/<kind>           — List (q, category, status, limit, offset)
  POST   /api/<kind>           — Create
  GET    /api/<kind>/stats     — Counts by status / category
  GET    /api/<kind>/<id>      — Detail
  PUT    /api/<kind>/<id>      — Update
  DELETE /api/<kind>/<id>      — Delete
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import actor_id, api_auth
from hospital_admin.extensions import db
from hospital_admin.services import registration_service
from hospital_admin.services.validation import page_bounds

registrations_bp = Blueprint("registrations", __name__, url_prefix="/api")

_KIND = "<any(vehicles, imports, companies):kind>"


@registrations_bp.route(f"/{_KIND}", methods=["GET"])
@api_auth
def list_records(kind):
    model = registration_service.model_for(kind)
    limit, offset = page_bounds(request.args.get("limit"), request.args.get("offset"))
    records, total = registration_service.list_records(
        model,
        query=request.args.get("q"),
        category=request.args.get("category"),
        status=request.args.get("status"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        kind: [r.to_dict() for r in records],
        "total": total,
        "limit": limit,
        "offset": offset,
    })


@registrations_bp.route(f"/{_KIND}", methods=["POST"])
@api_auth
def create_record(kind):
    model = registration_service.model_for(kind)
    record = registration_service.create_record(
        model, request.get_json(silent=True) or {}, actor_id()
    )
    db.session.commit()
    return jsonify(record.to_dict()), 201


@registrations_bp.route(f"/{_KIND}/stats")
@api_auth
def stats(kind):
    return jsonify(registration_service.record_stats(registration_service.model_for(kind)))


@registrations_bp.route(f"/{_KIND}/<record_id>")
@api_auth
def get_record(kind, record_id):
    model = registration_service.model_for(kind)
    return jsonify(registration_service.get_record(model, record_id).to_dict())


@registrations_bp.route(f"/{_KIND}/<record_id>", methods=["PUT"])
@api_auth
def update_record(kind, record_id):
    model = registration_service.model_for(kind)
    record = registration_service.update_record(
        model, record_id, request.get_json(silent=True) or {}, actor_id()
    )
    db.session.commit()
    return jsonify(record.to_dict())


@registrations_bp.route(f"/{_KIND}/<record_id>", methods=["DELETE"])
@api_auth
def delete_record(kind, record_id):
    model = registration_service.model_for(kind)
    registration_service.delete_record(model, record_id, actor_id())
    db.session.commit()
    return jsonify({"success": True})
