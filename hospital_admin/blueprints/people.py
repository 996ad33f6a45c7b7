"""People blueprint — /api/people/*

Foreign staff and their dependents.

Route Map:
  GET    /api/people                   — List (q, nationality, limit, offset)
  POST   /api/people                   — Create
  GET    /api/people/stats             — Counts
  GET    /api/people/expiring          — Papers expiring within ?days= (default 30)
  GET    /api/people/<id>              — Detail (with dependents, permits, documents)
  PUT    /api/people/<id>              — Update
  DELETE /api/people/<id>              — Delete (refused while permits exist)
  GET    /api/people/<id>/dependents   — Dependents of a guardian
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import actor_id, api_auth
from hospital_admin.extensions import db
from hospital_admin.services import people_service
from hospital_admin.services.validation import page_bounds

people_bp = Blueprint("people", __name__, url_prefix="/api/people")


@people_bp.route("", methods=["GET"])
@api_auth
def list_people():
    limit, offset = page_bounds(request.args.get("limit"), request.args.get("offset"))
    people, total = people_service.list_people(
        query=request.args.get("q"),
        nationality=request.args.get("nationality"),
        limit=limit,
        offset=offset,
    )
    return jsonify({
        "people": [p.to_dict() for p in people],
        "total": total,
        "limit": limit,
        "offset": offset,
    })


@people_bp.route("", methods=["POST"])
@api_auth
def create_person():
    person = people_service.create_person(request.get_json(silent=True) or {}, actor_id())
    db.session.commit()
    return jsonify(person.to_dict()), 201


@people_bp.route("/stats")
@api_auth
def stats():
    return jsonify(people_service.people_stats())


@people_bp.route("/expiring")
@api_auth
def expiring():
    days = request.args.get("days", 30, type=int)
    return jsonify({
        "days": days,
        "papers": [
            {
                "person_id": person.id,
                "name": person.full_name,
                "paper": paper,
                "expiry_date": expiry.isoformat(),
            }
            for person, paper, expiry in people_service.expiring_papers(days)
        ],
    })


@people_bp.route("/<person_id>")
@api_auth
def get_person(person_id):
    person = people_service.get_person(person_id)
    data = person.to_dict()
    data["dependents"] = [d.to_dict() for d in person.dependents]
    data["permits"] = [p.to_dict() for p in person.permits]
    data["documents"] = [d.to_dict() for d in person.documents]
    return jsonify(data)


@people_bp.route("/<person_id>", methods=["PUT"])
@api_auth
def update_person(person_id):
    person = people_service.update_person(
        person_id, request.get_json(silent=True) or {}, actor_id()
    )
    db.session.commit()
    return jsonify(person.to_dict())


@people_bp.route("/<person_id>", methods=["DELETE"])
@api_auth
def delete_person(person_id):
    people_service.delete_person(person_id, actor_id())
    db.session.commit()
    return jsonify({"success": True})


@people_bp.route("/<person_id>/dependents")
@api_auth
def dependents(person_id):
    return jsonify({
        "dependents": [d.to_dict() for d in people_service.get_dependents(person_id)]
    })
