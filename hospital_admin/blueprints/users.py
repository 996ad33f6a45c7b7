"""Users blueprint — /api/users/*  (admin only)

Staff accounts and their roles. Passwords are accepted on create / update
and never echoed back.

Route Map:
  GET    /api/users          — List (q, role)
  POST   /api/users          — Create {email, full_name, password, role}
  GET    /api/users/<id>     — Detail
  PUT    /api/users/<id>     — Update name, email, role, is_active, password
  DELETE /api/users/<id>     — Delete (not yourself)
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import actor_id, admin_required
from hospital_admin.extensions import db
from hospital_admin.services import user_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
@admin_required
def list_users():
    users = user_service.list_users(
        query=request.args.get("q"), role=request.args.get("role")
    )
    return jsonify({"users": [u.to_dict() for u in users], "total": len(users)})


@users_bp.route("", methods=["POST"])
@admin_required
def create_user():
    user = user_service.create_user(request.get_json(silent=True) or {}, actor_id())
    db.session.commit()
    return jsonify(user.to_dict()), 201


@users_bp.route("/<user_id>")
@admin_required
def get_user(user_id):
    return jsonify(user_service.get_user(user_id).to_dict())


@users_bp.route("/<user_id>", methods=["PUT"])
@admin_required
def update_user(user_id):
    user = user_service.update_user(user_id, request.get_json(silent=True) or {}, actor_id())
    db.session.commit()
    return jsonify(user.to_dict())


@users_bp.route("/<user_id>", methods=["DELETE"])
@admin_required
def delete_user(user_id):
    user_service.delete_user(user_id, actor_id())
    db.session.commit()
    return jsonify({"success": True})
