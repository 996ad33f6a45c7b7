"""Settings blueprint — /api/settings/*  (admin only)

Route Map:
  GET  /api/settings                 — Organization settings + stored rows (secrets masked)
  PUT  /api/settings                 — Save {key: value, ...}
  PUT  /api/settings/secrets/<key>   — Store a secret {value}
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import actor_id, admin_required
from hospital_admin.extensions import db
from hospital_admin.services import settings_service

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.route("", methods=["GET"])
@admin_required
def get_settings():
    return jsonify({
        "organization": settings_service.organization_settings(),
        "settings": [
            s.to_dict() for s in settings_service.list_settings(request.args.get("category"))
        ],
    })


@settings_bp.route("", methods=["PUT"])
@admin_required
def save_settings():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict) or not data:
        return jsonify({"error": "Send an object of setting keys and values."}), 400
    changed = settings_service.save_settings(data, actor_id())
    db.session.commit()
    return jsonify({
        "changed": changed,
        "organization": settings_service.organization_settings(),
    })


@settings_bp.route("/secrets/<key>", methods=["PUT"])
@admin_required
def save_secret(key):
    data = request.get_json(silent=True) or {}
    row = settings_service.set_secret(
        key, data.get("value"), actor_id(), description=data.get("description")
    )
    db.session.commit()
    return jsonify(row.to_dict())
