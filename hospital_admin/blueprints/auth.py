"""Auth blueprint — /auth/*

Email + password login for staff. Accepts a classic form post or a JSON
body and answers with JSON either way.
"""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash

from hospital_admin.extensions import db, limiter
from hospital_admin.models import audit
from hospital_admin.models.user import User

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _credentials():
    data = request.get_json(silent=True) if request.is_json else None
    if data is None:
        data = request.form
    return (
        (data.get("email") or "").lower().strip(),
        data.get("password") or "",
        bool(data.get("remember")),
    )


# ──────────────────────────────────────────────
# POST /auth/login
# ──────────────────────────────────────────────

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("15 per minute")
def login():
    """Standard email + password login."""
    if current_user.is_authenticated:
        return jsonify({"user": current_user.to_dict()})

    email, password, remember = _credentials()
    if not email or not password:
        return jsonify({"error": "Email and password are required."}), 400

    user = User.query.filter_by(email=email).first()
    if user is None or not check_password_hash(user.password_hash, password):
        return jsonify({"error": "Invalid email or password."}), 401

    if not user.is_active:
        return jsonify({"error": "Your account has been deactivated."}), 403

    login_user(user, remember=remember)
    audit.record("user.logged_in", user.id, entity=user)
    db.session.commit()
    return jsonify({"user": user.to_dict()})


# ──────────────────────────────────────────────
# GET /auth/logout
# ──────────────────────────────────────────────

@auth_bp.route("/logout")
def logout():
    logout_user()
    return jsonify({"success": True})


# ──────────────────────────────────────────────
# GET /auth/me
# ──────────────────────────────────────────────

@auth_bp.route("/me")
@login_required
def me():
    return jsonify({"user": current_user.to_dict()})
