"""
Custom route decorators for access control.

- api_auth: JSON API access via a logged-in session OR a Bearer token
  matching API_KEY (bots, scripts).
- admin_required: logged in AND role ADMIN.
- roles_required: logged in AND one of the given roles (ADMIN always passes).

Failures answer with JSON (401/403) rather than a login redirect.
"""

from functools import wraps

from flask import current_app, g, jsonify, request
from flask_login import current_user


def _bearer_token():
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


def api_auth(f):
    """Allow access via session OR a Bearer token matching API_KEY."""

    @wraps(f)
    def decorated(*args, **kwargs):
        token = _bearer_token()
        if token is not None:
            expected = current_app.config.get("API_KEY") or ""
            if expected and token == expected:
                g.api_client = True
                return f(*args, **kwargs)
            return jsonify({"error": "Invalid API key"}), 401

        if not current_user.is_authenticated:
            return jsonify({"error": "Unauthorized"}), 401
        g.api_client = False
        return f(*args, **kwargs)

    return decorated


def roles_required(*roles):
    """Require a logged-in user whose role is in roles."""

    def wrapper(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({"error": "Unauthorized"}), 401
            if not current_user.is_admin and current_user.role not in roles:
                return jsonify({"error": "Forbidden"}), 403
            return f(*args, **kwargs)

        return decorated

    return wrapper


admin_required = roles_required("ADMIN")


def actor_id():
    """User id for audit rows; None for API-key callers."""
    if current_user.is_authenticated:
        return current_user.id
    return None
