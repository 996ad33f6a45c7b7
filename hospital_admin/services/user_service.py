"""User service — staff accounts managed by admins.

Passwords are stored as Werkzeug hashes and never returned. Deleting a user
keeps the rows they touched; their authorship columns are cleared first.

Functions flush but do NOT commit — the caller commits.
"""

import logging

from werkzeug.security import generate_password_hash

from hospital_admin.errors import DuplicateRecord, RecordNotFound
from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.audit import AuditEvent
from hospital_admin.models.document import Document
from hospital_admin.models.permit import PermitHistory
from hospital_admin.models.report import Report
from hospital_admin.models.setting import SystemSetting
from hospital_admin.models.task import Task
from hospital_admin.models.user import User
from hospital_admin.services.validation import check_choice, sanitize

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

# (model, column) pairs that point at users.id
_AUTHORSHIP = (
    (AuditEvent, "actor_user_id"),
    (Task, "created_by_user_id"),
    (Document, "uploaded_by_user_id"),
    (Report, "created_by_user_id"),
    (PermitHistory, "changed_by_user_id"),
    (SystemSetting, "updated_by_user_id"),
)


def get_user(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        raise RecordNotFound("User", user_id)
    return user


def list_users(query=None, role=None):
    q = User.query
    if query:
        like = f"%{query}%"
        q = q.filter(db.or_(User.full_name.ilike(like), User.email.ilike(like)))
    if role:
        q = q.filter(User.role == role)
    return q.order_by(User.full_name, User.email).all()


def _check_email(email, user_id=None):
    email = (email or "").strip().lower() if isinstance(email, str) else ""
    if not email or "@" not in email:
        raise ValueError("A valid email is required.")
    existing = User.query.filter_by(email=email).first()
    if existing is not None and existing.id != user_id:
        raise DuplicateRecord(
            "A user with this email already exists.",
            code="DUPLICATE_EMAIL",
            existing_id=existing.id,
        )
    return email


def _hash_password(password):
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    return generate_password_hash(password)


def create_user(data, actor_user_id):
    """Create a staff account.

    Args:
        data: email, password and full_name are required; role defaults to USER.
        actor_user_id: Admin performing the change.

    Raises:
        ValueError: Missing or invalid fields.
        DuplicateRecord: Email already registered.
    """
    email = _check_email(data.get("email"))
    full_name = sanitize(data.get("full_name") or data.get("name"))
    if not full_name:
        raise ValueError("Full name is required.")

    user = User(
        email=email,
        full_name=full_name,
        password_hash=_hash_password(data.get("password")),
        role=check_choice(data.get("role") or "USER", User.ROLES, "role"),
        locale=sanitize(data.get("locale")) or "en",
        is_active=True,
    )
    db.session.add(user)
    db.session.flush()

    audit.record("user.created", actor_user_id, entity=user, email=email, role=user.role)
    db.session.flush()
    logger.info(f"User {email} created with role {user.role}")
    return user


def update_user(user_id, data, actor_user_id):
    """Update name, email, role, active flag or password.

    An admin cannot demote or deactivate their own account.
    """
    user = get_user(user_id)
    changed = []

    if "email" in data:
        email = _check_email(data["email"], user.id)
        if email != user.email:
            user.email = email
            changed.append("email")
    if "full_name" in data or "name" in data:
        full_name = sanitize(data.get("full_name", data.get("name")))
        if not full_name:
            raise ValueError("Full name is required.")
        user.full_name = full_name
        changed.append("full_name")
    if "role" in data and data["role"] != user.role:
        role = check_choice(data["role"], User.ROLES, "role")
        if user.id == actor_user_id:
            raise ValueError("You cannot change your own role.")
        user.role = role
        changed.append("role")
    if "is_active" in data:
        active = data["is_active"]
        if not isinstance(active, bool):
            raise ValueError("is_active must be true or false.")
        if not active and user.id == actor_user_id:
            raise ValueError("You cannot deactivate your own account.")
        if active != user.is_active:
            user.is_active = active
            changed.append("is_active")
    if data.get("password"):
        user.password_hash = _hash_password(data["password"])
        changed.append("password")
    db.session.flush()

    audit.record("user.updated", actor_user_id, entity=user, fields=changed)
    db.session.flush()
    return user


def delete_user(user_id, actor_user_id):
    user = get_user(user_id)
    if user.id == actor_user_id:
        raise ValueError("You cannot delete your own account.")

    for model, column in _AUTHORSHIP:
        model.query.filter(getattr(model, column) == user.id).update(
            {column: None}, synchronize_session=False
        )

    audit.record("user.deleted", actor_user_id, entity=user, email=user.email)
    db.session.delete(user)
    db.session.flush()
    logger.info(f"User {user.email} deleted")
