"""Settings service — organization settings read through the per-app cache.

Rows live in system_settings; anything missing falls back to DEFAULTS.
Reads go through app.extensions["cache"] for SETTINGS_CACHE_TTL seconds
and every committed save invalidates the cached copy (see the
after_commit hook at the bottom), so the next read sees it.

Secret values (API keys, SMTP passwords) are stored base64-obfuscated and
only ever returned masked.
"""

import base64
import logging

from flask import current_app, has_app_context
from sqlalchemy import event
from sqlalchemy.orm import Session

from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.setting import SystemSetting
from hospital_admin.services.validation import sanitize

logger = logging.getLogger(__name__)

CACHE_KEY = "settings:organization"

# session.info flag: settings changed in the open transaction
_STALE = "settings_cache_stale"

# key -> (default, category, description)
DEFAULTS = {
    "organization.name": ("Soddo Hospital", "organization", "Organization name"),
    "organization.email": ("", "organization", "Contact email"),
    "organization.phone": ("", "organization", "Contact phone"),
    "organization.address": ("", "organization", "Postal address"),
    "organization.timezone": ("Africa/Addis_Ababa", "organization", "Timezone"),
    "organization.logo_url": ("", "organization", "Logo URL"),
    "calendar.use_ethiopian_calendar": (False, "calendar", "Show Ethiopian calendar dates"),
    "calendar.dual_calendar_display": (False, "calendar", "Show both calendars"),
    "alerts.permit_expiry_alerts": (True, "alerts", "Email permit expiry alerts"),
    "alerts.alert_days_before": (30, "alerts", "Days before expiry to alert"),
}


def _obfuscate(value):
    return base64.b64encode(value.encode()).decode()


def _reveal(value):
    return base64.b64decode(value.encode()).decode()


def _coerce(key, raw):
    """Convert a stored string back to the type of its default."""
    default = DEFAULTS[key][0] if key in DEFAULTS else ""
    if raw is None:
        return default
    if isinstance(default, bool):
        return str(raw).lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            return default
    return raw


def _load():
    rows = {s.key: s for s in SystemSetting.query.all()}
    values = {}
    for key in DEFAULTS:
        row = rows.get(key)
        values[key] = _coerce(key, row.value if row else None)
    return values


def _cache():
    return current_app.extensions["cache"]


def get_settings():
    """Return {key: value} for every known setting, defaults filled in."""
    return dict(
        _cache().get_or_load(
            CACHE_KEY, _load, ttl=current_app.config.get("SETTINGS_CACHE_TTL", 300)
        )
    )


def get_setting(key):
    return get_settings().get(key)


def organization_settings():
    """The organization block, with the key prefixes stripped."""
    settings = get_settings()
    return {
        key.split(".", 1)[1]: value
        for key, value in settings.items()
    }


def list_settings(category=None):
    """All stored rows (secrets masked) for the admin listing."""
    q = SystemSetting.query
    if category:
        q = q.filter(SystemSetting.category == category)
    return q.order_by(SystemSetting.category, SystemSetting.key).all()


def save_settings(updates, actor_user_id):
    """Upsert settings and drop the cached copy.

    Args:
        updates: {key: value}. Known keys are type-checked against DEFAULTS;
            other keys are stored as free text.
        actor_user_id: For the audit trail.

    Raises:
        ValueError: Empty key or a non-numeric value for a numeric setting.
    """
    changed = []
    for key, value in updates.items():
        key = (key or "").strip()
        if not key:
            raise ValueError("Setting key is required.")
        default, category, description = DEFAULTS.get(key, ("", "general", None))

        if isinstance(default, bool):
            stored = "true" if _coerce(key, value) else "false"
        elif isinstance(default, int):
            try:
                number = int(value)
            except (TypeError, ValueError):
                raise ValueError(f"'{key}' must be a whole number.")
            if number < 0:
                raise ValueError(f"'{key}' cannot be negative.")
            stored = str(number)
        else:
            stored = sanitize(value) or ""

        row = db.session.get(SystemSetting, key)
        if row is None:
            row = SystemSetting(key=key, category=category, description=description)
            db.session.add(row)
        elif row.is_secret:
            raise ValueError(f"'{key}' is a secret; use the secrets endpoint.")
        if row.value != stored:
            row.value = stored
            row.updated_by_user_id = actor_user_id
            changed.append(key)
    db.session.flush()

    if changed:
        audit.record(
            "settings.updated", actor_user_id,
            entity_type="settings", keys=sorted(changed),
        )
        db.session.flush()
        db.session.info[_STALE] = True
    logger.info(f"Settings saved: {', '.join(changed) or 'no changes'}")
    return changed


def set_secret(key, value, actor_user_id, category="integrations", description=None):
    """Store a secret value obfuscated. The plain value never leaves here."""
    if not key:
        raise ValueError("Setting key is required.")
    if key in DEFAULTS:
        raise ValueError(f"'{key}' is a regular setting and cannot hold a secret.")
    row = db.session.get(SystemSetting, key)
    if row is None:
        row = SystemSetting(key=key, category=category, description=description)
        db.session.add(row)
    row.is_secret = True
    row.value = _obfuscate(value) if value else None
    row.updated_by_user_id = actor_user_id
    db.session.flush()

    audit.record("settings.secret_updated", actor_user_id, entity_type="settings", key=key)
    db.session.flush()
    return row


def get_secret(key):
    """Plain value of a secret setting, or None."""
    row = db.session.get(SystemSetting, key)
    if row is None or not row.value:
        return None
    return _reveal(row.value) if row.is_secret else row.value


@event.listens_for(Session, "after_commit")
def _invalidate_after_commit(session):
    """Invalidate once the saved rows are committed and visible to other sessions."""
    if session.info.pop(_STALE, False) and has_app_context():
        _cache().invalidate(CACHE_KEY)


@event.listens_for(Session, "after_rollback")
def _discard_on_rollback(session):
    session.info.pop(_STALE, None)
