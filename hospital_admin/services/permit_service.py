"""Permit service — CRUD, status machine, history, expiry queries.

Status transitions are enforced via Permit.VALID_TRANSITIONS and every
change is written to permit_history. Ticket numbers are
{WRK|RES|LIC|PIP}-{YEAR}-{NNNN}.

Functions flush but do NOT commit — the caller commits.
"""

import logging
from datetime import date, datetime, timedelta, timezone

from hospital_admin.errors import RecordNotFound
from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.permit import Permit, PermitHistory
from hospital_admin.models.person import Person
from hospital_admin.services.numbering import next_yearly_ticket_number
from hospital_admin.services.validation import check_choice, parse_date, sanitize

logger = logging.getLogger(__name__)


def get_permit(permit_id_or_ticket):
    """Look a permit up by id, falling back to its ticket number."""
    permit = db.session.get(Permit, permit_id_or_ticket)
    if permit is None:
        permit = Permit.query.filter_by(ticket_number=permit_id_or_ticket).first()
    if permit is None:
        raise RecordNotFound("Permit", permit_id_or_ticket)
    return permit


def list_permits(category=None, status=None, person_id=None, due_before=None,
                 limit=50, offset=0):
    q = Permit.query
    if category:
        q = q.filter(Permit.category == category)
    if status:
        q = q.filter(Permit.status == status)
    if person_id:
        q = q.filter(Permit.person_id == person_id)
    if due_before:
        q = q.filter(Permit.due_date.isnot(None), Permit.due_date <= parse_date(due_before))
    total = q.count()
    permits = (
        q.order_by(Permit.created_at.desc(), Permit.ticket_number.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return permits, total


def create_permit(person_id, category, actor_user_id, due_date=None, notes=None):
    """Open a new permit in PENDING.

    Raises:
        ValueError: Invalid category or due date.
        RecordNotFound: Unknown person.
    """
    check_choice(category, Permit.CATEGORIES, "category")
    if not person_id or db.session.get(Person, person_id) is None:
        raise RecordNotFound("Person", person_id)

    permit = Permit(
        ticket_number=next_yearly_ticket_number(
            Permit, Permit.TICKET_PREFIXES[category]
        ),
        category=category,
        status="PENDING",
        person_id=person_id,
        due_date=parse_date(due_date, "due date"),
        notes=sanitize(notes) or None,
    )
    db.session.add(permit)
    db.session.flush()

    audit.record(
        "permit.created", actor_user_id, entity=permit,
        ticket_number=permit.ticket_number, category=category,
    )
    db.session.flush()
    return permit


def update_permit(permit_id, data, actor_user_id):
    """Update due date / notes. Status goes through transition_status.

    The category is fixed once created because the ticket number prefix
    (WRK, RES, LIC, PIP) is derived from it.
    """
    permit = get_permit(permit_id)
    if "status" in data and data["status"] != permit.status:
        raise ValueError("Use the status transition endpoint to change status.")
    if "category" in data and data["category"] != permit.category:
        raise ValueError("Category cannot change; create a new permit instead.")

    changed = []
    if "due_date" in data:
        permit.due_date = parse_date(data["due_date"], "due date")
        changed.append("due_date")
    if "notes" in data:
        permit.notes = sanitize(data["notes"]) or None
        changed.append("notes")
    db.session.flush()

    audit.record("permit.updated", actor_user_id, entity=permit, fields=changed)
    db.session.flush()
    return permit


def transition_status(permit_id, new_status, actor_user_id, notes=None):
    """Change a permit's status, enforcing valid transitions.

    Returns:
        The updated Permit (unchanged if already in new_status).

    Raises:
        ValueError: Unknown status or transition not allowed.
        RecordNotFound: Unknown permit.
    """
    permit = get_permit(permit_id)
    check_choice(new_status, Permit.STATUSES, "status")

    old_status = permit.status
    if old_status == new_status:
        return permit  # no-op

    allowed = Permit.VALID_TRANSITIONS.get(old_status, [])
    if new_status not in allowed:
        raise ValueError(
            f"Cannot transition from '{old_status}' to '{new_status}'. "
            f"Allowed: {', '.join(allowed) if allowed else 'none'}"
        )

    permit.status = new_status
    db.session.add(PermitHistory(
        permit_id=permit.id,
        from_status=old_status,
        to_status=new_status,
        changed_by_user_id=actor_user_id,
        notes=sanitize(notes) or f"Status changed from {old_status} to {new_status}",
        changed_at=datetime.now(timezone.utc),
    ))
    db.session.flush()

    audit.record(
        "permit.status_changed", actor_user_id, entity=permit,
        from_status=old_status, to_status=new_status,
    )
    db.session.flush()

    logger.info(f"Permit {permit.ticket_number}: {old_status} -> {new_status}")
    return permit


def delete_permit(permit_id, actor_user_id):
    """Delete a permit and its history.

    Raises:
        ValueError: If tasks still reference the permit.
    """
    permit = get_permit(permit_id)
    if permit.tasks.count():
        raise ValueError(
            "This permit has tasks linked to it. Delete or unlink them first."
        )
    audit.record(
        "permit.deleted", actor_user_id, entity=permit,
        ticket_number=permit.ticket_number,
    )
    PermitHistory.query.filter_by(permit_id=permit.id).delete()
    db.session.delete(permit)
    db.session.flush()


def get_history(permit_id):
    permit = get_permit(permit_id)
    return permit.history.all()


def expiring_permits(days_ahead=30, today=None):
    """Open permits whose due date falls within days_ahead (or has passed)."""
    today = today or date.today()
    return (
        Permit.query.filter(
            Permit.due_date.isnot(None),
            Permit.due_date <= today + timedelta(days=days_ahead),
            Permit.status.in_(["PENDING", "SUBMITTED", "APPROVED"]),
        )
        .order_by(Permit.due_date)
        .all()
    )


def permit_stats(today=None):
    by_status = {status: 0 for status in Permit.STATUSES}
    for status, count in (
        db.session.query(Permit.status, db.func.count(Permit.id)).group_by(Permit.status)
    ):
        by_status[status] = count
    by_category = {category: 0 for category in Permit.CATEGORIES}
    for category, count in (
        db.session.query(Permit.category, db.func.count(Permit.id))
        .group_by(Permit.category)
    ):
        by_category[category] = count
    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_category": by_category,
        "expiring_soon": len(expiring_permits(30, today)),
    }
