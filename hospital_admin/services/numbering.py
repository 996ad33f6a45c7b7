"""Ticket number generation.

Formats:
  PREFIX-NNNNNN          e.g. VEH-000123   (people, registrations)
  PREFIX-YYYY-NNNN       e.g. WRK-2025-0001 (permits, per category and year)

The next number is one past the highest existing number with the same
prefix. Numbers are zero-padded so string ordering matches numeric order.
"""

from datetime import datetime, timezone

from hospital_admin.extensions import db


def _next_sequence(model, stem):
    latest = (
        db.session.query(model.ticket_number)
        .filter(model.ticket_number.like(f"{stem}%"))
        .order_by(model.ticket_number.desc())
        .first()
    )
    if latest is None or not latest[0]:
        return 1
    try:
        return int(latest[0][len(stem):]) + 1
    except ValueError:
        return 1


def next_ticket_number(model, prefix):
    """Return the next PREFIX-NNNNNN number for model."""
    stem = f"{prefix}-"
    return f"{stem}{_next_sequence(model, stem):06d}"


def next_yearly_ticket_number(model, prefix, year=None):
    """Return the next PREFIX-YYYY-NNNN number for model."""
    year = year or datetime.now(timezone.utc).year
    stem = f"{prefix}-{year}-"
    return f"{stem}{_next_sequence(model, stem):04d}"
