"""Report service — report definitions and the cached statistics block.

report_stats() aggregates permits, tasks, people and expiring papers.
It is read through app.extensions["cache"] for REPORT_STATS_TTL seconds;
call invalidate_stats() after bulk changes that must show up at once.

Functions flush but do NOT commit — the caller commits.
"""

from datetime import datetime, timezone

from flask import current_app

from hospital_admin.errors import RecordNotFound
from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.report import Report
from hospital_admin.services import (
    document_service,
    people_service,
    permit_service,
    task_service,
)
from hospital_admin.services.validation import check_choice, sanitize

STATS_CACHE_KEY = "reports:stats"

CHOICE_FIELDS = {
    "status": Report.STATUSES,
    "frequency": Report.FREQUENCIES,
    "format": Report.FORMATS,
    "category": Report.CATEGORIES,
}


def get_report(report_id):
    report = db.session.get(Report, report_id)
    if report is None:
        raise RecordNotFound("Report", report_id)
    return report


def list_reports(status=None, category=None, query=None):
    q = Report.query
    if status:
        q = q.filter(Report.status == status)
    if category:
        q = q.filter(Report.category == category)
    if query:
        like = f"%{query}%"
        q = q.filter(db.or_(Report.title.ilike(like), Report.department.ilike(like)))
    return q.order_by(Report.created_at.desc()).all()


def _clean(data):
    values = {}
    for name in ("title", "description", "department"):
        if name in data:
            values[name] = sanitize(data[name]) or None
    for name, choices in CHOICE_FIELDS.items():
        if name in data:
            values[name] = check_choice(data[name], choices, name)
    if "parameters" in data:
        parameters = data["parameters"] or {}
        if not isinstance(parameters, dict):
            raise ValueError("parameters must be an object.")
        values["parameters"] = parameters
    if "file_url" in data:
        values["file_url"] = data["file_url"] or None
    return values


def create_report(data, actor_user_id):
    values = _clean(data)
    if not values.get("title"):
        raise ValueError("Title is required.")
    report = Report(created_by_user_id=actor_user_id, **values)
    db.session.add(report)
    db.session.flush()

    audit.record("report.created", actor_user_id, entity=report, title=report.title)
    db.session.flush()
    return report


def update_report(report_id, data, actor_user_id):
    report = get_report(report_id)
    values = _clean(data)
    if "title" in values and not values["title"]:
        raise ValueError("Title is required.")

    if values.get("status") == "GENERATED" and report.status != "GENERATED":
        report.last_generated = datetime.now(timezone.utc)
    for name, value in values.items():
        setattr(report, name, value)
    db.session.flush()

    audit.record("report.updated", actor_user_id, entity=report, fields=sorted(values))
    db.session.flush()
    return report


def delete_report(report_id, actor_user_id):
    report = get_report(report_id)
    audit.record("report.deleted", actor_user_id, entity=report, title=report.title)
    db.session.delete(report)
    db.session.flush()


def _compute_stats():
    return {
        "permits": permit_service.permit_stats(),
        "tasks": task_service.task_stats(),
        "people": people_service.people_stats(),
        "expiring_soon": {
            "permits": len(permit_service.expiring_permits(30)),
            "documents": len(document_service.expiring_documents(30)),
            "papers": len(people_service.expiring_papers(30)),
        },
        "reports": Report.query.count(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }


def report_stats():
    """Aggregate statistics, cached for REPORT_STATS_TTL seconds."""
    return current_app.extensions["cache"].get_or_load(
        STATS_CACHE_KEY,
        _compute_stats,
        ttl=current_app.config.get("REPORT_STATS_TTL", 60),
    )


def invalidate_stats():
    current_app.extensions["cache"].invalidate(STATS_CACHE_KEY)
