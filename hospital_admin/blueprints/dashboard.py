"""Dashboard blueprint — GET /api/dashboard

One call for the landing screen: headline counts, overdue work and the
latest audit activity.
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import api_auth
from hospital_admin.models.audit import AuditEvent
from hospital_admin.models.registration import CompanyRegistration, ImportPermit, Vehicle
from hospital_admin.services import permit_service, report_service, task_service
from hospital_admin.services.settings_service import get_setting

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.route("")
@api_auth
def dashboard():
    activity_limit = min(request.args.get("activity", 10, type=int), 50)
    days = get_setting("alerts.alert_days_before")

    stats = report_service.report_stats()
    recent = (
        AuditEvent.query.order_by(AuditEvent.created_at.desc())
        .limit(activity_limit)
        .all()
    )
    return jsonify({
        "organization": get_setting("organization.name"),
        "counts": {
            "people": stats["people"]["total"],
            "permits": stats["permits"]["total"],
            "tasks": stats["tasks"]["total"],
            "vehicles": Vehicle.query.count(),
            "imports": ImportPermit.query.count(),
            "companies": CompanyRegistration.query.count(),
        },
        "tasks_by_status": stats["tasks"]["by_status"],
        "overdue_tasks": [t.to_dict() for t in task_service.overdue_tasks()],
        "expiring_permits": [p.to_dict() for p in permit_service.expiring_permits(days)],
        "recent_activity": [e.to_dict() for e in recent],
    })
