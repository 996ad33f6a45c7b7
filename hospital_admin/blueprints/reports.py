"""Reports blueprint — /api/reports/*

Route Map:
  GET    /api/reports           — List (status, category, q)
  POST   /api/reports           — Create
  GET    /api/reports/stats     — Cached statistics (?refresh=1 recomputes)
  GET    /api/reports/<id>      — Detail
  PUT    /api/reports/<id>      — Update
  DELETE /api/reports/<id>      — Delete
"""

from flask import Blueprint, jsonify, request

from hospital_admin.decorators import actor_id, api_auth
from hospital_admin.extensions import db
from hospital_admin.services import report_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.route("", methods=["GET"])
@api_auth
def list_reports():
    reports = report_service.list_reports(
        status=request.args.get("status"),
        category=request.args.get("category"),
        query=request.args.get("q"),
    )
    return jsonify({"reports": [r.to_dict() for r in reports], "total": len(reports)})


@reports_bp.route("", methods=["POST"])
@api_auth
def create_report():
    report = report_service.create_report(request.get_json(silent=True) or {}, actor_id())
    db.session.commit()
    return jsonify(report.to_dict()), 201


@reports_bp.route("/stats")
@api_auth
def stats():
    if request.args.get("refresh"):
        report_service.invalidate_stats()
    return jsonify(report_service.report_stats())


@reports_bp.route("/<report_id>")
@api_auth
def get_report(report_id):
    return jsonify(report_service.get_report(report_id).to_dict())


@reports_bp.route("/<report_id>", methods=["PUT"])
@api_auth
def update_report(report_id):
    report = report_service.update_report(
        report_id, request.get_json(silent=True) or {}, actor_id()
    )
    db.session.commit()
    return jsonify(report.to_dict())


@reports_bp.route("/<report_id>", methods=["DELETE"])
@api_auth
def delete_report(report_id):
    report_service.delete_report(report_id, actor_id())
    db.session.commit()
    return jsonify({"success": True})
