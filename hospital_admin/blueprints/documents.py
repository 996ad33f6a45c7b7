"""Documents blueprint — /api/documents/*

Scanned papers. Uploads are multipart/form-data with a ``file`` part plus
metadata fields; the bytes go straight to storage_service.

Route Map:
  GET    /api/documents              — List (person_id, status, type)
  POST   /api/documents              — Upload (multipart)
  GET    /api/documents/expiring     — Expiring within ?days= (default 30)
  GET    /api/documents/<id>         — Detail
  GET    /api/documents/<id>/file    — Download the stored bytes
  PUT    /api/documents/<id>         — Update metadata
  DELETE /api/documents/<id>         — Delete row + stored file
"""

import logging

from flask import Blueprint, Response, jsonify, request

from hospital_admin.decorators import actor_id, api_auth
from hospital_admin.extensions import db, limiter
from hospital_admin.services import document_service

logger = logging.getLogger(__name__)

documents_bp = Blueprint("documents", __name__, url_prefix="/api/documents")


@documents_bp.route("", methods=["GET"])
@api_auth
def list_documents():
    documents = document_service.list_documents(
        person_id=request.args.get("person_id"),
        status=request.args.get("status"),
        doc_type=request.args.get("type"),
    )
    return jsonify({"documents": [d.to_dict() for d in documents], "total": len(documents)})


@documents_bp.route("", methods=["POST"])
@api_auth
@limiter.limit("30 per minute")
def upload_document():
    file = request.files.get("file")
    document = document_service.upload_document(file, request.form, actor_id())
    db.session.commit()
    logger.info(f"Document {document.id} uploaded ({document.human_size})")
    return jsonify(document.to_dict()), 201


@documents_bp.route("/expiring")
@api_auth
def expiring():
    days = request.args.get("days", 30, type=int)
    documents = document_service.expiring_documents(days)
    return jsonify({"days": days, "documents": [d.to_dict() for d in documents]})


@documents_bp.route("/<document_id>")
@api_auth
def get_document(document_id):
    return jsonify(document_service.get_document(document_id).to_dict())


@documents_bp.route("/<document_id>/file")
@api_auth
def download_document(document_id):
    document, data, content_type = document_service.open_document(document_id)
    filename = (document.filename or "document").replace('"', "")
    return Response(
        data,
        content_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@documents_bp.route("/<document_id>", methods=["PUT"])
@api_auth
def update_document(document_id):
    document = document_service.update_document(
        document_id, request.get_json(silent=True) or {}, actor_id()
    )
    db.session.commit()
    return jsonify(document.to_dict())


@documents_bp.route("/<document_id>", methods=["DELETE"])
@api_auth
def delete_document(document_id):
    document_service.delete_document(document_id, actor_id())
    db.session.commit()
    return jsonify({"success": True})
