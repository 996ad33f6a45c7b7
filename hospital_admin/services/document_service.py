"""Document service — upload, metadata edits, expiry queries.

Files go through storage_service; this module only keeps the rows.
Functions flush but do NOT commit — the caller commits.
"""

import logging
from datetime import date, timedelta

from hospital_admin.errors import RecordNotFound
from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.document import Document
from hospital_admin.models.person import Person
from hospital_admin.services import storage_service
from hospital_admin.services.validation import check_choice, parse_date, sanitize

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("type", "title", "status", "issued_by", "number", "issue_date", "expiry_date")


def get_document(document_id):
    document = db.session.get(Document, document_id)
    if document is None:
        raise RecordNotFound("Document", document_id)
    return document


def list_documents(person_id=None, status=None, doc_type=None):
    q = Document.query
    if person_id:
        q = q.filter(Document.person_id == person_id)
    if status:
        q = q.filter(Document.status == status)
    if doc_type:
        q = q.filter(Document.type == doc_type)
    return q.order_by(Document.created_at.desc()).all()


def _clean(data):
    values = {}
    for name in EDITABLE_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if name in ("issue_date", "expiry_date"):
            value = parse_date(value, name.replace("_", " "))
        elif name == "status":
            value = check_choice(value or "pending", Document.STATUSES, "status")
        else:
            value = sanitize(value) or None
        values[name] = value
    issue, expiry = values.get("issue_date"), values.get("expiry_date")
    if issue and expiry and expiry < issue:
        raise ValueError("Expiry date cannot be before issue date.")
    return values


def upload_document(file, data, actor_user_id):
    """Validate and store an uploaded file, then record its metadata.

    Args:
        file: Werkzeug FileStorage.
        data: Form fields (type is required; person_id optional).
        actor_user_id: Uploader.

    Raises:
        ValueError: Bad file or invalid metadata.
        RecordNotFound: Unknown person_id.
    """
    ok, error = storage_service.validate_file(file)
    if not ok:
        raise ValueError(error)

    values = _clean(data)
    if not values.get("type"):
        raise ValueError("Document type is required.")

    person_id = data.get("person_id") or None
    if person_id and db.session.get(Person, person_id) is None:
        raise RecordNotFound("Person", person_id)

    meta = storage_service.upload_file(file, person_id or "general")

    document = Document(
        person_id=person_id,
        filename=meta["filename"],
        storage_path=meta["storage_path"],
        file_url=meta["public_url"],
        file_size=meta["file_size"],
        mime_type=meta["content_type"],
        uploaded_by_user_id=actor_user_id,
        **values,
    )
    document.title = document.title or meta["filename"]
    db.session.add(document)
    db.session.flush()

    audit.record(
        "document.uploaded", actor_user_id, entity=document,
        filename=document.filename, type=document.type,
    )
    db.session.flush()
    return document


def update_document(document_id, data, actor_user_id):
    document = get_document(document_id)
    values = _clean(data)
    if "type" in values and not values["type"]:
        raise ValueError("Document type is required.")

    issue = values.get("issue_date", document.issue_date)
    expiry = values.get("expiry_date", document.expiry_date)
    if issue and expiry and expiry < issue:
        raise ValueError("Expiry date cannot be before issue date.")

    for name, value in values.items():
        setattr(document, name, value)
    db.session.flush()

    audit.record("document.updated", actor_user_id, entity=document, fields=sorted(values))
    db.session.flush()
    return document


def open_document(document_id):
    """Return (document, bytes, content_type) for a download."""
    document = get_document(document_id)
    if not document.storage_path:
        raise RecordNotFound("File", document_id)
    data, content_type = storage_service.read_file(document.storage_path)
    return document, data, document.mime_type or content_type


def delete_document(document_id, actor_user_id):
    """Delete the row; the stored file is removed best effort."""
    document = get_document(document_id)
    if document.storage_path:
        storage_service.delete_file(document.storage_path)
    audit.record(
        "document.deleted", actor_user_id, entity=document, filename=document.filename,
    )
    db.session.delete(document)
    db.session.flush()


def expiring_documents(days_ahead=30, today=None):
    today = today or date.today()
    return (
        Document.query.filter(
            Document.expiry_date.isnot(None),
            Document.expiry_date <= today + timedelta(days=days_ahead),
        )
        .order_by(Document.expiry_date)
        .all()
    )
