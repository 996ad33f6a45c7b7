"""Registration service — vehicles, import permits, company registrations.

The three models share one workflow, so one set of functions serves all
of them. Per-model rules come from class attributes on the model
(TICKET_PREFIX, CATEGORIES, SEARCH_FIELDS, UNIQUE_FIELD, DETAIL_FIELDS;
see hospital_admin.models.registration).

Functions flush but do NOT commit — the caller commits.
"""

from hospital_admin.errors import DuplicateRecord, RecordNotFound
from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.registration import (
    CompanyRegistration,
    ImportPermit,
    Vehicle,
)
from hospital_admin.services.numbering import next_ticket_number
from hospital_admin.services.validation import check_choice, parse_date, sanitize

# URL segment -> model
KINDS = {
    "vehicles": Vehicle,
    "imports": ImportPermit,
    "companies": CompanyRegistration,
}

COMMON_FIELDS = ("title", "description", "status", "current_stage", "due_date", "assignee", "documents")


def model_for(kind):
    model = KINDS.get(kind)
    if model is None:
        raise RecordNotFound("Registration type", kind)
    return model


def get_record(model, record_id):
    record = db.session.get(model, record_id)
    if record is None:
        raise RecordNotFound(model.__name__, record_id)
    return record


def _clean(model, data):
    values = {}
    for name in COMMON_FIELDS + tuple(model.DETAIL_FIELDS):
        if name not in data:
            continue
        value = data[name]
        if name == "due_date":
            value = parse_date(value, "due date")
        elif name == "status":
            value = check_choice(value or "pending", model.STATUSES, "status")
        elif name == "category":
            value = check_choice(value, model.CATEGORIES, "category")
        elif name == "stage":
            value = check_choice(value or "document_prep", model.STAGES, "stage")
        elif name == "documents":
            if value is None:
                value = []
            if not isinstance(value, list):
                raise ValueError("documents must be a list of URLs.")
            value = [str(v) for v in value]
        else:
            value = sanitize(value) or None
        values[name] = value
    return values


def _check_unique(model, values, exclude_id=None):
    field = model.UNIQUE_FIELD
    if not field or not values.get(field):
        return
    column = getattr(model, field)
    q = model.query.filter(column == values[field])
    if exclude_id:
        q = q.filter(model.id != exclude_id)
    existing = q.first()
    if existing is not None:
        label = field.replace("_", " ")
        raise DuplicateRecord(
            f"A {model.AUDIT_TYPE} with this {label} already exists.",
            code=f"DUPLICATE_{field.upper()}",
            existing_id=existing.id,
        )


def list_records(model, query=None, category=None, status=None, limit=50, offset=0):
    q = model.query
    if query:
        like = f"%{query}%"
        q = q.filter(
            db.or_(*[getattr(model, f).ilike(like) for f in model.SEARCH_FIELDS])
        )
    if category and model.CATEGORIES:
        q = q.filter(model.category == category)
    if status:
        q = q.filter(model.status == status)
    total = q.count()
    records = (
        q.order_by(model.created_at.desc(), model.ticket_number.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
    return records, total


def create_record(model, data, actor_user_id):
    """Create a registration record with a fresh ticket number.

    Raises:
        ValueError: Missing title/category or invalid field values.
        DuplicateRecord: UNIQUE_FIELD clash (plate number, company name).
    """
    values = _clean(model, data)
    if not values.get("title"):
        raise ValueError("Title is required.")
    if model.CATEGORIES and not values.get("category"):
        raise ValueError("Category is required.")
    _check_unique(model, values)

    record = model(
        ticket_number=next_ticket_number(model, model.TICKET_PREFIX),
        **values,
    )
    db.session.add(record)
    db.session.flush()

    audit.record(
        f"{model.AUDIT_TYPE}.created", actor_user_id, entity=record,
        ticket_number=record.ticket_number, title=record.title,
    )
    db.session.flush()
    return record


def update_record(model, record_id, data, actor_user_id):
    record = get_record(model, record_id)
    values = _clean(model, data)
    if "title" in values and not values["title"]:
        raise ValueError("Title is required.")
    _check_unique(model, values, exclude_id=record.id)

    old_status = record.status
    for name, value in values.items():
        setattr(record, name, value)
    db.session.flush()

    metadata = {"fields": sorted(values)}
    if record.status != old_status:
        metadata.update(from_status=old_status, to_status=record.status)
    audit.record(f"{model.AUDIT_TYPE}.updated", actor_user_id, entity=record, **metadata)
    db.session.flush()
    return record


def delete_record(model, record_id, actor_user_id):
    record = get_record(model, record_id)
    audit.record(
        f"{model.AUDIT_TYPE}.deleted", actor_user_id, entity=record,
        ticket_number=record.ticket_number,
    )
    db.session.delete(record)
    db.session.flush()


def record_stats(model):
    by_status = {status: 0 for status in model.STATUSES}
    for status, count in (
        db.session.query(model.status, db.func.count(model.id)).group_by(model.status)
    ):
        by_status[status] = count
    stats = {"total": sum(by_status.values()), "by_status": by_status}
    if model.CATEGORIES:
        by_category = {category: 0 for category in model.CATEGORIES}
        for category, count in (
            db.session.query(model.category, db.func.count(model.id))
            .group_by(model.category)
        ):
            by_category[category] = count
        stats["by_category"] = by_category
    return stats
