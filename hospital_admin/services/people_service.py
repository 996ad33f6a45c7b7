"""People service — foreign staff records and their dependents.

Rules:
  - first and last name are required
  - guardian_id must reference an existing person (and not the person itself)
  - passport numbers are unique
  - a person with permits on file cannot be deleted

Functions flush but do NOT commit — the caller commits.
"""

from datetime import date, timedelta

from hospital_admin.errors import DuplicateRecord, RecordNotFound
from hospital_admin.extensions import db
from hospital_admin.models import audit
from hospital_admin.models.permit import Permit
from hospital_admin.models.person import Person
from hospital_admin.services.numbering import next_ticket_number
from hospital_admin.services.validation import check_choice, parse_date, sanitize

DATE_FIELDS = {"date_of_birth"} | {f"{p}_expiry_date" for p in Person.PAPERS}
TEXT_FIELDS = {
    "first_name",
    "last_name",
    "nationality",
    "phone",
    "email",
    "photo_url",
} | {f"{p}_no" for p in Person.PAPERS}
CHOICE_FIELDS = {
    "gender": Person.GENDERS,
    "family_status": Person.FAMILY_STATUSES,
}
FIELDS = DATE_FIELDS | TEXT_FIELDS | set(CHOICE_FIELDS) | {"guardian_id"}


def get_person(person_id):
    person = db.session.get(Person, person_id)
    if person is None:
        raise RecordNotFound("Person", person_id)
    return person


def _clean(data, person=None):
    values = {}
    for name, value in data.items():
        if name not in FIELDS:
            continue
        if name in DATE_FIELDS:
            values[name] = parse_date(value, name.replace("_", " "))
        elif name in CHOICE_FIELDS:
            values[name] = (
                check_choice(value, CHOICE_FIELDS[name], name) if value else None
            )
        elif name == "guardian_id":
            if value:
                if person is not None and value == person.id:
                    raise ValueError("A person cannot be their own guardian.")
                get_person(value)
            values[name] = value or None
        else:
            values[name] = sanitize(value) or None
    if "email" in values and values["email"]:
        values["email"] = values["email"].lower()
    return values


def _check_passport(passport_no, exclude_id=None):
    if not passport_no:
        return
    q = Person.query.filter(Person.passport_no == passport_no)
    if exclude_id:
        q = q.filter(Person.id != exclude_id)
    existing = q.first()
    if existing is not None:
        raise DuplicateRecord(
            "A person with this passport number already exists.",
            code="DUPLICATE_PASSPORT_NUMBER",
            existing_id=existing.id,
        )


def list_people(query=None, nationality=None, limit=50, offset=0):
    q = Person.query
    if query:
        like = f"%{query}%"
        q = q.filter(
            db.or_(
                Person.first_name.ilike(like),
                Person.last_name.ilike(like),
                Person.passport_no.ilike(like),
                Person.ticket_number.ilike(like),
            )
        )
    if nationality:
        q = q.filter(Person.nationality == nationality)
    total = q.count()
    people = (
        q.order_by(Person.created_at.desc(), Person.last_name)
        .limit(limit)
        .offset(offset)
        .all()
    )
    return people, total


def create_person(data, actor_user_id):
    """Create a person record.

    Raises:
        ValueError: If names are missing or a field is invalid.
        RecordNotFound: If guardian_id does not exist.
        DuplicateRecord: If the passport number is already on file.
    """
    values = _clean(data)
    if not values.get("first_name") or not values.get("last_name"):
        raise ValueError("First name and last name are required.")
    _check_passport(values.get("passport_no"))

    person = Person(
        ticket_number=next_ticket_number(Person, Person.TICKET_PREFIX),
        **values,
    )
    db.session.add(person)
    db.session.flush()

    audit.record(
        "person.created", actor_user_id, entity=person, name=person.full_name,
    )
    db.session.flush()
    return person


def update_person(person_id, data, actor_user_id):
    person = get_person(person_id)
    values = _clean(data, person=person)
    for name in ("first_name", "last_name"):
        if name in values and not values[name]:
            raise ValueError("First name and last name are required.")
    if values.get("passport_no"):
        _check_passport(values["passport_no"], exclude_id=person.id)

    for name, value in values.items():
        setattr(person, name, value)
    db.session.flush()

    audit.record(
        "person.updated", actor_user_id, entity=person, fields=sorted(values),
    )
    db.session.flush()
    return person


def delete_person(person_id, actor_user_id):
    """Delete a person. Dependents are detached, not deleted.

    Raises:
        ValueError: If the person still has permits.
    """
    person = get_person(person_id)
    if person.permits.count():
        raise ValueError(
            "This person has permits on file. Delete the permits first."
        )
    for dependent in person.dependents:
        dependent.guardian_id = None

    audit.record(
        "person.deleted", actor_user_id, entity=person, name=person.full_name,
    )
    db.session.delete(person)
    db.session.flush()


def get_dependents(guardian_id):
    get_person(guardian_id)
    return (
        Person.query.filter_by(guardian_id=guardian_id)
        .order_by(Person.first_name)
        .all()
    )


def expiring_papers(days_ahead=30, today=None):
    """Return [(person, paper, expiry_date)] for papers expiring soon."""
    today = today or date.today()
    horizon = today + timedelta(days=days_ahead)
    results = []
    for paper in Person.PAPERS:
        column = getattr(Person, f"{paper}_expiry_date")
        for person in Person.query.filter(column.isnot(None), column <= horizon):
            results.append((person, paper, getattr(person, f"{paper}_expiry_date")))
    results.sort(key=lambda item: item[2])
    return results


def people_stats():
    total = Person.query.count()
    dependents = Person.query.filter(Person.guardian_id.isnot(None)).count()
    with_permits = (
        db.session.query(db.func.count(db.distinct(Permit.person_id))).scalar() or 0
    )
    return {
        "total": total,
        "staff": total - dependents,
        "dependents": dependents,
        "with_permits": with_permits,
    }
