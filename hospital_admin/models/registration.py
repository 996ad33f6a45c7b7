"""Registration case files — vehicles, import permits, company registrations.

All three are tracked the same way: a ticket number, a title, a workflow
status and stage, a due date, an assignee and a list of document URLs.
The shared columns live on RegistrationMixin; each model adds its own
details plus the class-level rules registration_service reads:

  TICKET_PREFIX   — prefix for generated ticket numbers
  CATEGORIES      — allowed category values (empty = no category field)
  SEARCH_FIELDS   — columns matched by the ?q= search
  UNIQUE_FIELD    — column that must be unique when set (or None)
"""

import uuid

from hospital_admin.extensions import db


class RegistrationMixin:
    STATUSES = ["pending", "in-progress", "completed"]
    CATEGORIES = []
    SEARCH_FIELDS = ["title", "description"]
    UNIQUE_FIELD = None
    # Detail columns accepted by create/update on top of the shared ones
    DETAIL_FIELDS = []

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    ticket_number = db.Column(db.String(50), unique=True, nullable=True)
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(50), default="pending", nullable=False)
    current_stage = db.Column(db.String(100), nullable=True)
    due_date = db.Column(db.Date, nullable=True)
    assignee = db.Column(db.String(255), nullable=True)
    documents = db.Column(db.JSON, default=list)  # list of file URLs
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self):
        data = {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "current_stage": self.current_stage,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "assignee": self.assignee,
            "documents": self.documents or [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        for name in self.DETAIL_FIELDS:
            data[name] = getattr(self, name)
        return data

    def __repr__(self):
        return f"<{type(self).__name__} {self.ticket_number} {self.title[:30]}>"


class Vehicle(RegistrationMixin, db.Model):
    __tablename__ = "vehicles"

    AUDIT_TYPE = "vehicle"
    TICKET_PREFIX = "VEH"
    CATEGORIES = ["inspection", "road_fund", "insurance", "road_transport"]
    SEARCH_FIELDS = ["title", "vehicle_info", "plate_number"]
    UNIQUE_FIELD = "plate_number"
    DETAIL_FIELDS = [
        "category",
        "vehicle_info",
        "plate_number",
        "vehicle_type",
        "vehicle_model",
        "vehicle_year",
        "owner_name",
        "current_mileage",
        "chassis_number",
        "engine_number",
        "service_type",
    ]

    category = db.Column(db.String(50), nullable=False)
    vehicle_info = db.Column(db.String(500), nullable=True)
    plate_number = db.Column(db.String(50), nullable=True, index=True)
    vehicle_type = db.Column(db.String(100), nullable=True)
    vehicle_model = db.Column(db.String(100), nullable=True)
    vehicle_year = db.Column(db.String(10), nullable=True)
    owner_name = db.Column(db.String(255), nullable=True)
    current_mileage = db.Column(db.String(50), nullable=True)
    chassis_number = db.Column(db.String(100), nullable=True)
    engine_number = db.Column(db.String(100), nullable=True)
    service_type = db.Column(db.String(100), nullable=True)


class ImportPermit(RegistrationMixin, db.Model):
    __tablename__ = "import_permits"

    AUDIT_TYPE = "import"
    TICKET_PREFIX = "IMP"
    CATEGORIES = ["pip", "single_window"]
    DETAIL_FIELDS = [
        "category",
        "supplier_name",
        "supplier_country",
        "item_description",
        "estimated_value",
        "currency",
        "import_type",
    ]

    category = db.Column(db.String(50), nullable=False)
    supplier_name = db.Column(db.String(255), nullable=True)
    supplier_country = db.Column(db.String(100), nullable=True)
    item_description = db.Column(db.Text, nullable=True)
    estimated_value = db.Column(db.String(50), nullable=True)
    currency = db.Column(db.String(10), nullable=True)
    import_type = db.Column(db.String(100), nullable=True)


class CompanyRegistration(RegistrationMixin, db.Model):
    __tablename__ = "company_registrations"

    AUDIT_TYPE = "company"
    TICKET_PREFIX = "CMP"
    STAGES = ["document_prep", "apply_online", "approval", "completed"]
    SEARCH_FIELDS = ["title", "description", "company_name"]
    UNIQUE_FIELD = "company_name"
    DETAIL_FIELDS = ["stage", "company_name", "registration_type"]

    stage = db.Column(db.String(50), default="document_prep", nullable=False)
    company_name = db.Column(db.String(255), nullable=True, index=True)
    registration_type = db.Column(db.String(100), nullable=True)
