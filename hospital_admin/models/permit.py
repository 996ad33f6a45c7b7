"""Permit models.

- Permit: work permit / residence id / license / PIP application for a person.
- PermitHistory: one row per status change (who, from, to, when).

Ticket numbers look like WRK-2025-0001 and are sequenced per prefix and year.
"""

import uuid

from hospital_admin.extensions import db


class Permit(db.Model):
    __tablename__ = "permits"

    CATEGORIES = ["WORK_PERMIT", "RESIDENCE_ID", "LICENSE", "PIP"]
    STATUSES = ["PENDING", "SUBMITTED", "APPROVED", "REJECTED", "EXPIRED"]

    # -- Valid status transitions (enforced in permit_service) --
    VALID_TRANSITIONS = {
        "PENDING": ["SUBMITTED", "REJECTED"],
        "SUBMITTED": ["APPROVED", "REJECTED", "PENDING"],
        "APPROVED": ["EXPIRED"],
        "REJECTED": ["PENDING"],
        "EXPIRED": ["PENDING"],
    }

    TICKET_PREFIXES = {
        "WORK_PERMIT": "WRK",
        "RESIDENCE_ID": "RES",
        "LICENSE": "LIC",
        "PIP": "PIP",
    }

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    ticket_number = db.Column(db.String(50), unique=True, nullable=True)
    category = db.Column(db.String(50), nullable=False, index=True)
    status = db.Column(db.String(50), default="PENDING", nullable=False, index=True)
    person_id = db.Column(
        db.String(36), db.ForeignKey("people.id"), nullable=False, index=True
    )
    due_date = db.Column(db.Date, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    person = db.relationship("Person", back_populates="permits")
    tasks = db.relationship("Task", back_populates="permit", lazy="dynamic")
    history = db.relationship(
        "PermitHistory",
        back_populates="permit",
        lazy="dynamic",
        order_by="PermitHistory.changed_at",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "category": self.category,
            "status": self.status,
            "person_id": self.person_id,
            "person_name": self.person.full_name if self.person else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Permit {self.ticket_number} ({self.status})>"


class PermitHistory(db.Model):
    __tablename__ = "permit_history"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    permit_id = db.Column(
        db.String(36), db.ForeignKey("permits.id"), nullable=False
    )
    from_status = db.Column(db.String(50), nullable=False)
    to_status = db.Column(db.String(50), nullable=False)
    changed_by_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    notes = db.Column(db.Text, nullable=True)
    changed_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    permit = db.relationship("Permit", back_populates="history")
    changed_by = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "changed_by": self.changed_by.full_name if self.changed_by else None,
            "notes": self.notes,
            "changed_at": self.changed_at.isoformat() if self.changed_at else None,
        }

    def __repr__(self):
        return f"<PermitHistory {self.from_status}->{self.to_status}>"
