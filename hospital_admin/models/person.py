"""Person model — foreign staff and their dependents.

Holds identity data plus the numbers and expiry dates of the papers the
hospital tracks (passport, medical license, work permit, residence id).
Dependents point at their guardian through guardian_id.
"""

import uuid

from hospital_admin.extensions import db


class Person(db.Model):
    __tablename__ = "people"

    AUDIT_TYPE = "person"
    TICKET_PREFIX = "FOR"
    GENDERS = ["MALE", "FEMALE"]
    FAMILY_STATUSES = ["MARRIED", "UNMARRIED"]

    # Paper kinds with "<kind>_no" and "<kind>_expiry_date" columns
    PAPERS = ["passport", "medical_license", "work_permit", "residence_id"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    ticket_number = db.Column(db.String(50), unique=True, nullable=True)
    first_name = db.Column(db.String(255), nullable=False)
    last_name = db.Column(db.String(255), nullable=False)
    nationality = db.Column(db.String(100), nullable=True)
    date_of_birth = db.Column(db.Date, nullable=True)
    gender = db.Column(db.String(10), nullable=True)
    family_status = db.Column(db.String(20), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    email = db.Column(db.String(255), nullable=True, index=True)
    photo_url = db.Column(db.String(1000), nullable=True)

    passport_no = db.Column(db.String(100), nullable=True, index=True)
    passport_expiry_date = db.Column(db.Date, nullable=True)
    medical_license_no = db.Column(db.String(100), nullable=True)
    medical_license_expiry_date = db.Column(db.Date, nullable=True)
    work_permit_no = db.Column(db.String(100), nullable=True)
    work_permit_expiry_date = db.Column(db.Date, nullable=True)
    residence_id_no = db.Column(db.String(100), nullable=True)
    residence_id_expiry_date = db.Column(db.Date, nullable=True)

    guardian_id = db.Column(
        db.String(36), db.ForeignKey("people.id"), nullable=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    guardian = db.relationship(
        "Person", remote_side=[id], backref=db.backref("dependents", lazy="dynamic")
    )
    permits = db.relationship("Permit", back_populates="person", lazy="dynamic")
    documents = db.relationship("Document", back_populates="person", lazy="dynamic")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        data = {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "nationality": self.nationality,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "gender": self.gender,
            "family_status": self.family_status,
            "phone": self.phone,
            "email": self.email,
            "photo_url": self.photo_url,
            "guardian_id": self.guardian_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        for paper in self.PAPERS:
            expiry = getattr(self, f"{paper}_expiry_date")
            data[f"{paper}_no"] = getattr(self, f"{paper}_no")
            data[f"{paper}_expiry_date"] = expiry.isoformat() if expiry else None
        return data

    def __repr__(self):
        return f"<Person {self.full_name}>"
