"""Report model.

Report definitions (what to report, how often, in which format). Rendering
and generation happen outside this app; ``file_url`` points at the output.
"""

import uuid

from hospital_admin.extensions import db


class Report(db.Model):
    __tablename__ = "reports"

    STATUSES = ["DRAFT", "GENERATED", "PUBLISHED", "ARCHIVED"]
    FREQUENCIES = ["DAILY", "WEEKLY", "MONTHLY", "QUARTERLY", "YEARLY", "ON_DEMAND"]
    FORMATS = ["PDF", "EXCEL", "CSV", "DASHBOARD"]
    CATEGORIES = ["financial", "patient", "staff", "operations", "general"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), default="DRAFT", nullable=False)
    frequency = db.Column(db.String(20), default="ON_DEMAND", nullable=False)
    format = db.Column(db.String(20), default="PDF", nullable=False)
    category = db.Column(db.String(50), default="general", nullable=False)
    department = db.Column(db.String(255), nullable=True)
    parameters = db.Column(db.JSON, default=dict)
    file_url = db.Column(db.String(1000), nullable=True)
    last_generated = db.Column(db.DateTime(timezone=True), nullable=True)
    created_by_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    created_by = db.relationship("User")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "frequency": self.frequency,
            "format": self.format,
            "category": self.category,
            "department": self.department,
            "parameters": self.parameters or {},
            "file_url": self.file_url,
            "last_generated": self.last_generated.isoformat() if self.last_generated else None,
            "generated_by": self.created_by.full_name if self.created_by else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Report {self.title[:30]} ({self.status})>"
