"""Document model — scanned papers attached to a person (or standalone).

The file itself lives in object storage; this row keeps its metadata.
"""

import uuid

from hospital_admin.extensions import db


class Document(db.Model):
    __tablename__ = "documents"

    STATUSES = ["pending", "approved", "review"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    type = db.Column(db.String(100), nullable=False)  # e.g. passport, medical_license
    title = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(20), default="pending", nullable=False)
    issued_by = db.Column(db.String(255), nullable=True)
    number = db.Column(db.String(100), nullable=True)
    issue_date = db.Column(db.Date, nullable=True)
    expiry_date = db.Column(db.Date, nullable=True)
    filename = db.Column(db.String(255), nullable=True)       # original filename
    storage_path = db.Column(db.String(500), nullable=True)   # path in bucket / on disk
    file_url = db.Column(db.String(1000), nullable=True)      # public URL for display
    file_size = db.Column(db.Integer, nullable=True)          # bytes
    mime_type = db.Column(db.String(100), nullable=True)
    person_id = db.Column(
        db.String(36), db.ForeignKey("people.id"), nullable=True
    )
    uploaded_by_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    person = db.relationship("Person", back_populates="documents")

    @property
    def human_size(self):
        """Return human-readable file size."""
        if not self.file_size:
            return None
        if self.file_size < 1024:
            return f"{self.file_size} B"
        elif self.file_size < 1024 * 1024:
            return f"{self.file_size / 1024:.1f} KB"
        else:
            return f"{self.file_size / (1024 * 1024):.1f} MB"

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "status": self.status,
            "issued_by": self.issued_by,
            "number": self.number,
            "issue_date": self.issue_date.isoformat() if self.issue_date else None,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "filename": self.filename,
            "file_url": self.file_url,
            "file_size": self.file_size,
            "human_size": self.human_size,
            "mime_type": self.mime_type,
            "person_id": self.person_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Document {self.type} {self.filename}>"
