"""Task model — cards on the Kanban board.

``status`` is the board column; ``position`` is the card's index inside
that column (manual order, not priority).
"""

import uuid

from hospital_admin.board import DEFAULT_COLUMNS, PRIORITIES
from hospital_admin.extensions import db


class Task(db.Model):
    __tablename__ = "tasks"
    __table_args__ = (db.Index("ix_tasks_status_position", "status", "position"),)

    STATUSES = [col_id for col_id, _ in DEFAULT_COLUMNS]
    PRIORITIES = list(PRIORITIES)

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, default="")
    status = db.Column(db.String(50), default="pending", nullable=False)
    priority = db.Column(db.String(20), default="medium", nullable=False)
    category = db.Column(db.String(100), nullable=True)  # free label, e.g. "Records"
    due_date = db.Column(db.Date, nullable=True)
    assignee = db.Column(db.String(255), nullable=True)  # display name
    notes = db.Column(db.Text, nullable=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    permit_id = db.Column(
        db.String(36), db.ForeignKey("permits.id"), nullable=True
    )
    created_by_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    permit = db.relationship("Permit", back_populates="tasks")
    created_by = db.relationship("User")

    def board_record(self):
        """Plain mapping accepted by BoardTask.from_record."""
        return {
            "id": self.id,
            "title": self.title,
            "column": self.status,
            "description": self.description or "",
            "priority": self.priority,
            "category": self.category or "",
            "due_date": self.due_date,
            "assignee": self.assignee or "",
        }

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description or "",
            "status": self.status,
            "priority": self.priority,
            "category": self.category,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "assignee": self.assignee,
            "notes": self.notes,
            "position": self.position,
            "permit_id": self.permit_id,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Task {self.title[:40]} ({self.status})>"
