"""Audit event model.

Logs every significant action (task moves, permit transitions, record
edits, settings changes) for the dashboard activity feed.
"""

import uuid

from hospital_admin.extensions import db


class AuditEvent(db.Model):
    __tablename__ = "audit_events"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    actor_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    action = db.Column(db.String(255), nullable=False)  # e.g. "task.moved"
    entity_type = db.Column(db.String(50), nullable=True)  # e.g. "task"
    entity_id = db.Column(db.String(36), nullable=True)
    metadata_ = db.Column(
        "metadata", db.JSON, default=dict
    )  # extra context, named metadata_ to avoid clashing with Model.metadata
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    # --- Relationships ---
    actor = db.relationship("User", back_populates="audit_events")

    def to_dict(self):
        return {
            "id": self.id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor": self.actor.full_name if self.actor else None,
            "metadata": self.metadata_ or {},
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<AuditEvent {self.action}>"


def record(action, actor_user_id=None, entity=None, entity_type=None, **metadata):
    """Add an AuditEvent to the session (caller commits)."""
    if entity is not None:
        entity_type = entity_type or getattr(
            entity, "AUDIT_TYPE", type(entity).__name__.lower()
        )
    event = AuditEvent(
        actor_user_id=actor_user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity.id if entity is not None else None,
        metadata_=metadata,
    )
    db.session.add(event)
    return event
