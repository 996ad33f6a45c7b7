"""System settings — key/value rows grouped by category.

Secret values are stored obfuscated and never returned by the API.
"""

from hospital_admin.extensions import db


class SystemSetting(db.Model):
    __tablename__ = "system_settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), default="general", nullable=False)
    description = db.Column(db.String(500), nullable=True)
    is_secret = db.Column(db.Boolean, default=False, nullable=False)
    updated_by_user_id = db.Column(
        db.String(36), db.ForeignKey("users.id"), nullable=True
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self):
        return {
            "key": self.key,
            "value": "••••••••" if self.is_secret else self.value,
            "has_value": bool(self.value),
            "category": self.category,
            "description": self.description,
            "is_secret": self.is_secret,
        }

    def __repr__(self):
        return f"<SystemSetting {self.key}>"
