from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow
from ._ids import new_uuid


class SupportTicket(db.Model):
    __tablename__ = "support_tickets"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(64), nullable=True, index=True)

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    priority = db.Column(db.String(8), nullable=False, default="medium")
    status = db.Column(db.String(16), nullable=False, default="open", index=True)
    admin_response = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


class SystemAlert(db.Model):
    """Operational alert. is_resolved toggles freely in both directions."""
    __tablename__ = "system_alerts"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)

    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(16), nullable=False, default="info")
    severity = db.Column(db.String(8), nullable=False, default="medium")
    is_resolved = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
