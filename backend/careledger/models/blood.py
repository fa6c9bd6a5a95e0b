from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow
from ._ids import new_uuid


class BloodDonor(db.Model):
    """Blood donor application."""
    __tablename__ = "blood_donors"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(64), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    blood_group = db.Column(db.String(8), nullable=False)
    mobile_number = db.Column(db.String(32), nullable=False)
    address = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    admin_response = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


class BloodRequest(db.Model):
    """Request for blood units from a patient."""
    __tablename__ = "blood_requests"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(64), nullable=True, index=True)

    full_name = db.Column(db.String(255), nullable=False)
    blood_group = db.Column(db.String(8), nullable=False)
    phone_number = db.Column(db.String(32), nullable=False)
    address = db.Column(db.Text, nullable=False)
    emergency_level = db.Column(db.String(16), nullable=False, default="normal")
    delivery_instructions = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    admin_response = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
