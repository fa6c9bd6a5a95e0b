from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow
from ._ids import new_uuid


class HospitalBed(db.Model):
    """
    Bed inventory for one bed type.

    bed_type is the logical key but is NOT unique: seed scripts and concurrent
    admin sessions have left duplicate rows. Readers must canonicalize.
    """
    __tablename__ = "hospital_beds"
    __table_args__ = (
        db.CheckConstraint("available_beds >= 0", name="ck_hospital_beds_available_nonneg"),
        db.CheckConstraint("total_beds >= 0", name="ck_hospital_beds_total_nonneg"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    bed_type = db.Column(db.String(64), nullable=False, index=True)
    total_beds = db.Column(db.Integer, nullable=False, default=0)
    available_beds = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


class OperationTheater(db.Model):
    """Operation theater availability. name is the (non-unique) logical key."""
    __tablename__ = "operation_theater"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    name = db.Column(db.String(128), nullable=False, index=True)
    is_available = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


class BedBooking(db.Model):
    """Patient bed booking. Admin mutates admission_status only."""
    __tablename__ = "bed_bookings"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    booking_id = db.Column(db.String(32), nullable=False, unique=True)
    patient_user_id = db.Column(db.String(64), nullable=True, index=True)

    patient_name = db.Column(db.String(255), nullable=False)
    patient_age = db.Column(db.Integer, nullable=False)
    patient_gender = db.Column(db.String(16), nullable=False)
    disease = db.Column(db.String(255), nullable=False)
    preferred_bed_type = db.Column(db.String(64), nullable=False)
    is_emergency = db.Column(db.Boolean, nullable=False, default=False)

    admission_status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    payment_status = db.Column(db.String(16), nullable=False, default="pending")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
