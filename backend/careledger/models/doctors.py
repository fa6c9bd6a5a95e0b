from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow
from ._ids import new_uuid


class DoctorVerificationRequest(db.Model):
    """
    Dedicated credential request row submitted at doctor registration.

    One of the two source shapes for a pending doctor; the other is an
    unapproved DoctorProfile row.
    """
    __tablename__ = "doctor_verification_requests"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    applicant_user_id = db.Column(db.String(64), nullable=True, index=True)

    full_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    specialization = db.Column(db.String(128), nullable=False)
    years_experience = db.Column(db.Integer, nullable=False, default=0)
    hospital_affiliation = db.Column(db.String(255), nullable=True)
    medical_license = db.Column(db.String(128), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    photo_url = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    reviewed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    reviewed_by = db.Column(db.String(255), nullable=True)

    submitted_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


class DoctorProfile(db.Model):
    """Public doctor listing. Approved rows are the Verified Doctor Profile."""
    __tablename__ = "doctor_profiles"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)

    doctor_name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    specialization = db.Column(db.String(128), nullable=False)
    hospital_name = db.Column(db.String(255), nullable=True)
    clinic_name = db.Column(db.String(255), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    years_experience = db.Column(db.Integer, nullable=True)
    consultation_fee = db.Column(db.Integer, nullable=True)
    medical_license = db.Column(db.String(128), nullable=True)
    bio = db.Column(db.Text, nullable=True)
    profile_image_url = db.Column(db.Text, nullable=True)

    is_approved = db.Column(db.Boolean, nullable=False, default=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


class Account(db.Model):
    """Platform account; role decides which dashboard the user sees."""
    __tablename__ = "profiles"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    email = db.Column(db.String(255), nullable=True)
    full_name = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(16), nullable=False, default="patient")
    is_approved = db.Column(db.Boolean, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
