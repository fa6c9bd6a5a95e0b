# Overview: Server-side atomic procedures for the SQL-backed remote store.

"""
Remote procedures

Each routine runs inside the store's session and is committed (or rolled back)
as one unit by SqlRemoteStore.call. Routines return the affected-row count;
0 means the target did not exist, or its status no longer matched the
expected_status the caller read before deciding on the transition.

Routines check their own inputs and the acting administrator. Any refusal is a
RemoteProcedureError, which the update protocol treats as "procedure
unavailable" and answers with the guarded direct update.
"""

from __future__ import annotations

from ..errors import RemoteProcedureError
from ..models import (
    Account,
    AdminUser,
    BedBooking,
    BloodDonor,
    BloodRequest,
    DoctorProfile,
    HospitalBed,
    Order,
    OperationTheater,
)
from ..time_utils import utcnow


ORDER_STATUSES = {"pending", "shipped", "delivered", "cancelled"}
BOOKING_STATUSES = {"pending", "confirmed", "rejected"}
BLOOD_REQUEST_STATUSES = {"pending", "approved", "rejected"}
BLOOD_DONOR_STATUSES = {"pending", "approved", "rejected"}
BED_COUNT_FIELDS = {"total_beds", "available_beds"}


def _require_admin(session, ctx) -> AdminUser:
    if ctx is None:
        raise RemoteProcedureError("Remote procedure requires an administrator context")
    admin = session.get(AdminUser, ctx.admin_id)
    if admin is None or not admin.is_active:
        raise RemoteProcedureError("Administrator is not allowed to call remote procedures")
    return admin


def _require_status(value: str, allowed: set[str], what: str) -> None:
    if value not in allowed:
        raise RemoteProcedureError(f"Invalid {what} status '{value}'")


def _status_matches(current: str, expected_status) -> bool:
    """expected_status is the caller's last read; None skips the check."""
    return expected_status is None or current == expected_status


def admin_update_bed_count(session, ctx, *, bed_id, field_name, new_value):
    _require_admin(session, ctx)
    if field_name not in BED_COUNT_FIELDS:
        raise RemoteProcedureError(f"Invalid bed count field '{field_name}'")
    if isinstance(new_value, bool) or not isinstance(new_value, int) or new_value < 0:
        raise RemoteProcedureError("Bed counts must be non-negative integers")

    bed = session.get(HospitalBed, bed_id)
    if bed is None:
        return 0

    total = new_value if field_name == "total_beds" else bed.total_beds
    available = new_value if field_name == "available_beds" else bed.available_beds
    if available > total:
        raise RemoteProcedureError("Available beds cannot exceed total beds")

    setattr(bed, field_name, new_value)
    bed.updated_at = utcnow()
    return 1


def admin_set_bed_counts(session, ctx, *, bed_id, total_beds, available_beds):
    """Both counts of one bed row in a single write."""
    _require_admin(session, ctx)
    for value in (total_beds, available_beds):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise RemoteProcedureError("Bed counts must be non-negative integers")
    if available_beds > total_beds:
        raise RemoteProcedureError("Available beds cannot exceed total beds")

    bed = session.get(HospitalBed, bed_id)
    if bed is None:
        return 0
    bed.total_beds = total_beds
    bed.available_beds = available_beds
    bed.updated_at = utcnow()
    return 1


def admin_update_ot_status(session, ctx, *, ot_id, new_status):
    _require_admin(session, ctx)
    if not isinstance(new_status, bool):
        raise RemoteProcedureError("Theater availability must be a boolean")

    theater = session.get(OperationTheater, ot_id)
    if theater is None:
        return 0
    theater.is_available = new_status
    theater.updated_at = utcnow()
    return 1


def admin_update_order_status(session, ctx, *, order_id, new_status, expected_status=None):
    _require_admin(session, ctx)
    _require_status(new_status, ORDER_STATUSES, "order")

    order = session.get(Order, order_id)
    if order is None or not _status_matches(order.status, expected_status):
        return 0
    order.status = new_status
    order.updated_at = utcnow()
    return 1


def admin_update_booking_status(session, ctx, *, booking_id, new_status, expected_status=None):
    _require_admin(session, ctx)
    _require_status(new_status, BOOKING_STATUSES, "admission")

    booking = session.get(BedBooking, booking_id)
    if booking is None or not _status_matches(booking.admission_status, expected_status):
        return 0
    booking.admission_status = new_status
    booking.updated_at = utcnow()
    return 1


def admin_update_blood_request_status(
    session, ctx, *, request_id, new_status, admin_response=None, expected_status=None
):
    _require_admin(session, ctx)
    _require_status(new_status, BLOOD_REQUEST_STATUSES, "blood request")

    req = session.get(BloodRequest, request_id)
    if req is None or not _status_matches(req.status, expected_status):
        return 0
    req.status = new_status
    req.admin_response = admin_response
    req.updated_at = utcnow()
    return 1


def admin_update_blood_donor_status(
    session, ctx, *, donor_id, new_status, admin_response=None, expected_status=None
):
    _require_admin(session, ctx)
    _require_status(new_status, BLOOD_DONOR_STATUSES, "blood donor")

    donor = session.get(BloodDonor, donor_id)
    if donor is None or not _status_matches(donor.status, expected_status):
        return 0
    donor.status = new_status
    donor.is_approved = new_status == "approved"
    donor.admin_response = admin_response
    donor.updated_at = utcnow()
    return 1


def approve_doctor_profile(
    session,
    ctx,
    *,
    doctor_id,
    doctor_name,
    doctor_email,
    doctor_specialization,
    doctor_hospital,
    doctor_experience,
    doctor_phone=None,
    doctor_fee=None,
):
    """
    Upsert the public profile as approved and promote the account role.

    Profile and role change commit together or not at all.
    """
    _require_admin(session, ctx)
    if not doctor_specialization:
        raise RemoteProcedureError("Doctor specialization is required")

    now = utcnow()
    profile = session.get(DoctorProfile, doctor_id)
    if profile is None:
        profile = DoctorProfile(id=doctor_id, created_at=now)
        session.add(profile)

    profile.doctor_name = doctor_name
    profile.email = doctor_email
    profile.phone = doctor_phone
    profile.specialization = doctor_specialization
    profile.hospital_name = doctor_hospital
    profile.clinic_name = doctor_hospital
    profile.years_experience = doctor_experience
    profile.consultation_fee = doctor_fee
    profile.is_approved = True
    profile.updated_at = now

    account = session.get(Account, doctor_id)
    if account is not None:
        account.role = "doctor"
        account.is_approved = True
        account.updated_at = now
    return 1


DEFAULT_PROCEDURES = {
    "admin_update_bed_count": admin_update_bed_count,
    "admin_set_bed_counts": admin_set_bed_counts,
    "admin_update_ot_status": admin_update_ot_status,
    "admin_update_order_status": admin_update_order_status,
    "admin_update_booking_status": admin_update_booking_status,
    "admin_update_blood_request_status": admin_update_blood_request_status,
    "admin_update_blood_donor_status": admin_update_blood_donor_status,
    "approve_doctor_profile": approve_doctor_profile,
}
