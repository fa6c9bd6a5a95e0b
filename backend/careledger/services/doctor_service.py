# Overview: Service-layer operations for doctors; pending credential intake from both sources and approved listings.

"""
Doctor credential intake

A pending doctor exists in one of two shapes:

    request   dedicated doctor_verification_requests row, status "pending"
    profile   doctor_profiles row with is_approved = false

Both are wrapped as a sourced variant (SourcedRequest / SourcedProfile) and
normalized at this boundary into one PendingCredential. The approval
orchestrator only ever sees PendingCredential and branches on `source` for
the single write that differs (reject).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Union

from flask import current_app

from ..entities import CredentialRequest, VerifiedDoctor
from ..errors import NotFoundError, ValidationError
from ..extensions import reconciler, remote
from ..time_utils import coerce_timestamp, to_utc_z
from .reconciliation import collection_loader


PENDING_CREDENTIALS = "pending_credentials"
CREDENTIAL_REQUESTS = "credential_requests"
VERIFIED_DOCTORS = "verified_doctors"

REQUEST_TABLE = "doctor_verification_requests"
PROFILE_TABLE = "doctor_profiles"

SOURCES = ("request", "profile")

DEFAULT_SPECIALIZATION = "General Medicine"
DEFAULT_HOSPITAL = "Medical Center"
DEFAULT_EXPERIENCE = 5


@dataclass(frozen=True)
class SourcedRequest:
    row: CredentialRequest
    source = "request"


@dataclass(frozen=True)
class SourcedProfile:
    row: VerifiedDoctor
    source = "profile"


Sourced = Union[SourcedRequest, SourcedProfile]


@dataclass(frozen=True)
class PendingCredential:
    source: str
    source_id: str
    full_name: str
    specialization: str
    hospital_affiliation: str
    years_experience: int
    consultation_fee: int
    status: str = "pending"
    applicant_id: str | None = None
    email: str | None = None
    phone: str | None = None
    medical_license: str | None = None
    notes: str | None = None
    submitted_at: Any = None

    @property
    def key(self) -> str:
        return f"{self.source}:{self.source_id}"

    @classmethod
    def from_dict(cls, data: dict) -> "PendingCredential":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})

    def to_dict(self) -> dict:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["submitted_at"] = to_utc_z(self.submitted_at)
        out["id"] = self.key
        return out


def _default_fee() -> int:
    return current_app.config.get("LEDGER_DEFAULT_CONSULTATION_FEE", 150)


def _experience(value) -> int:
    try:
        years = int(value)
    except (TypeError, ValueError):
        return DEFAULT_EXPERIENCE
    return years if years > 0 else DEFAULT_EXPERIENCE


def normalize_pending(sourced: Sourced, *, default_fee: int = 150) -> PendingCredential:
    row = sourced.row
    specialization = (row.specialization or "").strip() or DEFAULT_SPECIALIZATION

    if isinstance(sourced, SourcedRequest):
        return PendingCredential(
            source="request",
            source_id=str(row.id),
            applicant_id=row.applicant_user_id,
            full_name=(row.full_name or "").strip() or f"Dr. {specialization}",
            email=row.email or None,
            phone=row.phone,
            specialization=specialization,
            hospital_affiliation=(row.hospital_affiliation or "").strip() or DEFAULT_HOSPITAL,
            years_experience=_experience(row.years_experience),
            consultation_fee=default_fee,
            medical_license=row.medical_license or None,
            notes=row.notes,
            status=row.status,
            submitted_at=row.submitted_at or row.created_at,
        )

    if row.doctor_name and row.doctor_name.strip():
        name = row.doctor_name.strip()
    elif row.email:
        name = row.email.split("@")[0]
    else:
        name = f"Dr. {specialization}"

    return PendingCredential(
        source="profile",
        source_id=str(row.id),
        applicant_id=str(row.id),
        full_name=name,
        email=row.email,
        phone=row.phone,
        specialization=specialization,
        hospital_affiliation=row.hospital_name or row.clinic_name or row.location or DEFAULT_HOSPITAL,
        years_experience=_experience(row.years_experience),
        consultation_fee=row.consultation_fee or default_fee,
        status="approved" if row.is_approved else "pending",
        submitted_at=row.created_at,
    )


def _newest_first(items: list[PendingCredential]) -> list[PendingCredential]:
    def sort_key(item):
        ts = coerce_timestamp(item.submitted_at)
        return (ts is not None, ts.isoformat() if ts else "")
    return sorted(items, key=sort_key, reverse=True)


@collection_loader(PENDING_CREDENTIALS)
def load_pending_credentials() -> list[dict]:
    store = remote.store
    fee = _default_fee()

    requests = store.select(REQUEST_TABLE, filters={"status": "pending"})
    profiles = store.select(PROFILE_TABLE, filters={"is_approved": False})

    pending = [
        normalize_pending(SourcedRequest(CredentialRequest.from_row(r)), default_fee=fee)
        for r in requests
    ]
    pending += [
        normalize_pending(SourcedProfile(VerifiedDoctor.from_row(p)), default_fee=fee)
        for p in profiles
    ]
    return [p.to_dict() for p in _newest_first(pending)]


@collection_loader(CREDENTIAL_REQUESTS)
def load_credential_requests() -> list[dict]:
    return remote.store.select(REQUEST_TABLE, order_by="submitted_at", descending=True)


@collection_loader(VERIFIED_DOCTORS)
def load_verified_doctors() -> list[dict]:
    return remote.store.select(
        PROFILE_TABLE,
        filters={"is_approved": True},
        order_by="updated_at",
        descending=True,
    )


def list_pending(ctx, *, cached: bool = False) -> list[PendingCredential]:
    """Pending doctors from both sources, newest first."""
    ctx.require_active()
    return [
        PendingCredential.from_dict(row)
        for row in reconciler.rows(PENDING_CREDENTIALS, cached=cached)
    ]


def load_pending(ctx, source: str, source_id: str) -> PendingCredential:
    """
    Authoritative read of one pending credential.

    The returned status may already be terminal; the orchestrator rejects
    those with a TransitionError.
    """
    ctx.require_active()
    if source not in SOURCES:
        raise ValidationError(f"Unknown credential source '{source}'")

    with reconciler.surfaced_errors(PENDING_CREDENTIALS):
        if source == "request":
            row = remote.store.get(REQUEST_TABLE, source_id)
            if row is None:
                raise NotFoundError(f"Credential request {source_id} not found")
            sourced = SourcedRequest(CredentialRequest.from_row(row))
        else:
            row = remote.store.get(PROFILE_TABLE, source_id)
            if row is None:
                raise NotFoundError(f"Doctor profile {source_id} not found")
            sourced = SourcedProfile(VerifiedDoctor.from_row(row))

    return normalize_pending(sourced, default_fee=_default_fee())


def list_approved(ctx, *, search: str | None = None, cached: bool = False) -> list[VerifiedDoctor]:
    ctx.require_active()
    doctors = [VerifiedDoctor.from_row(r) for r in reconciler.rows(VERIFIED_DOCTORS, cached=cached)]
    if search:
        needle = search.strip().lower()
        doctors = [
            d for d in doctors
            if needle in d.display_name.lower() or needle in (d.specialization or "").lower()
        ]
    return doctors
