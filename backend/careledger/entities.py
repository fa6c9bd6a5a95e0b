# Overview: Typed, immutable snapshots of the ledger rows the admin side reads and transitions.

"""
Ledger entities

Rows arrive from the remote store as plain dicts (SQL or REST backend). Each
entity class picks the columns it cares about and ignores the rest, so a row
carrying extra columns still parses.

Entities are frozen: a transition produces a new snapshot (see
lifecycle_service.apply_transition), the row in the store is only changed by
the update protocol.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, ClassVar, Mapping

from .time_utils import to_utc_z


class LedgerEntity:
    """Mixin for entity dataclasses: row parsing, serialization, status access."""

    kind: ClassVar[str] = ""
    status_field: ClassVar[str | None] = "status"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        kwargs = {}
        for f in fields(cls):
            if f.name in row:
                kwargs[f.name] = row[f.name]
        return cls(**kwargs)

    @property
    def status(self) -> str:
        return getattr(self, self.status_field)

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                value = to_utc_z(value)
            elif isinstance(value, tuple):
                value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
            out[f.name] = value
        out["kind"] = self.kind
        return out


def changed_fields(before: LedgerEntity, after: LedgerEntity) -> dict:
    """Columns whose value differs between two snapshots of the same row."""
    return {
        f.name: getattr(after, f.name)
        for f in fields(after)
        if getattr(before, f.name) != getattr(after, f.name)
    }


@dataclass(frozen=True)
class OrderLine:
    medicine_id: str
    quantity: int
    unit_price_cents: int
    medicine_name: str | None = None
    id: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderLine":
        return cls(
            id=row.get("id"),
            medicine_id=row["medicine_id"],
            medicine_name=row.get("medicine_name"),
            quantity=int(row.get("quantity") or 0),
            unit_price_cents=int(row.get("unit_price_cents") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "medicine_id": self.medicine_id,
            "medicine_name": self.medicine_name,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.quantity * self.unit_price_cents,
        }


@dataclass(frozen=True)
class Order(LedgerEntity):
    kind: ClassVar[str] = "order"

    id: str
    status: str = "pending"
    total_cents: int = 0
    items: tuple[OrderLine, ...] = ()
    user_id: str | None = None
    address: str | None = None
    phone_number: str | None = None
    tracking_number: str | None = None
    estimated_delivery: Any = None
    created_at: Any = None
    updated_at: Any = None

    @classmethod
    def from_row(cls, row):
        order = super().from_row({k: v for k, v in row.items() if k != "items"})
        lines = tuple(OrderLine.from_row(item) for item in row.get("items") or ())
        return replace(order, items=lines)


@dataclass(frozen=True)
class CredentialRequest(LedgerEntity):
    """Dedicated doctor verification request row."""
    kind: ClassVar[str] = "credential_request"

    id: str
    full_name: str = ""
    email: str = ""
    specialization: str = ""
    medical_license: str = ""
    years_experience: int | None = None
    hospital_affiliation: str | None = None
    phone: str | None = None
    notes: str | None = None
    photo_url: str | None = None
    applicant_user_id: str | None = None
    status: str = "pending"
    reviewed_by: str | None = None
    reviewed_at: Any = None
    submitted_at: Any = None
    created_at: Any = None
    updated_at: Any = None


@dataclass(frozen=True)
class BedInventoryRow(LedgerEntity):
    kind: ClassVar[str] = "bed_inventory"
    status_field: ClassVar[str | None] = None

    id: str
    bed_type: str
    total_beds: int = 0
    available_beds: int = 0
    updated_at: Any = None

    @property
    def status(self) -> str:
        return f"{self.available_beds}/{self.total_beds}"

    @property
    def occupied_beds(self) -> int:
        return self.total_beds - self.available_beds


@dataclass(frozen=True)
class OperationTheater(LedgerEntity):
    kind: ClassVar[str] = "operation_theater"
    status_field: ClassVar[str | None] = None

    id: str
    name: str
    is_available: bool = True
    updated_at: Any = None

    @property
    def status(self) -> str:
        return "available" if self.is_available else "occupied"


@dataclass(frozen=True)
class BedBooking(LedgerEntity):
    kind: ClassVar[str] = "bed_booking"
    status_field: ClassVar[str | None] = "admission_status"

    id: str
    booking_id: str = ""
    patient_name: str = ""
    patient_age: int | None = None
    patient_gender: str | None = None
    disease: str | None = None
    preferred_bed_type: str | None = None
    is_emergency: bool = False
    admission_status: str = "pending"
    payment_status: str = "pending"
    created_at: Any = None
    updated_at: Any = None


@dataclass(frozen=True)
class BloodDonorApplication(LedgerEntity):
    kind: ClassVar[str] = "blood_donor"

    id: str
    name: str = ""
    age: int | None = None
    blood_group: str = ""
    mobile_number: str | None = None
    address: str | None = None
    status: str = "pending"
    is_approved: bool = False
    admin_response: str | None = None
    created_at: Any = None
    updated_at: Any = None


@dataclass(frozen=True)
class BloodRequest(LedgerEntity):
    kind: ClassVar[str] = "blood_request"

    id: str
    full_name: str = ""
    blood_group: str = ""
    phone_number: str | None = None
    address: str | None = None
    emergency_level: str | None = None
    delivery_instructions: str | None = None
    status: str = "pending"
    admin_response: str | None = None
    created_at: Any = None
    updated_at: Any = None


@dataclass(frozen=True)
class SupportTicket(LedgerEntity):
    kind: ClassVar[str] = "support_ticket"

    id: str
    title: str = ""
    description: str = ""
    priority: str = "medium"
    status: str = "open"
    admin_response: str | None = None
    user_id: str | None = None
    created_at: Any = None
    updated_at: Any = None


@dataclass(frozen=True)
class SystemAlert(LedgerEntity):
    """Alert resolution is a free toggle, exposed as active/resolved."""
    kind: ClassVar[str] = "system_alert"
    status_field: ClassVar[str | None] = None

    id: str
    title: str = ""
    message: str = ""
    type: str = "info"
    severity: str = "medium"
    is_resolved: bool = False
    created_at: Any = None
    updated_at: Any = None

    @property
    def status(self) -> str:
        return "resolved" if self.is_resolved else "active"

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["status"] = self.status
        return out


@dataclass(frozen=True)
class VerifiedDoctor(LedgerEntity):
    """Approved public doctor profile."""
    kind: ClassVar[str] = "verified_doctor"
    status_field: ClassVar[str | None] = None

    id: str
    specialization: str = ""
    doctor_name: str | None = None
    email: str | None = None
    phone: str | None = None
    hospital_name: str | None = None
    clinic_name: str | None = None
    location: str | None = None
    years_experience: int | None = None
    consultation_fee: int | None = None
    is_approved: bool = True
    created_at: Any = None
    updated_at: Any = None

    @property
    def status(self) -> str:
        return "approved" if self.is_approved else "pending"

    @property
    def display_name(self) -> str:
        name = (self.doctor_name or "").strip()
        if name:
            return name if name.startswith("Dr.") else f"Dr. {name}"
        if self.email:
            return f"Dr. {self.email.split('@')[0]}"
        if self.specialization:
            return f"Dr. {self.specialization}"
        return "Dr. Medical Professional"

    @property
    def affiliation(self) -> str:
        return self.location or self.hospital_name or self.clinic_name or "Medical Center"

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["display_name"] = self.display_name
        out["hospital_affiliation"] = self.affiliation
        return out
