# Overview: Service-layer operations for the admin dashboard summary counts.

from __future__ import annotations

from ..extensions import remote
from .canonical_service import canonical_rows


def _count(table: str, filters: dict) -> int:
    return len(remote.store.select(table, filters=filters))


def admin_summary(ctx) -> dict:
    """
    Work-queue counts for the admin dashboard.

    Always authoritative; bed totals use canonical rows only.
    """
    ctx.require_active()
    beds = canonical_rows(remote.store.select("hospital_beds"), "bed_type")
    theaters = canonical_rows(remote.store.select("operation_theater"), "name")

    return {
        "pending_credentials": (
            _count("doctor_verification_requests", {"status": "pending"})
            + _count("doctor_profiles", {"is_approved": False})
        ),
        "approved_doctors": _count("doctor_profiles", {"is_approved": True}),
        "pending_orders": _count("orders", {"status": "pending"}),
        "shipped_orders": _count("orders", {"status": "shipped"}),
        "pending_bookings": _count("bed_bookings", {"admission_status": "pending"}),
        "pending_blood_requests": _count("blood_requests", {"status": "pending"}),
        "pending_blood_donors": _count("blood_donors", {"status": "pending"}),
        "open_tickets": _count("support_tickets", {"status": "open"}),
        "active_alerts": _count("system_alerts", {"is_resolved": False}),
        "beds": {
            "total": sum(int(b.get("total_beds") or 0) for b in beds),
            "available": sum(int(b.get("available_beds") or 0) for b in beds),
        },
        "theaters_available": sum(1 for t in theaters if t.get("is_available")),
    }
