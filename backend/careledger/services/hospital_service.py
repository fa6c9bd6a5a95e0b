# Overview: Service-layer operations for hospital resources; bed inventory, operation theaters and bed bookings.

"""
Hospital resource ledger

INVARIANTS:
- One canonical bed inventory row per bed_type, one theater row per name
  (see canonical_service). Every read and every write targets the canonical row.
- available_beds <= total_beds, both non-negative, checked locally before any
  write and re-checked by the remote procedure and the direct-update guards.

Changing both counts at once is one write of both columns
(admin_set_bed_counts, or a single direct update), never two partial ones.
"""

from __future__ import annotations

from functools import partial

from ..entities import BedBooking, BedInventoryRow, OperationTheater
from ..errors import NotFoundError, ValidationError
from ..extensions import reconciler, remote
from ..validation import require_bool, require_count, validate_bed_counts
from .canonical_service import canonical_rows
from .ledger_service import append_audit_entry
from .lifecycle_service import actor_name, statuses
from .reconciliation import collection_loader
from .side_effects import SideEffectQueue
from .update_protocol import Mutation, TransitionTarget, run_transition, run_update


BEDS = "hospital_beds"
THEATERS = "operation_theaters"
BOOKINGS = "bed_bookings"

BED_TABLE = "hospital_beds"
THEATER_TABLE = "operation_theater"
BOOKING_TABLE = "bed_bookings"


def _booking_procedure_args(booking_id, booking: BedBooking) -> dict:
    return {"booking_id": booking_id, "new_status": booking.admission_status}


BOOKING_TARGET = TransitionTarget(
    entity_cls=BedBooking,
    table=BOOKING_TABLE,
    collection=BOOKINGS,
    procedure="admin_update_booking_status",
    procedure_args=_booking_procedure_args,
)


@collection_loader(BEDS)
def load_beds() -> list[dict]:
    return canonical_rows(remote.store.select(BED_TABLE), "bed_type")


@collection_loader(THEATERS)
def load_theaters() -> list[dict]:
    return canonical_rows(remote.store.select(THEATER_TABLE), "name")


@collection_loader(BOOKINGS)
def load_bookings() -> list[dict]:
    return remote.store.select(BOOKING_TABLE, order_by="created_at", descending=True)


def _canonical(collection: str, key_field: str, key: str) -> dict:
    """
    Canonical row for a logical key, from the reconciled collection.

    Falls back to one authoritative re-fetch when the key is not known
    locally (new bed type, or collection never loaded).
    """
    coll = reconciler.collection(collection)
    if coll.loaded:
        for row in coll.rows():
            if row.get(key_field) == key:
                return row

    for row in reconciler.refresh(collection):
        if row.get(key_field) == key:
            return row
    raise NotFoundError(f"No {key_field} '{key}' found")


# -----------------------------------------------------------------------------
# Bed inventory
# -----------------------------------------------------------------------------

def list_beds(ctx, *, cached: bool = False) -> list[BedInventoryRow]:
    ctx.require_active()
    return [BedInventoryRow.from_row(row) for row in reconciler.rows(BEDS, cached=cached)]


def _single_count_mutation(bed: BedInventoryRow, field_name: str, value: int, new_total: int, new_available: int) -> Mutation:
    if field_name == "available_beds":
        guards = (("total_beds", "gte", value),)
    else:
        guards = (("available_beds", "lte", value),)

    return Mutation(
        table=BED_TABLE,
        row_id=bed.id,
        values={field_name: value},
        collection=BEDS,
        procedure="admin_update_bed_count",
        procedure_args={"bed_id": bed.id, "field_name": field_name, "new_value": value},
        guards=guards,
        validate=partial(validate_bed_counts, new_total, new_available),
        description=f"{bed.bed_type} {field_name}",
    )


def _bed_counts_mutation(bed: BedInventoryRow, new_total: int, new_available: int) -> Mutation:
    # Both columns move together, so the row never holds half of the change
    return Mutation(
        table=BED_TABLE,
        row_id=bed.id,
        values={"total_beds": new_total, "available_beds": new_available},
        collection=BEDS,
        procedure="admin_set_bed_counts",
        procedure_args={"bed_id": bed.id, "total_beds": new_total, "available_beds": new_available},
        validate=partial(validate_bed_counts, new_total, new_available),
        description=f"{bed.bed_type} bed counts",
    )


def set_bed_counts(
    ctx,
    bed_type: str,
    *,
    total_beds=None,
    available_beds=None,
):
    """
    Update the canonical inventory row of a bed type.

    Raises:
        ValidationError: bad counts, or available would exceed total
            (nothing is written)
        NotFoundError: unknown bed type
        NotAppliedError: the row changed under us (guard failed)
    """
    ctx.require_active()
    if total_beds is None and available_beds is None:
        raise ValidationError("Provide total_beds and/or available_beds")
    if total_beds is not None:
        total_beds = require_count("total_beds", total_beds)
    if available_beds is not None:
        available_beds = require_count("available_beds", available_beds)
    if total_beds is not None and available_beds is not None:
        validate_bed_counts(total_beds, available_beds)

    bed = BedInventoryRow.from_row(_canonical(BEDS, "bed_type", bed_type))
    new_total = bed.total_beds if total_beds is None else total_beds
    new_available = bed.available_beds if available_beds is None else available_beds
    validate_bed_counts(new_total, new_available)

    queue = SideEffectQueue()
    queue.enqueue(
        "audit entry",
        append_audit_entry,
        entity_type=BedInventoryRow.kind,
        entity_id=bed.id,
        new_status=f"{new_available}/{new_total}",
        message=f"{bed.bed_type}: total {new_total}, available {new_available}",
        actor=actor_name(ctx),
    )
    if total_beds is not None and available_beds is not None:
        mutation = _bed_counts_mutation(bed, new_total, new_available)
    elif available_beds is not None:
        mutation = _single_count_mutation(bed, "available_beds", new_available, new_total, new_available)
    else:
        mutation = _single_count_mutation(bed, "total_beds", new_total, new_total, new_available)
    outcome = run_update(mutation, ctx, side_effects=queue)

    entity = BedInventoryRow.from_row({**bed.to_dict(), **outcome.row})
    outcome.entity = entity
    return outcome


# -----------------------------------------------------------------------------
# Operation theaters
# -----------------------------------------------------------------------------

def list_theaters(ctx, *, cached: bool = False) -> list[OperationTheater]:
    ctx.require_active()
    return [OperationTheater.from_row(row) for row in reconciler.rows(THEATERS, cached=cached)]


def set_theater_availability(ctx, name: str, is_available):
    """Set availability on the canonical theater row. Last writer wins."""
    ctx.require_active()
    is_available = require_bool("is_available", is_available)

    theater = OperationTheater.from_row(_canonical(THEATERS, "name", name))

    queue = SideEffectQueue()
    queue.enqueue(
        "audit entry",
        append_audit_entry,
        entity_type=OperationTheater.kind,
        entity_id=theater.id,
        new_status="available" if is_available else "occupied",
        message=f"{theater.name} marked {'available' if is_available else 'occupied'}",
        actor=actor_name(ctx),
    )

    mutation = Mutation(
        table=THEATER_TABLE,
        row_id=theater.id,
        values={"is_available": is_available},
        collection=THEATERS,
        procedure="admin_update_ot_status",
        procedure_args={"ot_id": theater.id, "new_status": is_available},
        description=f"theater {theater.name}",
    )
    outcome = run_update(mutation, ctx, side_effects=queue)
    outcome.entity = OperationTheater.from_row({**theater.to_dict(), **outcome.row})
    return outcome


# -----------------------------------------------------------------------------
# Bed bookings
# -----------------------------------------------------------------------------

def list_bookings(ctx, *, status: str | None = None, cached: bool = False) -> list[BedBooking]:
    ctx.require_active()
    if status is not None and status not in statuses("bed_booking"):
        raise ValidationError(f"Unknown admission status '{status}'")

    bookings = [BedBooking.from_row(row) for row in reconciler.rows(BOOKINGS, cached=cached)]
    if status is not None:
        bookings = [b for b in bookings if b.admission_status == status]
    return bookings


def transition_booking(ctx, booking_id: str, target: str, message: str | None = None):
    return run_transition(ctx, BOOKING_TARGET, booking_id, target, message=message)
