# Overview: Service-layer operations for blood supply; donor applications and blood requests.

from __future__ import annotations

from ..entities import BloodDonorApplication, BloodRequest
from ..errors import ValidationError
from ..extensions import reconciler, remote
from .lifecycle_service import statuses
from .reconciliation import collection_loader
from .update_protocol import TransitionTarget, run_transition


BLOOD_REQUESTS = "blood_requests"
BLOOD_DONORS = "blood_donors"


def _request_procedure_args(request_id, req: BloodRequest) -> dict:
    return {
        "request_id": request_id,
        "new_status": req.status,
        "admin_response": req.admin_response,
    }


def _donor_procedure_args(donor_id, donor: BloodDonorApplication) -> dict:
    return {
        "donor_id": donor_id,
        "new_status": donor.status,
        "admin_response": donor.admin_response,
    }


REQUEST_TARGET = TransitionTarget(
    entity_cls=BloodRequest,
    table="blood_requests",
    collection=BLOOD_REQUESTS,
    procedure="admin_update_blood_request_status",
    procedure_args=_request_procedure_args,
)

DONOR_TARGET = TransitionTarget(
    entity_cls=BloodDonorApplication,
    table="blood_donors",
    collection=BLOOD_DONORS,
    procedure="admin_update_blood_donor_status",
    procedure_args=_donor_procedure_args,
)


@collection_loader(BLOOD_REQUESTS)
def load_blood_requests() -> list[dict]:
    return remote.store.select("blood_requests", order_by="created_at", descending=True)


@collection_loader(BLOOD_DONORS)
def load_blood_donors() -> list[dict]:
    return remote.store.select("blood_donors", order_by="created_at", descending=True)


def _filter_status(entities, kind: str, status: str | None):
    if status is None:
        return entities
    if status not in statuses(kind):
        raise ValidationError(f"Unknown status '{status}'")
    return [e for e in entities if e.status == status]


def list_blood_requests(
    ctx,
    *,
    status: str | None = None,
    blood_group: str | None = None,
    cached: bool = False,
) -> list[BloodRequest]:
    ctx.require_active()
    rows = reconciler.rows(BLOOD_REQUESTS, cached=cached)
    requests = _filter_status([BloodRequest.from_row(r) for r in rows], BloodRequest.kind, status)
    if blood_group:
        requests = [r for r in requests if r.blood_group == blood_group]
    return requests


def list_blood_donors(
    ctx,
    *,
    status: str | None = None,
    blood_group: str | None = None,
    cached: bool = False,
) -> list[BloodDonorApplication]:
    ctx.require_active()
    rows = reconciler.rows(BLOOD_DONORS, cached=cached)
    donors = _filter_status(
        [BloodDonorApplication.from_row(r) for r in rows], BloodDonorApplication.kind, status
    )
    if blood_group:
        donors = [d for d in donors if d.blood_group == blood_group]
    return donors


def transition_blood_request(ctx, request_id: str, target: str, message: str | None = None):
    """Approve or reject; the admin response defaults to "Request <status> by admin"."""
    return run_transition(ctx, REQUEST_TARGET, request_id, target, message=message)


def transition_blood_donor(ctx, donor_id: str, target: str, message: str | None = None):
    """Approve or reject; approval also sets is_approved on the donor."""
    return run_transition(ctx, DONOR_TARGET, donor_id, target, message=message)
