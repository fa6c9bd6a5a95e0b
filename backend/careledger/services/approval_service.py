# Overview: Service-layer operations for approvals; promotes, rejects and removes doctor credentials.

"""
Doctor Credential Approval Orchestrator

================================================================================
APPROVE (PendingCredential from either source)
================================================================================

    1. resolve the doctor id: profile source -> profile id; request source ->
       applicant account id, or an id derived from the request id
    2. approve_doctor_profile remote procedure        CRITICAL
       (upserts the approved public profile and promotes the account role)
    3. mark the request row approved + reviewer stamp  best-effort
    4. audit entry                                     best-effort

Step 2 failing aborts everything: nothing is queued until it has committed,
so the request row stays pending. Steps 3-4 run on a SideEffectQueue and can
only show up in the returned report.

================================================================================
REJECT: exactly one critical write, chosen by source
================================================================================

    request -> status transition to rejected (guarded on status = pending)
    profile -> delete the unapproved profile row (guarded on is_approved = false)

================================================================================
REMOVE an approved doctor
================================================================================

    delete the approved profile row (CRITICAL), demote the account to patient
    (best-effort)
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from ..entities import CredentialRequest, VerifiedDoctor
from ..errors import NotAppliedError, NotFoundError, TransitionError
from ..extensions import reconciler, remote
from ..models._ids import derived_uuid
from ..time_utils import utcnow
from .doctor_service import (
    CREDENTIAL_REQUESTS,
    PENDING_CREDENTIALS,
    PROFILE_TABLE,
    REQUEST_TABLE,
    VERIFIED_DOCTORS,
    PendingCredential,
)
from .ledger_service import append_audit_entry
from .lifecycle_service import actor_name, can_transition
from .side_effects import SideEffectQueue, SideEffectReport
from .update_protocol import TransitionTarget, run_transition


ACCOUNT_TABLE = "profiles"

CREDENTIAL_TARGET = TransitionTarget(
    entity_cls=CredentialRequest,
    table=REQUEST_TABLE,
    collection=CREDENTIAL_REQUESTS,
)


@dataclass
class CredentialDecision:
    doctor_id: str | None
    source: str
    source_id: str
    status: str
    effects: SideEffectReport
    profile: VerifiedDoctor | None = None

    def to_dict(self) -> dict:
        return {
            "doctor_id": self.doctor_id,
            "source": self.source,
            "source_id": self.source_id,
            "status": self.status,
            "side_effects": self.effects.to_dict(),
            "profile": self.profile.to_dict() if self.profile else None,
        }


def _require_pending(pending: PendingCredential, target: str) -> None:
    if not can_transition(CredentialRequest.kind, pending.status, target):
        raise TransitionError(CredentialRequest.kind, pending.status, target)


def resolve_doctor_id(pending: PendingCredential) -> str:
    if pending.source == "profile":
        return pending.source_id
    # Same request, same id: a retried approval upserts the profile it already made
    return pending.applicant_id or derived_uuid("doctor-verification-request", pending.source_id)


def _mark_request_approved(store, request_id: str, reviewer: str) -> None:
    now = utcnow()
    rows = store.update(
        REQUEST_TABLE,
        request_id,
        {"status": "approved", "reviewed_by": reviewer, "reviewed_at": now, "updated_at": now},
        guards=(("status", "eq", "pending"),),
    )
    if not rows:
        raise NotAppliedError(f"Credential request {request_id} was no longer pending")


def _demote_account(store, doctor_id: str) -> None:
    rows = store.update(
        ACCOUNT_TABLE,
        doctor_id,
        {"role": "patient", "is_approved": False, "updated_at": utcnow()},
    )
    if not rows:
        raise NotAppliedError(f"No account {doctor_id} to demote")


def approve(ctx, pending: PendingCredential) -> CredentialDecision:
    """
    Promote a pending credential into an approved public profile.

    Raises:
        TransitionError: credential is not pending
        RemoteProcedureError: the profile could not be created (nothing else ran)
        NotAppliedError: the procedure reported zero affected rows
    """
    ctx.require_active()
    _require_pending(pending, "approved")

    store = remote.store
    doctor_id = resolve_doctor_id(pending)
    args = {
        "doctor_id": doctor_id,
        "doctor_name": pending.full_name,
        "doctor_email": pending.email,
        "doctor_specialization": pending.specialization,
        "doctor_hospital": pending.hospital_affiliation,
        "doctor_experience": pending.years_experience,
        "doctor_phone": pending.phone,
        "doctor_fee": pending.consultation_fee,
    }

    with reconciler.surfaced_errors(PENDING_CREDENTIALS):
        affected = store.call("approve_doctor_profile", args, ctx=ctx)
        if affected is not None and affected < 1:
            raise NotAppliedError(f"Doctor profile {doctor_id} was not created")

    reviewer = actor_name(ctx)
    queue = SideEffectQueue()
    if pending.source == "request":
        queue.enqueue("mark credential request approved", _mark_request_approved, store, pending.source_id, reviewer)
    queue.enqueue(
        "audit entry",
        append_audit_entry,
        entity_type=CredentialRequest.kind,
        entity_id=pending.source_id,
        new_status="approved",
        message=f"Verified doctor profile {doctor_id}",
        actor=reviewer,
    )
    report = queue.drain()

    now = utcnow()
    settled = reconciler.settle(
        VERIFIED_DOCTORS,
        doctor_id,
        {
            "doctor_name": pending.full_name,
            "email": pending.email,
            "phone": pending.phone,
            "specialization": pending.specialization,
            "hospital_name": pending.hospital_affiliation,
            "clinic_name": pending.hospital_affiliation,
            "years_experience": pending.years_experience,
            "consultation_fee": pending.consultation_fee,
            "is_approved": True,
            "updated_at": now,
        },
    )
    reconciler.forget(PENDING_CREDENTIALS, pending.key)

    return CredentialDecision(
        doctor_id=doctor_id,
        source=pending.source,
        source_id=pending.source_id,
        status="approved",
        effects=report,
        profile=VerifiedDoctor.from_row(settled),
    )


def reject(ctx, pending: PendingCredential, message: str | None = None) -> CredentialDecision:
    """
    Reject a pending credential with the one write its source calls for.

    Raises:
        TransitionError: credential is not pending
        NotAppliedError: the row changed or vanished meanwhile
    """
    ctx.require_active()
    _require_pending(pending, "rejected")

    if pending.source == "request":
        outcome = run_transition(ctx, CREDENTIAL_TARGET, pending.source_id, "rejected", message=message)
        reconciler.forget(PENDING_CREDENTIALS, pending.key)
        return CredentialDecision(
            doctor_id=pending.applicant_id,
            source=pending.source,
            source_id=pending.source_id,
            status="rejected",
            effects=outcome.effects,
        )

    store = remote.store
    with reconciler.surfaced_errors(PENDING_CREDENTIALS):
        removed = store.delete(
            PROFILE_TABLE,
            pending.source_id,
            guards=(("is_approved", "eq", False),),
        )
        if not removed:
            raise NotAppliedError(f"Pending profile {pending.source_id} was not removed")

    queue = SideEffectQueue()
    queue.enqueue(
        "audit entry",
        append_audit_entry,
        entity_type=CredentialRequest.kind,
        entity_id=pending.source_id,
        new_status="rejected",
        message=message,
        actor=actor_name(ctx),
    )
    report = queue.drain()
    reconciler.forget(PENDING_CREDENTIALS, pending.key)

    return CredentialDecision(
        doctor_id=pending.source_id,
        source=pending.source,
        source_id=pending.source_id,
        status="rejected",
        effects=report,
    )


def remove_doctor(ctx, doctor_id: str) -> CredentialDecision:
    """Delist an approved doctor and demote the account back to patient."""
    ctx.require_active()
    store = remote.store

    with reconciler.surfaced_errors(VERIFIED_DOCTORS):
        row = store.get(PROFILE_TABLE, doctor_id)
        if row is None or not row.get("is_approved"):
            raise NotFoundError(f"Approved doctor {doctor_id} not found")

        removed = store.delete(PROFILE_TABLE, doctor_id, guards=(("is_approved", "eq", True),))
        if not removed:
            raise NotAppliedError(f"Doctor profile {doctor_id} was not removed")

    queue = SideEffectQueue()
    queue.enqueue("demote account", _demote_account, store, doctor_id)
    queue.enqueue(
        "audit entry",
        append_audit_entry,
        entity_type=VerifiedDoctor.kind,
        entity_id=doctor_id,
        new_status="removed",
        message="Doctor profile removed",
        actor=actor_name(ctx),
    )
    report = queue.drain()
    reconciler.forget(VERIFIED_DOCTORS, doctor_id)

    return CredentialDecision(
        doctor_id=doctor_id,
        source="profile",
        source_id=doctor_id,
        status="removed",
        effects=report,
        profile=VerifiedDoctor.from_row(row),
    )
