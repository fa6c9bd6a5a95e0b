# Overview: Service-layer operations for lifecycle; transition tables and pure transitions for every ledger entity.

"""
Ledger Lifecycle Service

================================================================================
PURPOSE: Enforce the status machine of every admin-managed ledger entity
================================================================================

STATE MACHINES:
    order               pending -> {shipped, cancelled}
                        shipped -> {delivered, cancelled}
    credential_request  pending -> {approved, rejected}
    blood_donor         pending -> {approved, rejected}
    blood_request       pending -> {approved, rejected}
    bed_booking         pending -> {confirmed, rejected}
    support_ticket      open -> {responded, closed}
                        responded -> {closed}
    system_alert        active <-> resolved (free toggle)

Every status not listed as a source is terminal.

RULES (NON-NEGOTIABLE):
1. Cannot skip states (pending -> delivered is forbidden for orders)
2. Cannot leave a terminal state
3. support_ticket -> responded requires a non-empty response text
4. apply_transition is pure: it never touches the store. A rejected
   transition therefore never produces a remote write.

Stamping (reviewer, admin response, donor approval flag) happens here so the
update protocol writes every changed column in one mutation.
================================================================================
"""

from __future__ import annotations

from dataclasses import replace

from ..entities import LedgerEntity
from ..errors import TransitionError
from ..time_utils import utcnow


TRANSITIONS: dict[str, dict[str, frozenset[str]]] = {
    "order": {
        "pending": frozenset({"shipped", "cancelled"}),
        "shipped": frozenset({"delivered", "cancelled"}),
        "delivered": frozenset(),
        "cancelled": frozenset(),
    },
    "credential_request": {
        "pending": frozenset({"approved", "rejected"}),
        "approved": frozenset(),
        "rejected": frozenset(),
    },
    "blood_donor": {
        "pending": frozenset({"approved", "rejected"}),
        "approved": frozenset(),
        "rejected": frozenset(),
    },
    "blood_request": {
        "pending": frozenset({"approved", "rejected"}),
        "approved": frozenset(),
        "rejected": frozenset(),
    },
    "bed_booking": {
        "pending": frozenset({"confirmed", "rejected"}),
        "confirmed": frozenset(),
        "rejected": frozenset(),
    },
    "support_ticket": {
        "open": frozenset({"responded", "closed"}),
        "responded": frozenset({"closed"}),
        "closed": frozenset(),
    },
    "system_alert": {
        "active": frozenset({"resolved"}),
        "resolved": frozenset({"active"}),
    },
}


def statuses(kind: str) -> frozenset[str]:
    """Every status the entity kind can hold."""
    try:
        return frozenset(TRANSITIONS[kind])
    except KeyError:
        raise ValueError(f"Unknown ledger entity kind '{kind}'")


def allowed_transitions(kind: str, current: str) -> frozenset[str]:
    """
    Targets reachable in one step from `current`.

    Unknown statuses (e.g. legacy values written by an older client) have no
    outgoing transitions.
    """
    table = TRANSITIONS.get(kind)
    if table is None:
        raise ValueError(f"Unknown ledger entity kind '{kind}'")
    return table.get(current, frozenset())


def can_transition(kind: str, current: str, target: str) -> bool:
    return target in allowed_transitions(kind, current)


def is_terminal(kind: str, status: str) -> bool:
    return not allowed_transitions(kind, status)


def actor_name(actor) -> str:
    """Audit name of the acting administrator (AdminContext or plain string)."""
    name = getattr(actor, "audit_name", None)
    if name:
        return name
    return str(actor) if actor else "admin"


def apply_transition(entity: LedgerEntity, target: str, actor, message: str | None = None):
    """
    Return a new snapshot of `entity` moved to `target`.

    Raises:
        TransitionError: target not reachable from the current status, or a
            required response text is missing
    """
    kind = entity.kind
    current = entity.status
    if not can_transition(kind, current, target):
        raise TransitionError(kind, current, target)

    text = (message or "").strip() or None

    if kind == "support_ticket":
        if target == "responded" and text is None:
            raise TransitionError(kind, current, target, "A response message is required")
        if text is not None:
            return replace(entity, status=target, admin_response=text)
        return replace(entity, status=target)

    if kind == "credential_request":
        return replace(
            entity,
            status=target,
            reviewed_by=actor_name(actor),
            reviewed_at=utcnow(),
        )

    if kind == "blood_donor":
        return replace(
            entity,
            status=target,
            is_approved=target == "approved",
            admin_response=text or f"Application {target} by admin",
        )

    if kind == "blood_request":
        return replace(
            entity,
            status=target,
            admin_response=text or f"Request {target} by admin",
        )

    if kind == "system_alert":
        return replace(entity, is_resolved=target == "resolved")

    return replace(entity, **{entity.status_field: target})
