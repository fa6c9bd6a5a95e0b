# Overview: Service-layer operations for support; ticket responses and system alerts.

from __future__ import annotations

from ..entities import SupportTicket, SystemAlert
from ..errors import NotFoundError, ValidationError
from ..extensions import reconciler, remote
from ..time_utils import utcnow
from ..validation import (
    ALERT_SEVERITIES,
    ALERT_TYPES,
    matches_search,
    require_choice,
    require_text,
)
from .ledger_service import append_audit_entry
from .lifecycle_service import actor_name, statuses
from .reconciliation import collection_loader
from .side_effects import SideEffectQueue
from .update_protocol import TransitionTarget, UpdateOutcome, run_transition


TICKETS = "support_tickets"
ALERTS = "system_alerts"

TICKET_TARGET = TransitionTarget(
    entity_cls=SupportTicket,
    table="support_tickets",
    collection=TICKETS,
)

# Alerts have no remote procedure; the guard is the current resolution flag
ALERT_TARGET = TransitionTarget(
    entity_cls=SystemAlert,
    table="system_alerts",
    collection=ALERTS,
    guard_column="is_resolved",
)


@collection_loader(TICKETS)
def load_tickets() -> list[dict]:
    return remote.store.select("support_tickets", order_by="created_at", descending=True)


@collection_loader(ALERTS)
def load_alerts() -> list[dict]:
    return remote.store.select("system_alerts", order_by="created_at", descending=True)


# -----------------------------------------------------------------------------
# Support tickets
# -----------------------------------------------------------------------------

def list_tickets(
    ctx,
    *,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
    cached: bool = False,
) -> list[SupportTicket]:
    ctx.require_active()
    if status is not None and status not in statuses(SupportTicket.kind):
        raise ValidationError(f"Unknown ticket status '{status}'")

    tickets = [SupportTicket.from_row(r) for r in reconciler.rows(TICKETS, cached=cached)]
    return [
        t for t in tickets
        if (status is None or t.status == status)
        and (priority is None or t.priority == priority)
        and matches_search(search, t.title, t.description)
    ]


def transition_ticket(ctx, ticket_id: str, target: str, message: str | None = None):
    """open -> responded needs a response text; closed is terminal."""
    return run_transition(ctx, TICKET_TARGET, ticket_id, target, message=message)


# -----------------------------------------------------------------------------
# System alerts
# -----------------------------------------------------------------------------

def list_alerts(
    ctx,
    *,
    resolved: bool | None = None,
    search: str | None = None,
    cached: bool = False,
) -> list[SystemAlert]:
    ctx.require_active()
    alerts = [SystemAlert.from_row(r) for r in reconciler.rows(ALERTS, cached=cached)]
    return [
        a for a in alerts
        if (resolved is None or a.is_resolved == resolved)
        and matches_search(search, a.title, a.message)
    ]


def create_alert(ctx, *, title, message, alert_type="info", severity="medium") -> UpdateOutcome:
    """Insert a new unresolved alert."""
    ctx.require_active()
    values = {
        "title": require_text("title", title, max_length=255),
        "message": require_text("message", message),
        "type": require_choice("type", alert_type, ALERT_TYPES),
        "severity": require_choice("severity", severity, ALERT_SEVERITIES),
        "is_resolved": False,
    }

    with reconciler.surfaced_errors(ALERTS):
        now = utcnow()
        row = remote.store.insert("system_alerts", {**values, "created_at": now, "updated_at": now})

        queue = SideEffectQueue()
        queue.enqueue(
            "audit entry",
            append_audit_entry,
            entity_type=SystemAlert.kind,
            entity_id=row["id"],
            new_status="active",
            message=values["title"],
            actor=actor_name(ctx),
        )
        report = queue.drain()
        settled = reconciler.settle(ALERTS, row["id"], row)

    return UpdateOutcome(
        row_id=row["id"],
        path="insert",
        row=settled,
        effects=report,
        entity=SystemAlert.from_row(row),
    )


def set_alert_resolved(ctx, alert_id: str, resolved: bool) -> UpdateOutcome:
    return run_transition(
        ctx,
        ALERT_TARGET,
        alert_id,
        "resolved" if resolved else "active",
    )


def toggle_alert(ctx, alert_id: str) -> UpdateOutcome:
    """Flip is_resolved in whichever direction the current row allows."""
    ctx.require_active()
    with reconciler.surfaced_errors(ALERTS):
        row = remote.store.get("system_alerts", alert_id)
        if row is None:
            raise NotFoundError(f"system_alert {alert_id} not found")
    return set_alert_resolved(ctx, alert_id, not bool(row.get("is_resolved")))
