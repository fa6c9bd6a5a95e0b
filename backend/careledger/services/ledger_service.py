# Overview: Service-layer operations for ledger; append-only audit trail and order history writes.

"""
CareLedger audit trail invariants

- Append-only: entries are inserted, never updated or deleted.
- Best-effort: callers enqueue these writes on a SideEffectQueue, so a failed
  append is logged and never fails the mutation it describes.
- Non-authoritative: the row an entry describes is the source of truth.
"""

from __future__ import annotations

from ..extensions import remote
from ..time_utils import utcnow

AUDIT_TABLE = "ledger_audit_entries"
ORDER_HISTORY_TABLE = "order_status_history"


def append_audit_entry(
    *,
    entity_type: str,
    entity_id,
    new_status: str,
    message: str | None = None,
    actor: str | None = None,
) -> dict:
    """Append one (entity, new_status, message, timestamp) record."""
    return remote.store.insert(
        AUDIT_TABLE,
        {
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "new_status": new_status,
            "message": message,
            "actor": actor,
            "created_at": utcnow(),
        },
    )


def append_order_history(order_id, status: str, message: str | None = None) -> dict:
    """Patient-visible order timeline entry."""
    return remote.store.insert(
        ORDER_HISTORY_TABLE,
        {
            "order_id": str(order_id),
            "status": status,
            "status_message": message or f"Order status changed to {status}",
            "created_at": utcnow(),
        },
    )


def list_audit_entries(
    *,
    entity_type: str | None = None,
    entity_id=None,
    limit: int = 200,
) -> list[dict]:
    """Newest first."""
    filters = {}
    if entity_type:
        filters["entity_type"] = entity_type
    if entity_id is not None:
        filters["entity_id"] = str(entity_id)

    rows = remote.store.select(
        AUDIT_TABLE,
        filters=filters,
        order_by="created_at",
        descending=True,
    )
    return rows[: max(0, limit)]
