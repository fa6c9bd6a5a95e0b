# Overview: Service-layer operations for orders; listing and status transitions for medicine orders.

from __future__ import annotations

from collections import defaultdict

from ..entities import Order
from ..errors import ValidationError
from ..extensions import reconciler, remote
from .ledger_service import append_order_history
from .lifecycle_service import statuses
from .reconciliation import collection_loader
from .side_effects import SideEffectQueue
from .update_protocol import TransitionTarget, run_transition


ORDERS = "orders"


def _order_procedure_args(order_id, order: Order) -> dict:
    return {"order_id": order_id, "new_status": order.status}


ORDER_TARGET = TransitionTarget(
    entity_cls=Order,
    table="orders",
    collection=ORDERS,
    procedure="admin_update_order_status",
    procedure_args=_order_procedure_args,
)


@collection_loader(ORDERS)
def load_orders() -> list[dict]:
    """Orders newest first, each with its line items attached."""
    store = remote.store
    orders = store.select("orders", order_by="created_at", descending=True)
    if not orders:
        return []

    items = store.select("order_items", filters={"order_id": [o["id"] for o in orders]})
    by_order = defaultdict(list)
    for item in items:
        by_order[item["order_id"]].append(item)

    return [{**order, "items": by_order.get(order["id"], [])} for order in orders]


def list_orders(ctx, *, status: str | None = None, cached: bool = False) -> list[Order]:
    ctx.require_active()
    if status is not None and status not in statuses("order"):
        raise ValidationError(f"Unknown order status '{status}'")

    orders = [Order.from_row(row) for row in reconciler.rows(ORDERS, cached=cached)]
    if status is not None:
        orders = [o for o in orders if o.status == status]
    return orders


def transition_order(ctx, order_id: str, target: str, message: str | None = None):
    """
    Move an order along pending -> shipped -> delivered (or cancelled).

    Also appends the patient-visible status history entry, best-effort.
    """
    queue = SideEffectQueue()
    queue.enqueue("order status history", append_order_history, order_id, target, message)
    return run_transition(
        ctx,
        ORDER_TARGET,
        order_id,
        target,
        message=message,
        side_effects=queue,
    )
