from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow
from ._ids import new_uuid


class Order(db.Model):
    """
    Medicine order placed at checkout.

    Created by the patient-facing checkout (outside this service), mutated only
    through the admin ledger write path, never deleted.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_status_created", "status", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    user_id = db.Column(db.String(64), nullable=True, index=True)

    # Authoritative storage in cents
    total_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="pending")

    address = db.Column(db.Text, nullable=True)
    phone_number = db.Column(db.String(32), nullable=True)
    tracking_number = db.Column(db.String(64), nullable=True)
    estimated_delivery = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status!r}>"


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    medicine_id = db.Column(db.String(36), nullable=False)
    medicine_name = db.Column(db.String(255), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price_cents = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)


class OrderStatusHistory(db.Model):
    """Patient-visible order timeline. Best-effort, append-only."""
    __tablename__ = "order_status_history"

    id = db.Column(db.String(36), primary_key=True, default=new_uuid)
    order_id = db.Column(db.String(36), db.ForeignKey("orders.id"), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False)
    status_message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
