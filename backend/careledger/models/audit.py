from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow, to_utc_z


class LedgerAuditEntry(db.Model):
    """
    Append-only admin audit trail.

    Best-effort and non-authoritative: the row an entry describes is the
    source of truth, an entry may be missing if its write failed.
    """
    __tablename__ = "ledger_audit_entries"
    __table_args__ = (
        db.Index("ix_ledger_audit_entity", "entity_type", "entity_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    entity_type = db.Column(db.String(32), nullable=False)
    entity_id = db.Column(db.String(64), nullable=False)
    new_status = db.Column(db.String(32), nullable=False)
    message = db.Column(db.Text, nullable=True)
    actor = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "new_status": self.new_status,
            "message": self.message,
            "actor": self.actor,
            "created_at": to_utc_z(self.created_at),
        }
