# Overview: Flask API routes for the admin dashboard summary and audit trail.

from flask import Blueprint, g, jsonify, request

from ..decorators import ledger_errors, require_admin
from ..errors import ValidationError
from ..services import ledger_service, summary_service
from ..time_utils import to_utc_z


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/summary")
@require_admin
@ledger_errors("admin summary")
def summary_route():
    return jsonify(summary_service.admin_summary(g.admin_context)), 200


@admin_bp.get("/audit")
@require_admin
@ledger_errors("audit trail")
def audit_route():
    g.admin_context.require_active()
    try:
        limit = int(request.args.get("limit", 200))
    except ValueError:
        raise ValidationError("limit must be an integer")

    entries = ledger_service.list_audit_entries(
        entity_type=request.args.get("entity_type") or None,
        entity_id=request.args.get("entity_id") or None,
        limit=min(max(limit, 1), 1000),
    )
    return jsonify({"entries": [_entry(e) for e in entries]}), 200


def _entry(row: dict) -> dict:
    return {**row, "created_at": to_utc_z(row.get("created_at"))}
