# Overview: Flask API routes for support tickets and system alerts.

from flask import Blueprint, g, jsonify, request

from ..decorators import ledger_errors, require_admin
from ..services import support_service
from ._params import cached_flag, json_body, transition_payload


support_bp = Blueprint("support", __name__, url_prefix="/api/admin")


def _resolved_filter():
    value = request.args.get("resolved")
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes")


@support_bp.get("/support/tickets")
@require_admin
@ledger_errors("list tickets")
def list_tickets_route():
    tickets = support_service.list_tickets(
        g.admin_context,
        status=request.args.get("status") or None,
        priority=request.args.get("priority") or None,
        search=request.args.get("q"),
        cached=cached_flag(),
    )
    return jsonify({"tickets": [t.to_dict() for t in tickets]}), 200


@support_bp.post("/support/tickets/<ticket_id>/transition")
@require_admin
@ledger_errors("ticket transition")
def transition_ticket_route(ticket_id: str):
    status, message = transition_payload()
    outcome = support_service.transition_ticket(g.admin_context, ticket_id, status, message)
    return jsonify(outcome.to_dict()), 200


@support_bp.get("/alerts")
@require_admin
@ledger_errors("list alerts")
def list_alerts_route():
    alerts = support_service.list_alerts(
        g.admin_context,
        resolved=_resolved_filter(),
        search=request.args.get("q"),
        cached=cached_flag(),
    )
    return jsonify({"alerts": [a.to_dict() for a in alerts]}), 200


@support_bp.post("/alerts")
@require_admin
@ledger_errors("create alert")
def create_alert_route():
    data = json_body()
    outcome = support_service.create_alert(
        g.admin_context,
        title=data.get("title"),
        message=data.get("message"),
        alert_type=data.get("type", "info"),
        severity=data.get("severity", "medium"),
    )
    return jsonify(outcome.to_dict()), 201


@support_bp.post("/alerts/<alert_id>/toggle")
@require_admin
@ledger_errors("toggle alert")
def toggle_alert_route(alert_id: str):
    outcome = support_service.toggle_alert(g.admin_context, alert_id)
    return jsonify(outcome.to_dict()), 200
