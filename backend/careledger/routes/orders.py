# Overview: Flask API routes for medicine orders; parses input and returns JSON responses.

from flask import Blueprint, g, jsonify, request

from ..decorators import ledger_errors, require_admin
from ..services import order_service
from ._params import cached_flag, transition_payload


orders_bp = Blueprint("orders", __name__, url_prefix="/api/admin/orders")


@orders_bp.get("")
@require_admin
@ledger_errors("list orders")
def list_orders_route():
    orders = order_service.list_orders(
        g.admin_context,
        status=request.args.get("status") or None,
        cached=cached_flag(),
    )
    return jsonify({"orders": [o.to_dict() for o in orders]}), 200


@orders_bp.post("/<order_id>/transition")
@require_admin
@ledger_errors("order transition")
def transition_order_route(order_id: str):
    status, message = transition_payload()
    outcome = order_service.transition_order(g.admin_context, order_id, status, message)
    return jsonify(outcome.to_dict()), 200
