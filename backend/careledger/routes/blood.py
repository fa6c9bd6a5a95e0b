# Overview: Flask API routes for blood requests and donor applications.

from flask import Blueprint, g, jsonify, request

from ..decorators import ledger_errors, require_admin
from ..services import blood_service
from ._params import cached_flag, transition_payload


blood_bp = Blueprint("blood", __name__, url_prefix="/api/admin/blood")


@blood_bp.get("/requests")
@require_admin
@ledger_errors("list blood requests")
def list_requests_route():
    requests_ = blood_service.list_blood_requests(
        g.admin_context,
        status=request.args.get("status") or None,
        blood_group=request.args.get("blood_group") or None,
        cached=cached_flag(),
    )
    return jsonify({"requests": [r.to_dict() for r in requests_]}), 200


@blood_bp.post("/requests/<request_id>/transition")
@require_admin
@ledger_errors("blood request transition")
def transition_request_route(request_id: str):
    status, message = transition_payload()
    outcome = blood_service.transition_blood_request(g.admin_context, request_id, status, message)
    return jsonify(outcome.to_dict()), 200


@blood_bp.get("/donors")
@require_admin
@ledger_errors("list blood donors")
def list_donors_route():
    donors = blood_service.list_blood_donors(
        g.admin_context,
        status=request.args.get("status") or None,
        blood_group=request.args.get("blood_group") or None,
        cached=cached_flag(),
    )
    return jsonify({"donors": [d.to_dict() for d in donors]}), 200


@blood_bp.post("/donors/<donor_id>/transition")
@require_admin
@ledger_errors("blood donor transition")
def transition_donor_route(donor_id: str):
    status, message = transition_payload()
    outcome = blood_service.transition_blood_donor(g.admin_context, donor_id, status, message)
    return jsonify(outcome.to_dict()), 200
