# Overview: Flask API routes for doctor credential review and approved doctor listings.

from flask import Blueprint, g, jsonify, request

from ..decorators import ledger_errors, require_admin
from ..services import approval_service, doctor_service
from ._params import cached_flag, json_body


doctors_bp = Blueprint("doctors", __name__, url_prefix="/api/admin/doctors")


@doctors_bp.get("/pending")
@require_admin
@ledger_errors("list pending doctors")
def list_pending_route():
    pending = doctor_service.list_pending(g.admin_context, cached=cached_flag())
    return jsonify({"pending": [p.to_dict() for p in pending]}), 200


@doctors_bp.post("/pending/<source>/<source_id>/approve")
@require_admin
@ledger_errors("doctor approval")
def approve_route(source: str, source_id: str):
    ctx = g.admin_context
    pending = doctor_service.load_pending(ctx, source, source_id)
    decision = approval_service.approve(ctx, pending)
    return jsonify(decision.to_dict()), 200


@doctors_bp.post("/pending/<source>/<source_id>/reject")
@require_admin
@ledger_errors("doctor rejection")
def reject_route(source: str, source_id: str):
    ctx = g.admin_context
    message = json_body().get("message")
    pending = doctor_service.load_pending(ctx, source, source_id)
    decision = approval_service.reject(ctx, pending, message=message)
    return jsonify(decision.to_dict()), 200


@doctors_bp.get("/approved")
@require_admin
@ledger_errors("list approved doctors")
def list_approved_route():
    doctors = doctor_service.list_approved(
        g.admin_context,
        search=request.args.get("q"),
        cached=cached_flag(),
    )
    return jsonify({"doctors": [d.to_dict() for d in doctors]}), 200


@doctors_bp.delete("/approved/<doctor_id>")
@require_admin
@ledger_errors("doctor removal")
def remove_route(doctor_id: str):
    decision = approval_service.remove_doctor(g.admin_context, doctor_id)
    return jsonify(decision.to_dict()), 200
