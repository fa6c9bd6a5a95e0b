# Overview: Flask API routes for hospital beds, operation theaters and bed bookings.

from flask import Blueprint, g, jsonify, request

from ..decorators import ledger_errors, require_admin
from ..services import hospital_service
from ._params import cached_flag, json_body, transition_payload


hospital_bp = Blueprint("hospital", __name__, url_prefix="/api/admin/hospital")


@hospital_bp.get("/beds")
@require_admin
@ledger_errors("list beds")
def list_beds_route():
    beds = hospital_service.list_beds(g.admin_context, cached=cached_flag())
    return jsonify({"beds": [b.to_dict() for b in beds]}), 200


@hospital_bp.patch("/beds/<bed_type>")
@require_admin
@ledger_errors("bed count update")
def update_beds_route(bed_type: str):
    data = json_body()
    outcome = hospital_service.set_bed_counts(
        g.admin_context,
        bed_type,
        total_beds=data.get("total_beds"),
        available_beds=data.get("available_beds"),
    )
    return jsonify(outcome.to_dict()), 200


@hospital_bp.get("/theaters")
@require_admin
@ledger_errors("list theaters")
def list_theaters_route():
    theaters = hospital_service.list_theaters(g.admin_context, cached=cached_flag())
    return jsonify({"theaters": [t.to_dict() for t in theaters]}), 200


@hospital_bp.patch("/theaters/<name>")
@require_admin
@ledger_errors("theater availability update")
def update_theater_route(name: str):
    data = json_body()
    outcome = hospital_service.set_theater_availability(
        g.admin_context, name, data.get("is_available")
    )
    return jsonify(outcome.to_dict()), 200


@hospital_bp.get("/bookings")
@require_admin
@ledger_errors("list bookings")
def list_bookings_route():
    bookings = hospital_service.list_bookings(
        g.admin_context,
        status=request.args.get("status") or None,
        cached=cached_flag(),
    )
    return jsonify({"bookings": [b.to_dict() for b in bookings]}), 200


@hospital_bp.post("/bookings/<booking_id>/transition")
@require_admin
@ledger_errors("booking transition")
def transition_booking_route(booking_id: str):
    status, message = transition_payload()
    outcome = hospital_service.transition_booking(g.admin_context, booking_id, status, message)
    return jsonify(outcome.to_dict()), 200
