# Overview: Flask API routes for admin authentication; issues and revokes session tokens.

"""
Administrator authentication routes

A login issues the session token that every /api/admin route re-validates.
Logout revokes it immediately.
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import bearer_token, require_admin
from ..services import auth_service, session_service
from ..time_utils import to_utc_z


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        admin = auth_service.authenticate(username, password)
        if not admin:
            current_app.logger.info("Failed admin login for %s", username)
            return jsonify({"error": "Invalid credentials"}), 401

        context, token = session_service.create_session(admin.id)

        return jsonify({
            "admin": admin.to_dict(),
            "token": token,
            "expires_at": to_utc_z(context.expires_at),
            "message": "Login successful",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login admin")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    try:
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authorization header required"}), 401

        if not session_service.revoke_session(token, reason="Admin logout"):
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout admin")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_admin
def me_route():
    ctx = g.admin_context
    return jsonify({
        "admin_id": ctx.admin_id,
        "username": ctx.username,
        "display_name": ctx.display_name,
        "expires_at": to_utc_z(ctx.expires_at),
    }), 200
