# Overview: System health endpoint.

import time

from flask import Blueprint, current_app, jsonify

from ..extensions import remote
from ..time_utils import to_utc_z, utcnow


system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    """One cheap read against the remote store."""
    start_time = time.time()
    try:
        remote.store.select("system_alerts", filters={"is_resolved": False})
        return {
            "status": "healthy",
            "backend": current_app.config.get("REMOTE_STORE_BACKEND"),
            "latency_ms": round((time.time() - start_time) * 1000, 2),
        }
    except Exception:
        current_app.logger.exception("Remote store health check failed")
        return {
            "status": "unhealthy",
            "backend": current_app.config.get("REMOTE_STORE_BACKEND"),
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Remote store error",
        }


@system_bp.get("/health")
def health():
    store = check_store_health()
    status = 200 if store["status"] == "healthy" else 503
    return jsonify({
        "status": store["status"],
        "checked_at": to_utc_z(utcnow()),
        "remote_store": store,
    }), status
