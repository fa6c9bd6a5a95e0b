# Overview: Request decorators for admin API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .errors import (
    AuthorizationError,
    NotAppliedError,
    NotFoundError,
    RemoteStoreError,
    TransitionError,
    ValidationError,
)
from .services import session_service


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_admin(f):
    """
    Require a valid administrator session.

    Sets g.admin_context to the immutable AdminContext that route handlers
    pass explicitly into every ledger operation.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.admin_context = context
        return f(*args, **kwargs)

    return decorated_function


def ledger_errors(action: str):
    """
    Translate ledger errors into JSON responses.

    The services have already forced a re-fetch of the affected collection
    for every error that reached the store.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"error": str(e)}), 400
            except AuthorizationError as e:
                return jsonify({"error": str(e)}), 401
            except NotFoundError as e:
                return jsonify({"error": str(e)}), 404
            except TransitionError as e:
                return jsonify({
                    "error": str(e),
                    "current_status": e.current,
                    "requested_status": e.target,
                }), 409
            except NotAppliedError as e:
                return jsonify({"error": str(e), "not_applied": True}), 409
            except RemoteStoreError as e:
                current_app.logger.warning("%s failed at the remote store: %s", action, e)
                return jsonify({"error": "Remote data store unavailable", "detail": str(e)}), 502
            except Exception:
                current_app.logger.exception("Unexpected error during %s", action)
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function
    return decorator
