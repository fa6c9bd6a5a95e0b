# Overview: Shared request parsing for the admin ledger routes.

from flask import request

from ..errors import ValidationError


def cached_flag() -> bool:
    """?source=cache serves the reconciled in-memory view."""
    return request.args.get("source") == "cache"


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def transition_payload() -> tuple[str, str | None]:
    data = json_body()
    status = data.get("status")
    if not isinstance(status, str) or not status.strip():
        raise ValidationError("status is required")
    message = data.get("message")
    if message is not None and not isinstance(message, str):
        raise ValidationError("message must be a string")
    return status.strip(), message
