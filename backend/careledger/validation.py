from __future__ import annotations

from typing import Any

from .errors import ValidationError


ALERT_TYPES = {"info", "warning", "error"}
ALERT_SEVERITIES = {"low", "medium", "high"}
TICKET_PRIORITIES = {"low", "medium", "high"}


def require_count(name: str, value: Any) -> int:
    """
    Bed counts: non-negative integers.

    Accepts digit strings from JSON/form input; rejects bools, floats and
    scientific notation.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or not stripped.lstrip("-").isdigit():
            raise ValidationError(f"{name} must be a plain integer")
        number = int(stripped)
    else:
        raise ValidationError(f"{name} must be an integer")

    if number < 0:
        raise ValidationError(f"{name} cannot be negative")
    return number


def validate_bed_counts(total_beds: int, available_beds: int) -> None:
    """Available beds can never exceed total beds."""
    require_count("total_beds", total_beds)
    require_count("available_beds", available_beds)
    if available_beds > total_beds:
        raise ValidationError(
            f"Available beds ({available_beds}) cannot exceed total beds ({total_beds})"
        )


def require_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{name} must be true or false")


def require_text(name: str, value: Any, *, max_length: int | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    text = value.strip()
    if max_length is not None and len(text) > max_length:
        raise ValidationError(f"{name} must be at most {max_length} characters")
    return text


def require_choice(name: str, value: Any, choices: set[str]) -> str:
    if value not in choices:
        raise ValidationError(f"{name} must be one of: {', '.join(sorted(choices))}")
    return value


def matches_search(search: str | None, *values: Any) -> bool:
    """Case-insensitive substring match over the given text fields."""
    if not search:
        return True
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in str(v).lower() for v in values if v)
