from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    - naive strings are interpreted as UTC
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize a row timestamp to a comparable UTC-naive datetime.

    Rows from the SQL store carry datetimes, rows from the REST store carry
    ISO strings. Anything unparseable is treated as missing.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    if isinstance(value, str):
        try:
            return parse_iso_datetime(value)
        except ValueError:
            return None
    return None


def to_utc_z(dt: Any) -> Optional[str]:
    """
    Serializes a datetime (or ISO string) to ISO-8601 with trailing 'Z'.
    Naive values are treated as UTC.
    """
    dt = coerce_timestamp(dt)
    if dt is None:
        return None
    dt_utc = dt.replace(tzinfo=timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
