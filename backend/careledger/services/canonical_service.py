# Overview: Service-layer operations for canonicalization; selects one authoritative row per logical key.

"""
Canonical row selection

Bed inventory rows (keyed by bed_type) and operation theater rows (keyed by
name) are logically singletons, but the store does not enforce it: seed
scripts and concurrent admin sessions leave duplicate rows behind.

RULES:
1. Exactly one row per logical key is canonical.
2. The canonical row has the latest updated_at among rows sharing the key.
3. Equal timestamps: the lexicographically smallest id (as a string) wins.
4. A row without a parseable timestamp loses to any timestamped row.

Pure functions, no I/O. Running canonicalize on its own output is a no-op.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

from ..time_utils import coerce_timestamp


def _freshness(row: Mapping[str, Any], timestamp_field: str):
    ts = coerce_timestamp(row.get(timestamp_field))
    # Larger sorts first: timestamped rows before untimestamped, newer before older
    return (ts is not None, ts or datetime.min)


def _prefer(
    candidate: Mapping[str, Any],
    incumbent: Mapping[str, Any],
    timestamp_field: str,
    id_field: str,
) -> bool:
    a = _freshness(candidate, timestamp_field)
    b = _freshness(incumbent, timestamp_field)
    if a != b:
        return a > b
    return str(candidate.get(id_field)) < str(incumbent.get(id_field))


def canonicalize(
    rows: Iterable[Mapping[str, Any]],
    key_field: str,
    *,
    timestamp_field: str = "updated_at",
    id_field: str = "id",
) -> dict[str, Mapping[str, Any]]:
    """
    Select the canonical row for every logical key.

    Args:
        rows: unordered rows, each carrying key_field and timestamp_field
        key_field: logical key column (e.g. "bed_type", "name")

    Returns:
        key -> canonical row
    """
    canonical: dict[str, Mapping[str, Any]] = {}
    for row in rows:
        key = row.get(key_field)
        if key is None:
            continue
        current = canonical.get(key)
        if current is None or _prefer(row, current, timestamp_field, id_field):
            canonical[key] = row
    return canonical


def canonical_rows(rows, key_field: str, **kwargs) -> list:
    """Canonical rows ordered by logical key, for display."""
    canonical = canonicalize(rows, key_field, **kwargs)
    return [canonical[key] for key in sorted(canonical)]


def duplicate_rows(rows, key_field: str, *, id_field: str = "id", **kwargs) -> list:
    """Rows shadowed by a fresher row with the same logical key."""
    rows = list(rows)
    keep = {
        str(row.get(id_field))
        for row in canonicalize(rows, key_field, id_field=id_field, **kwargs).values()
    }
    return [
        row for row in rows
        if row.get(key_field) is not None and str(row.get(id_field)) not in keep
    ]
