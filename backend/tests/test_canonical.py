"""
Canonical row selection for logically-singleton resources.

Verifies:
- Freshest updated_at wins per logical key
- Equal timestamps break on the smallest id
- Rows without a timestamp lose
- Selection is idempotent and duplicates are reported
"""

from datetime import datetime

from careledger.services.canonical_service import canonical_rows, canonicalize, duplicate_rows


def _bed(row_id, bed_type, updated_at, total=10, available=5):
    return {
        "id": row_id,
        "bed_type": bed_type,
        "total_beds": total,
        "available_beds": available,
        "updated_at": updated_at,
    }


class TestCanonicalize:

    def test_latest_updated_at_wins(self):
        rows = [
            _bed("a", "ICU", datetime(2026, 3, 1, 10, 0), total=10),
            _bed("b", "ICU", datetime(2026, 3, 2, 10, 0), total=12),
            _bed("c", "General", datetime(2026, 3, 1, 9, 0), total=40),
        ]

        canonical = canonicalize(rows, "bed_type")

        assert set(canonical) == {"ICU", "General"}
        assert canonical["ICU"]["id"] == "b"
        assert canonical["General"]["id"] == "c"

    def test_equal_timestamps_pick_smallest_id(self):
        ts = datetime(2026, 3, 1, 10, 0)
        rows = [_bed("zeta", "ICU", ts), _bed("alpha", "ICU", ts), _bed("mid", "ICU", ts)]

        assert canonicalize(rows, "bed_type")["ICU"]["id"] == "alpha"
        # Input order does not matter
        assert canonicalize(list(reversed(rows)), "bed_type")["ICU"]["id"] == "alpha"

    def test_row_without_timestamp_loses(self):
        rows = [
            _bed("a", "ICU", None),
            _bed("b", "ICU", datetime(2020, 1, 1)),
            _bed("c", "ICU", "not a timestamp"),
        ]

        assert canonicalize(rows, "bed_type")["ICU"]["id"] == "b"

    def test_iso_strings_and_datetimes_compare(self):
        rows = [
            _bed("a", "ICU", "2026-03-01T10:00:00Z"),
            _bed("b", "ICU", datetime(2026, 3, 1, 9, 59)),
        ]

        assert canonicalize(rows, "bed_type")["ICU"]["id"] == "a"

    def test_rows_without_key_are_ignored(self):
        rows = [_bed("a", None, datetime(2026, 1, 1)), _bed("b", "ICU", datetime(2026, 1, 1))]

        assert list(canonicalize(rows, "bed_type")) == ["ICU"]

    def test_idempotent(self):
        rows = [
            _bed("a", "ICU", datetime(2026, 3, 1)),
            _bed("b", "ICU", datetime(2026, 3, 2)),
            _bed("c", "General", datetime(2026, 3, 1)),
        ]

        once = canonical_rows(rows, "bed_type")
        twice = canonical_rows(once, "bed_type")

        assert once == twice
        assert [r["bed_type"] for r in once] == ["General", "ICU"]

    def test_theaters_keyed_by_name(self):
        rows = [
            {"id": "1", "name": "OT-1", "is_available": True, "updated_at": datetime(2026, 1, 1)},
            {"id": "2", "name": "OT-1", "is_available": False, "updated_at": datetime(2026, 1, 2)},
        ]

        assert canonicalize(rows, "name")["OT-1"]["is_available"] is False


class TestDuplicateRows:

    def test_reports_shadowed_rows_only(self):
        rows = [
            _bed("a", "ICU", datetime(2026, 3, 1)),
            _bed("b", "ICU", datetime(2026, 3, 2)),
            _bed("c", "General", datetime(2026, 3, 1)),
        ]

        assert [r["id"] for r in duplicate_rows(rows, "bed_type")] == ["a"]

    def test_no_duplicates(self):
        rows = [_bed("a", "ICU", datetime(2026, 3, 1)), _bed("b", "General", datetime(2026, 3, 1))]

        assert duplicate_rows(rows, "bed_type") == []
