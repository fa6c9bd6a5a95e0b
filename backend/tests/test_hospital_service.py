"""
Hospital resource ledger: bed inventory, operation theaters, bed bookings.
"""

from datetime import datetime

import pytest

from careledger.errors import NotFoundError, RemoteStoreError, TransitionError, ValidationError
from careledger.extensions import db
from careledger.models import BedBooking, HospitalBed, LedgerAuditEntry, OperationTheater
from careledger.services import hospital_service


def _bed(bed_id):
    return db.session.get(HospitalBed, bed_id)


# =============================================================================
# BED INVENTORY
# =============================================================================


class TestListBeds:

    def test_duplicates_collapse_to_canonical_row(self, spy, ctx, factory):
        factory.bed("ICU", 10, 4, updated_at=datetime(2026, 1, 1))
        fresh = factory.bed("ICU", 12, 6, updated_at=datetime(2026, 2, 1))
        factory.bed("General", 40, 30, updated_at=datetime(2026, 1, 1))

        beds = hospital_service.list_beds(ctx)

        assert [b.bed_type for b in beds] == ["General", "ICU"]
        icu = beds[1]
        assert icu.id == fresh
        assert icu.status == "6/12"
        assert icu.occupied_beds == 6


class TestSetBedCounts:

    def test_writes_only_the_canonical_row(self, spy, ctx, factory):
        stale = factory.bed("ICU", 10, 4, updated_at=datetime(2026, 1, 1))
        fresh = factory.bed("ICU", 12, 6, updated_at=datetime(2026, 2, 1))

        outcome = hospital_service.set_bed_counts(ctx, "ICU", available_beds=3)

        assert outcome.entity.id == fresh
        assert outcome.entity.available_beds == 3
        assert _bed(fresh).available_beds == 3
        assert _bed(stale).available_beds == 4

    def test_available_above_total_sends_nothing(self, spy, ctx, factory):
        factory.bed("ICU", 10, 4)
        spy.reset()

        with pytest.raises(ValidationError, match="cannot exceed"):
            hospital_service.set_bed_counts(ctx, "ICU", total_beds=5, available_beds=6)

        assert spy.calls == []

    def test_available_above_current_total_is_rejected_before_writing(self, spy, ctx, factory):
        bed_id = factory.bed("ICU", 10, 4)

        with pytest.raises(ValidationError):
            hospital_service.set_bed_counts(ctx, "ICU", available_beds=11)

        assert spy.writes() == []
        assert _bed(bed_id).available_beds == 4

    @pytest.mark.parametrize("value", [-1, "-3", "2.5", "1e3", True, None, 4.0])
    def test_bad_counts_are_rejected(self, spy, ctx, factory, value):
        factory.bed("ICU", 10, 4)

        with pytest.raises(ValidationError):
            if value is None:
                hospital_service.set_bed_counts(ctx, "ICU")
            else:
                hospital_service.set_bed_counts(ctx, "ICU", total_beds=value)

        assert spy.writes() == []

    def test_digit_strings_are_accepted(self, spy, ctx, factory):
        bed_id = factory.bed("ICU", 10, 4)

        hospital_service.set_bed_counts(ctx, "ICU", total_beds="12")

        assert _bed(bed_id).total_beds == 12

    def test_both_counts_are_one_procedure_call(self, spy, ctx, factory):
        bed_id = factory.bed("ICU", 10, 5)

        outcome = hospital_service.set_bed_counts(ctx, "ICU", total_beds=4, available_beds=2)

        assert outcome.path == "procedure"
        assert spy.calls_of("call", "admin_update_bed_count") == []
        [call] = spy.calls_of("call", "admin_set_bed_counts")
        assert call[2] == {"bed_id": bed_id, "total_beds": 4, "available_beds": 2}
        bed = _bed(bed_id)
        assert (bed.total_beds, bed.available_beds) == (4, 2)

    def test_both_counts_fall_back_to_one_direct_update(self, spy, ctx, factory):
        factory.bed("ICU", 10, 5)
        spy.fail_procedures.add("admin_set_bed_counts")

        outcome = hospital_service.set_bed_counts(ctx, "ICU", total_beds=20, available_beds=15)

        assert outcome.path == "direct"
        [update] = spy.calls_of("update", "hospital_beds")
        assert update[2]["values"]["total_beds"] == 20
        assert update[2]["values"]["available_beds"] == 15
        assert outcome.entity.status == "15/20"

    def test_failed_write_leaves_both_counts_untouched(self, spy, ctx, factory):
        bed_id = factory.bed("ICU", 10, 3)
        spy.fail_procedures.add("admin_set_bed_counts")
        spy.fail_updates.add("hospital_beds")

        with pytest.raises(RemoteStoreError):
            hospital_service.set_bed_counts(ctx, "ICU", total_beds=20, available_beds=15)

        bed = _bed(bed_id)
        assert (bed.total_beds, bed.available_beds) == (10, 3)

    def test_combined_update_writes_one_audit_entry(self, spy, ctx, factory):
        bed_id = factory.bed("ICU", 10, 5)

        hospital_service.set_bed_counts(ctx, "ICU", total_beds=20, available_beds=15)

        entries = db.session.query(LedgerAuditEntry).filter_by(entity_id=bed_id).all()
        assert len(entries) == 1
        assert entries[0].new_status == "15/20"
        assert entries[0].actor == "Ops Admin"

    def test_direct_update_guards_the_invariant(self, spy, ctx, factory):
        bed_id = factory.bed("ICU", 10, 5)
        spy.fail_procedures.add("admin_update_bed_count")

        outcome = hospital_service.set_bed_counts(ctx, "ICU", available_beds=7)

        assert outcome.path == "direct"
        [update] = spy.calls_of("update", "hospital_beds")
        assert update[2]["guards"] == (("total_beds", "gte", 7),)
        assert _bed(bed_id).available_beds == 7

    def test_unknown_bed_type(self, spy, ctx, factory):
        factory.bed("ICU", 10, 5)

        with pytest.raises(NotFoundError):
            hospital_service.set_bed_counts(ctx, "Burns", total_beds=3)


# =============================================================================
# OPERATION THEATERS
# =============================================================================


class TestTheaters:

    def test_set_availability_on_canonical_row(self, spy, ctx, factory):
        factory.theater("OT-1", True, updated_at=datetime(2026, 1, 1))
        fresh = factory.theater("OT-1", True, updated_at=datetime(2026, 2, 1))

        outcome = hospital_service.set_theater_availability(ctx, "OT-1", False)

        assert outcome.entity.status == "occupied"
        assert db.session.get(OperationTheater, fresh).is_available is False
        [call] = spy.calls_of("call", "admin_update_ot_status")
        assert call[2] == {"ot_id": fresh, "new_status": False}

    def test_availability_must_be_boolean(self, spy, ctx, factory):
        factory.theater("OT-1")

        with pytest.raises(ValidationError):
            hospital_service.set_theater_availability(ctx, "OT-1", "yes")

        assert spy.calls == []

    def test_list_theaters(self, spy, ctx, factory):
        factory.theater("OT-2", False)
        factory.theater("OT-1", True)

        theaters = hospital_service.list_theaters(ctx)

        assert [(t.name, t.status) for t in theaters] == [("OT-1", "available"), ("OT-2", "occupied")]


# =============================================================================
# BED BOOKINGS
# =============================================================================


class TestBookings:

    def test_confirm_pending_booking(self, spy, ctx, factory):
        booking_id = factory.booking()

        outcome = hospital_service.transition_booking(ctx, booking_id, "confirmed")

        assert outcome.entity.admission_status == "confirmed"
        assert db.session.get(BedBooking, booking_id).admission_status == "confirmed"

    def test_confirmed_booking_is_final(self, spy, ctx, factory):
        booking_id = factory.booking(admission_status="confirmed")

        with pytest.raises(TransitionError):
            hospital_service.transition_booking(ctx, booking_id, "rejected")

        assert spy.writes() == []

    def test_fallback_guards_admission_status(self, spy, ctx, factory):
        booking_id = factory.booking()
        spy.fail_procedures.add("admin_update_booking_status")

        hospital_service.transition_booking(ctx, booking_id, "rejected")

        [update] = spy.calls_of("update", "bed_bookings")
        assert update[2]["guards"] == (("admission_status", "eq", "pending"),)

    def test_list_filters_by_status(self, spy, ctx, factory):
        factory.booking()
        confirmed = factory.booking(admission_status="confirmed")

        bookings = hospital_service.list_bookings(ctx, status="confirmed")

        assert [b.id for b in bookings] == [confirmed]

    def test_unknown_status_filter(self, spy, ctx):
        with pytest.raises(ValidationError):
            hospital_service.list_bookings(ctx, status="admitted")
