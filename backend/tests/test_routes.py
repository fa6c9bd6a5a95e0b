"""
Admin API routes.

Verifies:
- Unauthenticated requests return 401
- Ledger errors map to 400/404/409/502 with JSON bodies
- End-to-end flows for each admin screen
"""

import pytest

from careledger.extensions import db
from careledger.models import HospitalBed, Order
from conftest import ADMIN_PASSWORD, ADMIN_USERNAME, auth_headers


# =============================================================================
# UNAUTHENTICATED ACCESS (401)
# =============================================================================


class TestUnauthenticatedAccess:
    """All admin endpoints return 401 without a valid token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/admin/orders"),
            ("POST", "/api/admin/orders/o-1/transition"),
            ("GET", "/api/admin/hospital/beds"),
            ("PATCH", "/api/admin/hospital/beds/ICU"),
            ("GET", "/api/admin/hospital/theaters"),
            ("GET", "/api/admin/hospital/bookings"),
            ("GET", "/api/admin/blood/requests"),
            ("GET", "/api/admin/blood/donors"),
            ("GET", "/api/admin/support/tickets"),
            ("GET", "/api/admin/alerts"),
            ("POST", "/api/admin/alerts"),
            ("GET", "/api/admin/doctors/pending"),
            ("GET", "/api/admin/doctors/approved"),
            ("DELETE", "/api/admin/doctors/approved/d-1"),
            ("GET", "/api/admin/summary"),
            ("GET", "/api/admin/audit"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_bogus_token(self, client):
        resp = client.get("/api/admin/orders", headers=auth_headers("not-a-token"))
        assert resp.status_code == 401
        assert resp.json["error"] == "Invalid or expired token"


# =============================================================================
# AUTH
# =============================================================================


class TestAuthRoutes:

    def test_login_me_logout(self, client, admin):
        resp = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
        assert resp.status_code == 200
        token = resp.json["token"]
        assert resp.json["admin"]["username"] == ADMIN_USERNAME
        assert resp.json["expires_at"].endswith("Z")

        me = client.get("/api/auth/me", headers=auth_headers(token))
        assert me.status_code == 200
        assert me.json["display_name"] == "Ops Admin"

        assert client.post("/api/auth/logout", headers=auth_headers(token)).status_code == 200
        assert client.get("/api/auth/me", headers=auth_headers(token)).status_code == 401

    def test_bad_credentials(self, client, admin):
        resp = client.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": "Wrong123!"})
        assert resp.status_code == 401

    def test_missing_credentials(self, client):
        assert client.post("/api/auth/login", json={"username": ADMIN_USERNAME}).status_code == 400


# =============================================================================
# ERROR MAPPING
# =============================================================================


class TestErrorMapping:

    def test_validation_error_is_400(self, client, headers, factory):
        factory.bed("ICU", 10, 4)

        resp = client.patch("/api/admin/hospital/beds/ICU", json={"total_beds": 5, "available_beds": 6}, headers=headers)

        assert resp.status_code == 400
        assert "cannot exceed" in resp.json["error"]

    def test_missing_status_is_400(self, client, headers, factory):
        order_id = factory.order()

        resp = client.post(f"/api/admin/orders/{order_id}/transition", json={}, headers=headers)

        assert resp.status_code == 400

    def test_transition_error_is_409(self, client, headers, factory):
        order_id = factory.order()

        resp = client.post(f"/api/admin/orders/{order_id}/transition", json={"status": "delivered"}, headers=headers)

        assert resp.status_code == 409
        assert resp.json["current_status"] == "pending"
        assert resp.json["requested_status"] == "delivered"

    def test_not_found_is_404(self, client, headers):
        resp = client.post("/api/admin/orders/nope/transition", json={"status": "shipped"}, headers=headers)
        assert resp.status_code == 404

    def test_remote_store_outage_is_502(self, client, headers, spy):
        spy.fail_selects.add("orders")

        resp = client.get("/api/admin/orders", headers=headers)

        assert resp.status_code == 502
        assert resp.json["error"] == "Remote data store unavailable"


# =============================================================================
# FLOWS
# =============================================================================


class TestOrderRoutes:

    def test_list_and_transition(self, client, headers, factory):
        order_id = factory.order(items=[("med-1", 2, 500)])

        listing = client.get("/api/admin/orders", headers=headers)
        assert listing.status_code == 200
        [order] = listing.json["orders"]
        assert order["items"][0]["line_total_cents"] == 1000

        resp = client.post(
            f"/api/admin/orders/{order_id}/transition",
            json={"status": "shipped", "message": "Courier picked up"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json["entity"]["status"] == "shipped"
        assert resp.json["side_effects"]["failed"] == []
        assert db.session.get(Order, order_id).status == "shipped"

    def test_cached_source(self, client, headers, factory):
        order_id = factory.order()
        client.get("/api/admin/orders", headers=headers)
        db.session.get(Order, order_id).status = "cancelled"
        db.session.commit()

        cached = client.get("/api/admin/orders?source=cache", headers=headers)
        fresh = client.get("/api/admin/orders", headers=headers)

        assert cached.json["orders"][0]["status"] == "pending"
        assert fresh.json["orders"][0]["status"] == "cancelled"


class TestHospitalRoutes:

    def test_beds(self, client, headers, factory):
        bed_id = factory.bed("ICU", 10, 4)

        resp = client.patch("/api/admin/hospital/beds/ICU", json={"available_beds": "6"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json["entity"]["available_beds"] == 6
        assert db.session.get(HospitalBed, bed_id).available_beds == 6

        beds = client.get("/api/admin/hospital/beds", headers=headers).json["beds"]
        assert [(b["bed_type"], b["available_beds"], b["total_beds"]) for b in beds] == [("ICU", 6, 10)]

    def test_theater_toggle(self, client, headers, factory):
        factory.theater("OT-1")

        resp = client.patch("/api/admin/hospital/theaters/OT-1", json={"is_available": False}, headers=headers)
        assert resp.status_code == 200

        theaters = client.get("/api/admin/hospital/theaters", headers=headers).json["theaters"]
        assert theaters[0]["is_available"] is False

    def test_booking_transition(self, client, headers, factory):
        booking_id = factory.booking()

        resp = client.post(
            f"/api/admin/hospital/bookings/{booking_id}/transition",
            json={"status": "confirmed"},
            headers=headers,
        )

        assert resp.status_code == 200
        assert resp.json["entity"]["admission_status"] == "confirmed"


class TestSupportRoutes:

    def test_alert_lifecycle(self, client, headers):
        created = client.post(
            "/api/admin/alerts",
            json={"title": "Oxygen low", "message": "Ward 3 below 20%", "type": "warning", "severity": "high"},
            headers=headers,
        )
        assert created.status_code == 201
        alert_id = created.json["id"]

        toggled = client.post(f"/api/admin/alerts/{alert_id}/toggle", headers=headers)
        assert toggled.status_code == 200
        assert toggled.json["entity"]["status"] == "resolved"

        active = client.get("/api/admin/alerts?resolved=false", headers=headers).json["alerts"]
        assert active == []

    def test_ticket_needs_response_text(self, client, headers, factory):
        ticket_id = factory.ticket()

        resp = client.post(
            f"/api/admin/support/tickets/{ticket_id}/transition",
            json={"status": "responded"},
            headers=headers,
        )

        assert resp.status_code == 409


class TestDoctorRoutes:

    def test_approve_flow(self, client, headers, factory):
        request_id = factory.credential_request()

        pending = client.get("/api/admin/doctors/pending", headers=headers).json["pending"]
        assert [p["id"] for p in pending] == [f"request:{request_id}"]

        resp = client.post(f"/api/admin/doctors/pending/request/{request_id}/approve", headers=headers)
        assert resp.status_code == 200
        doctor_id = resp.json["doctor_id"]
        assert resp.json["profile"]["is_approved"] is True

        approved = client.get("/api/admin/doctors/approved", headers=headers).json["doctors"]
        assert [d["id"] for d in approved] == [doctor_id]
        assert client.get("/api/admin/doctors/pending", headers=headers).json["pending"] == []

        removed = client.delete(f"/api/admin/doctors/approved/{doctor_id}", headers=headers)
        assert removed.status_code == 200
        assert client.get("/api/admin/doctors/approved", headers=headers).json["doctors"] == []

    def test_unknown_source_is_400(self, client, headers):
        resp = client.post("/api/admin/doctors/pending/fax/1/approve", headers=headers)
        assert resp.status_code == 400


class TestAdminRoutes:

    def test_summary(self, client, headers, factory):
        factory.order()
        factory.order(status="shipped")
        factory.bed("ICU", 10, 4)
        factory.bed("General", 30, 20)
        factory.theater("OT-1", True)
        factory.theater("OT-2", False)
        factory.ticket()
        factory.alert()
        factory.credential_request()
        factory.doctor_profile()

        summary = client.get("/api/admin/summary", headers=headers).json

        assert summary["pending_orders"] == 1
        assert summary["shipped_orders"] == 1
        assert summary["beds"] == {"total": 40, "available": 24}
        assert summary["theaters_available"] == 1
        assert summary["open_tickets"] == 1
        assert summary["active_alerts"] == 1
        assert summary["pending_credentials"] == 2

    def test_audit_trail(self, client, headers, factory):
        order_id = factory.order()
        client.post(f"/api/admin/orders/{order_id}/transition", json={"status": "shipped"}, headers=headers)
        client.post(f"/api/admin/orders/{order_id}/transition", json={"status": "delivered"}, headers=headers)

        entries = client.get(
            f"/api/admin/audit?entity_type=order&entity_id={order_id}",
            headers=headers,
        ).json["entries"]

        assert [e["new_status"] for e in entries] == ["delivered", "shipped"]
        assert all(e["actor"] == "Ops Admin" for e in entries)
        assert entries[0]["created_at"].endswith("Z")

    def test_bad_audit_limit(self, client, headers):
        assert client.get("/api/admin/audit?limit=ten", headers=headers).status_code == 400


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json["remote_store"]["status"] == "healthy"
