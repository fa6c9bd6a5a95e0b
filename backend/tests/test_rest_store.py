"""
PostgREST-compatible remote store backend, exercised over httpx.MockTransport.
"""

import json
from datetime import datetime

import httpx
import pytest

from careledger.errors import RemoteProcedureError, RemoteStoreError
from careledger.services.rest_store import RestRemoteStore


BASE_URL = "https://store.example.test"


def make_store(handler):
    return RestRemoteStore(BASE_URL, "anon-key", timeout=1.0, transport=httpx.MockTransport(handler))


class Recorder:
    """Handler that records requests and replies with a canned response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.body = body
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last(self):
        return self.requests[-1]


class TestReads:

    def test_select_translates_filters(self):
        handler = Recorder(body=[{"id": "o-1", "status": "pending"}])
        store = make_store(handler)

        rows = store.select(
            "orders",
            filters={"status": "pending", "user_id": None, "id": ["o-1", "o-2"]},
            order_by="created_at",
            descending=True,
        )

        assert rows == [{"id": "o-1", "status": "pending"}]
        request = handler.last
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/orders"
        params = request.url.params
        assert params["status"] == "eq.pending"
        assert params["user_id"] == "is.null"
        assert params["id"] == "in.(o-1,o-2)"
        assert params["select"] == "*"
        assert params["order"] == "created_at.desc"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"

    def test_get_returns_none_when_empty(self):
        store = make_store(Recorder(body=[]))

        assert store.get("orders", "missing") is None

    def test_http_error_is_store_error(self):
        store = make_store(Recorder(status_code=500, body={"message": "boom"}))

        with pytest.raises(RemoteStoreError) as exc:
            store.select("orders")
        assert not isinstance(exc.value, RemoteProcedureError)
        assert "HTTP 500" in str(exc.value)

    def test_timeout_is_store_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(RemoteStoreError, match="timed out"):
            make_store(handler).select("orders")


class TestWrites:

    def test_update_sends_guards_and_representation_header(self):
        handler = Recorder(body=[{"id": "b-1", "available_beds": 3}])
        store = make_store(handler)

        rows = store.update(
            "hospital_beds",
            "b-1",
            {"available_beds": 3, "updated_at": datetime(2026, 3, 1, 12, 30)},
            guards=(("total_beds", "gte", 3),),
        )

        assert rows == [{"id": "b-1", "available_beds": 3}]
        request = handler.last
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.b-1"
        assert request.url.params["total_beds"] == "gte.3"
        assert request.headers["Prefer"] == "return=representation"
        assert json.loads(request.content) == {
            "available_beds": 3,
            "updated_at": "2026-03-01T12:30:00Z",
        }

    def test_update_matching_nothing_returns_empty(self):
        store = make_store(Recorder(body=[]))

        assert store.update("orders", "o-1", {"status": "shipped"}, guards=(("status", "eq", "pending"),)) == []

    def test_bool_guard_literal(self):
        handler = Recorder(body=[])
        store = make_store(handler)

        store.delete("doctor_profiles", "p-1", guards=(("is_approved", "eq", False),))

        assert handler.last.method == "DELETE"
        assert handler.last.url.params["is_approved"] == "eq.false"

    def test_insert_returns_created_row(self):
        handler = Recorder(status_code=201, body=[{"id": "a-1", "title": "Oxygen low"}])
        store = make_store(handler)

        row = store.insert("system_alerts", {"title": "Oxygen low"})

        assert row["id"] == "a-1"
        assert handler.last.method == "POST"

    def test_insert_without_representation_fails(self):
        store = make_store(Recorder(status_code=201))

        with pytest.raises(RemoteStoreError):
            store.insert("system_alerts", {"title": "Oxygen low"})

    def test_unsupported_guard_operator(self):
        store = make_store(Recorder(body=[]))

        with pytest.raises(RemoteStoreError):
            store.update("orders", "o-1", {"status": "shipped"}, guards=(("status", "like", "p%"),))


class TestProcedures:

    def test_call_posts_to_rpc(self):
        handler = Recorder(body=1)
        store = make_store(handler)

        affected = store.call("admin_update_order_status", {"order_id": "o-1", "new_status": "shipped"})

        assert affected == 1
        assert handler.last.url.path == "/rest/v1/rpc/admin_update_order_status"
        assert json.loads(handler.last.content) == {"order_id": "o-1", "new_status": "shipped"}

    def test_void_procedure_returns_none(self):
        store = make_store(Recorder(status_code=204))

        assert store.call("admin_update_ot_status", {"ot_id": "t-1", "new_status": True}) is None

    def test_missing_procedure_is_procedure_error(self):
        store = make_store(Recorder(status_code=404, body={"message": "function not found"}))

        with pytest.raises(RemoteProcedureError):
            store.call("approve_doctor_profile", {"doctor_id": "d-1"})

    def test_procedure_timeout_is_procedure_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("connect timed out", request=request)

        with pytest.raises(RemoteProcedureError):
            make_store(handler).call("admin_update_bed_count", {"bed_id": "b-1"})
