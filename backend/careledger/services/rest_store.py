# Overview: PostgREST-compatible HTTP backend for the remote data store.

"""
REST Remote Store

Talks to a hosted relational store that exposes tables at /rest/v1/<table>
and stored procedures at /rest/v1/rpc/<name> (the PostgREST conventions).

- Every request carries a bounded timeout. A timeout on a procedure call is
  a RemoteProcedureError (the caller falls back to the direct update path);
  on any other operation it is a RemoteStoreError.
- Writes ask for `Prefer: return=representation` so the affected rows come
  back in the response body; an empty list means nothing matched.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Mapping

import httpx

from ..errors import RemoteProcedureError, RemoteStoreError
from ..time_utils import to_utc_z
from .remote_store import Condition, RemoteStore, as_conditions


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _filter_param(op: str, value: Any) -> str:
    if op == "eq" and value is None:
        return "is.null"
    if op == "neq" and value is None:
        return "not.is.null"
    if op == "in":
        return "in.(" + ",".join(_literal(v) for v in value) + ")"
    return f"{op}.{_literal(value)}"


def _json_safe(values: Mapping[str, Any]) -> dict:
    out = {}
    for key, value in values.items():
        if isinstance(value, datetime):
            out[key] = to_utc_z(value)
        elif isinstance(value, date):
            out[key] = value.isoformat()
        else:
            out[key] = value
    return out


class RestRemoteStore(RemoteStore):
    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _params(self, conditions: Iterable[Condition]) -> list[tuple[str, str]]:
        return [(column, _filter_param(op, value)) for column, op, value in conditions]

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as exc:
            raise RemoteStoreError(f"{method} {path} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise RemoteStoreError(
                f"{method} {path} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.TransportError as exc:
            raise RemoteStoreError(f"{method} {path} failed: {exc.__class__.__name__}") from exc

    @staticmethod
    def _rows(response: httpx.Response) -> list[dict]:
        if not response.content:
            return []
        body = response.json()
        if isinstance(body, dict):
            return [body]
        return list(body or [])

    def select(self, table, *, filters=None, order_by=None, descending=False):
        params = self._params(as_conditions(filters))
        params.append(("select", "*"))
        if order_by:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        return self._rows(self._request("GET", f"/rest/v1/{table}", params=params))

    def update(self, table, row_id, values, *, guards=()):
        conditions = [("id", "eq", row_id)] + as_conditions(guards)
        response = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=self._params(conditions),
            json=_json_safe(values),
            headers={"Prefer": "return=representation"},
        )
        return self._rows(response)

    def insert(self, table, values):
        response = self._request(
            "POST",
            f"/rest/v1/{table}",
            json=_json_safe(values),
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response)
        if not rows:
            raise RemoteStoreError(f"Insert into {table} returned no representation")
        return rows[0]

    def delete(self, table, row_id, *, guards=()):
        conditions = [("id", "eq", row_id)] + as_conditions(guards)
        response = self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=self._params(conditions),
            headers={"Prefer": "return=representation"},
        )
        return self._rows(response)

    def call(self, procedure, args, *, ctx=None):
        try:
            response = self._request("POST", f"/rest/v1/rpc/{procedure}", json=_json_safe(args))
        except RemoteStoreError as exc:
            raise RemoteProcedureError(str(exc)) from exc

        if not response.content:
            return None
        body = response.json()
        if isinstance(body, bool):
            return None
        if isinstance(body, int):
            return body
        return None
