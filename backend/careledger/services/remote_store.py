# Overview: Row-level gateway to the remote relational store, plus the SQL-backed implementation.

"""
Remote Data Store gateway

================================================================================
PURPOSE: One narrow capability surface for every ledger read and write
================================================================================

The admin ledger never owns the store. It consumes five operations:

    select / get     row reads filtered by column values
    update           conditional row update, returns the affected rows
    insert / delete  plain row writes (delete returns the removed rows)
    call             server-side "remote procedure", atomic, no result payload
                     beyond an optional affected-row count

Guards are extra (column, op, value) conditions on update/delete. They turn
the direct write path into a compare-and-set: if a concurrent admin changed
the row, zero rows are affected and the caller raises NotAppliedError instead
of silently overwriting.

Two backends implement the interface:
- SqlRemoteStore (this module): SQLAlchemy Core over the app database;
  remote procedures are a registry of Python routines run in one transaction.
- RestRemoteStore (rest_store.py): PostgREST-compatible HTTP API via httpx.
================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

import sqlalchemy as sa
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import RemoteProcedureError, RemoteStoreError


GUARD_OPS = {"eq", "neq", "gte", "lte", "gt", "lt", "in"}

Condition = tuple[str, str, Any]
Procedure = Callable[..., "int | None"]

STORE_EXTENSION_KEY = "careledger.remote_store"


def as_conditions(filters: Mapping[str, Any] | Iterable[Condition] | None) -> list[Condition]:
    """
    Normalize filters to (column, op, value) triples.

    A mapping means equality per column; list/tuple/set values mean "in".
    """
    if not filters:
        return []
    if isinstance(filters, Mapping):
        conditions = []
        for column, value in filters.items():
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append((column, "in", list(value)))
            else:
                conditions.append((column, "eq", value))
        return conditions

    conditions = list(filters)
    for column, op, _ in conditions:
        if op not in GUARD_OPS:
            raise RemoteStoreError(f"Unsupported filter operator '{op}' on {column}")
    return conditions


class RemoteStore:
    """Capability interface consumed by the ledger services."""

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | Iterable[Condition] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        raise NotImplementedError

    def get(self, table: str, row_id: str) -> dict | None:
        rows = self.select(table, filters={"id": row_id})
        return rows[0] if rows else None

    def update(
        self,
        table: str,
        row_id: str,
        values: Mapping[str, Any],
        *,
        guards: Iterable[Condition] = (),
    ) -> list[dict]:
        raise NotImplementedError

    def insert(self, table: str, values: Mapping[str, Any]) -> dict:
        raise NotImplementedError

    def delete(self, table: str, row_id: str, *, guards: Iterable[Condition] = ()) -> list[dict]:
        raise NotImplementedError

    def call(self, procedure: str, args: Mapping[str, Any], *, ctx=None) -> int | None:
        raise NotImplementedError


class SqlRemoteStore(RemoteStore):
    """
    Remote store backed by the application database.

    Rows are read and written through SQLAlchemy Core against the tables in
    db.metadata, so results are plain dicts exactly like the REST backend.
    Every write commits immediately; there is no cross-call transaction.
    """

    def __init__(self, db, procedures: Mapping[str, Procedure] | None = None):
        self._db = db
        self._procedures: dict[str, Procedure] = dict(procedures or {})

    @property
    def procedures(self) -> dict[str, Procedure]:
        return self._procedures

    def _table(self, name: str) -> sa.Table:
        try:
            return self._db.metadata.tables[name]
        except KeyError:
            raise RemoteStoreError(f"Unknown table '{name}'")

    def _clauses(self, table: sa.Table, conditions: Iterable[Condition]) -> list:
        clauses = []
        for column, op, value in conditions:
            if column not in table.c:
                raise RemoteStoreError(f"Unknown column '{column}' on {table.name}")
            col = table.c[column]
            if op == "eq":
                clauses.append(col.is_(None) if value is None else col == value)
            elif op == "neq":
                clauses.append(col.is_not(None) if value is None else col != value)
            elif op == "gte":
                clauses.append(col >= value)
            elif op == "lte":
                clauses.append(col <= value)
            elif op == "gt":
                clauses.append(col > value)
            elif op == "lt":
                clauses.append(col < value)
            elif op == "in":
                clauses.append(col.in_(list(value)))
            else:
                raise RemoteStoreError(f"Unsupported filter operator '{op}' on {column}")
        return clauses

    def _run(self, stmt, *, commit: bool):
        session = self._db.session
        try:
            result = session.execute(stmt)
            if commit:
                session.commit()
            return result
        except SQLAlchemyError as exc:
            session.rollback()
            raise RemoteStoreError(f"Remote store error: {exc.__class__.__name__}") from exc

    def select(self, table, *, filters=None, order_by=None, descending=False):
        t = self._table(table)
        stmt = sa.select(t)
        for clause in self._clauses(t, as_conditions(filters)):
            stmt = stmt.where(clause)
        if order_by:
            if order_by not in t.c:
                raise RemoteStoreError(f"Unknown column '{order_by}' on {table}")
            col = t.c[order_by]
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        result = self._run(stmt, commit=False)
        return [dict(row) for row in result.mappings().all()]

    def update(self, table, row_id, values, *, guards=()):
        t = self._table(table)
        stmt = sa.update(t).where(t.c.id == row_id)
        for clause in self._clauses(t, as_conditions(guards)):
            stmt = stmt.where(clause)
        stmt = stmt.values(**dict(values))

        result = self._run(stmt, commit=True)
        if not result.rowcount:
            return []
        row = self.get(table, row_id)
        return [row] if row is not None else []

    def insert(self, table, values):
        t = self._table(table)
        result = self._run(sa.insert(t).values(**dict(values)), commit=True)
        pk = result.inserted_primary_key[0]
        row = self.get(table, pk)
        if row is None:
            raise RemoteStoreError(f"Inserted row into {table} could not be read back")
        return row

    def delete(self, table, row_id, *, guards=()):
        t = self._table(table)
        conditions = [("id", "eq", row_id)] + as_conditions(guards)
        doomed = self.select(table, filters=conditions)
        if not doomed:
            return []

        stmt = sa.delete(t)
        for clause in self._clauses(t, conditions):
            stmt = stmt.where(clause)
        result = self._run(stmt, commit=True)
        return doomed if result.rowcount else []

    def call(self, procedure, args, *, ctx=None):
        routine = self._procedures.get(procedure)
        if routine is None:
            raise RemoteProcedureError(f"Remote procedure '{procedure}' does not exist")

        session = self._db.session
        try:
            affected = routine(session, ctx, **dict(args))
            session.commit()
        except RemoteProcedureError:
            session.rollback()
            raise
        except (SQLAlchemyError, TypeError) as exc:
            session.rollback()
            raise RemoteProcedureError(
                f"Remote procedure '{procedure}' failed: {exc.__class__.__name__}"
            ) from exc
        return affected


class RemoteStoreExtension:
    """
    Flask extension holding the configured RemoteStore.

    Services reach the store through `remote.store` the same way they reach
    the database through `db.session`.
    """

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        app.extensions[STORE_EXTENSION_KEY] = self.build(app)

    def build(self, app) -> RemoteStore:
        backend = app.config.get("REMOTE_STORE_BACKEND", "sql")

        if backend == "sql":
            from ..extensions import db
            from .remote_procedures import DEFAULT_PROCEDURES
            return SqlRemoteStore(db, DEFAULT_PROCEDURES)

        if backend == "rest":
            from .rest_store import RestRemoteStore
            url = app.config.get("REMOTE_STORE_URL")
            if not url:
                raise RuntimeError("REMOTE_STORE_URL is required when REMOTE_STORE_BACKEND=rest")
            return RestRemoteStore(
                url,
                app.config.get("REMOTE_STORE_API_KEY", ""),
                timeout=app.config.get("REMOTE_CALL_TIMEOUT_SECONDS", 5.0),
            )

        raise RuntimeError(f"Unknown REMOTE_STORE_BACKEND '{backend}'")

    def install(self, app, store: RemoteStore) -> RemoteStore:
        """Swap the store for an app; returns the previous one."""
        previous = app.extensions.get(STORE_EXTENSION_KEY)
        app.extensions[STORE_EXTENSION_KEY] = store
        return previous

    @property
    def store(self) -> RemoteStore:
        return current_app.extensions[STORE_EXTENSION_KEY]
