# Overview: Service-layer operations for the resilient write path shared by every mutating admin action.

"""
Resilient Update Protocol

================================================================================
PURPOSE: One write path for every admin mutation
================================================================================

    1. ctx.require_active(), then the local invariant check (ValidationError,
       no remote I/O at all)
    2. atomic remote procedure, when the mutation has one
    3. on RemoteProcedureError: guarded direct update, stamping updated_at
    4. zero affected rows on either path -> NotAppliedError
    5. drain the best-effort side effects (audit trail, history)
    6. merge into the reconciled collection, schedule the re-fetch

The two write paths are mutually exclusive per invocation: a procedure that
succeeded is never followed by a direct update.

Every ledger error escaping steps 2-6 forces a re-fetch of the collection
before it reaches the caller (see Reconciler.surfaced_errors).
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable

from flask import current_app

from ..entities import LedgerEntity, changed_fields
from ..errors import NotAppliedError, NotFoundError, RemoteProcedureError
from ..extensions import reconciler, remote
from ..time_utils import utcnow
from .ledger_service import append_audit_entry
from .lifecycle_service import actor_name, apply_transition
from .side_effects import SideEffectQueue, SideEffectReport


@dataclass
class Mutation:
    table: str
    row_id: Any
    values: dict
    collection: str
    procedure: str | None = None
    procedure_args: dict = field(default_factory=dict)
    guards: tuple = ()
    validate: Callable[[], None] | None = None
    description: str = ""

    @property
    def label(self) -> str:
        return self.description or f"{self.table} {self.row_id}"


@dataclass
class UpdateOutcome:
    row_id: Any
    path: str  # "procedure" | "direct"
    row: dict
    effects: SideEffectReport
    entity: LedgerEntity | None = None

    def to_dict(self) -> dict:
        out = {
            "id": self.row_id,
            "path": self.path,
            "side_effects": self.effects.to_dict(),
        }
        if self.entity is not None:
            out["entity"] = self.entity.to_dict()
        return out


def _confirm_landed(mutation: Mutation, store) -> dict:
    row = store.get(mutation.table, mutation.row_id)
    if row is None:
        raise NotAppliedError(f"{mutation.label} was not updated: row not found")

    for column, expected in mutation.values.items():
        if isinstance(expected, datetime):
            continue
        if row.get(column) != expected:
            raise NotAppliedError(
                f"{mutation.label} was not updated: {column} is {row.get(column)!r}, expected {expected!r}"
            )
    return row


def _write(mutation: Mutation, ctx, store) -> tuple[str, dict]:
    if mutation.procedure:
        try:
            affected = store.call(mutation.procedure, mutation.procedure_args, ctx=ctx)
        except RemoteProcedureError as exc:
            current_app.logger.info(
                "Remote procedure %s failed for %s (%s); falling back to direct update",
                mutation.procedure,
                mutation.label,
                exc,
            )
        else:
            if affected is None:
                # Void procedure: re-read the row and check the new values landed
                return "procedure", _confirm_landed(mutation, store)
            if affected < 1:
                raise NotAppliedError(f"{mutation.label} was not updated: no rows affected")
            return "procedure", {**mutation.values, "updated_at": utcnow()}

    values = {**mutation.values, "updated_at": utcnow()}
    rows = store.update(mutation.table, mutation.row_id, values, guards=mutation.guards)
    if not rows:
        raise NotAppliedError(
            f"{mutation.label} was not updated: row missing or changed by another session"
        )
    return "direct", rows[0]


def run_update(mutation: Mutation, ctx, *, side_effects: SideEffectQueue | None = None, store=None) -> UpdateOutcome:
    """
    Perform one logical mutation.

    Raises:
        AuthorizationError: ctx expired or revoked
        ValidationError: local invariant violated (nothing sent)
        NotAppliedError: the write affected zero rows
        RemoteStoreError: both paths failed
    """
    ctx.require_active()
    if mutation.validate is not None:
        mutation.validate()

    store = store or remote.store
    queue = side_effects or SideEffectQueue()

    with reconciler.surfaced_errors(mutation.collection):
        path, row = _write(mutation, ctx, store)
        report = queue.drain()
        settled = reconciler.settle(mutation.collection, mutation.row_id, row)

    return UpdateOutcome(row_id=mutation.row_id, path=path, row=settled, effects=report)


@dataclass(frozen=True)
class TransitionTarget:
    """Where a status transition for one entity kind is written."""
    entity_cls: type
    table: str
    collection: str
    procedure: str | None = None
    procedure_args: Callable[[Any, LedgerEntity], dict] | None = None
    guard_column: str | None = None

    @property
    def status_column(self) -> str:
        return self.guard_column or self.entity_cls.status_field


def run_transition(
    ctx,
    target_def: TransitionTarget,
    row_id,
    target: str,
    *,
    message: str | None = None,
    side_effects: SideEffectQueue | None = None,
    store=None,
) -> UpdateOutcome:
    """
    Move one row to `target` through its state machine and the write path.

    Both write paths are conditioned on the status read here: the procedure
    receives it as expected_status and the direct update guards on it. A
    concurrent transition by another admin makes this one NotApplied instead
    of overwriting it.
    """
    ctx.require_active()
    store = store or remote.store
    kind = target_def.entity_cls.kind

    with reconciler.surfaced_errors(target_def.collection):
        row = store.get(target_def.table, row_id)
        if row is None:
            raise NotFoundError(f"{kind} {row_id} not found")

        current = target_def.entity_cls.from_row(row)
        updated = apply_transition(current, target, ctx, message)
        changes = changed_fields(current, updated)

        queue = side_effects or SideEffectQueue()
        queue.enqueue(
            "audit entry",
            append_audit_entry,
            entity_type=kind,
            entity_id=row_id,
            new_status=target,
            message=getattr(updated, "admin_response", None) or message,
            actor=actor_name(ctx),
        )

        column = target_def.status_column
        expected = getattr(current, column)
        procedure_args = {}
        if target_def.procedure_args:
            procedure_args = {**target_def.procedure_args(row_id, updated), "expected_status": expected}
        mutation = Mutation(
            table=target_def.table,
            row_id=row_id,
            values=changes,
            collection=target_def.collection,
            procedure=target_def.procedure,
            procedure_args=procedure_args,
            guards=((column, "eq", expected),),
            description=f"{kind} {row_id}",
        )
        outcome = run_update(mutation, ctx, side_effects=queue, store=store)

    entity = target_def.entity_cls.from_row({**row, **outcome.row})
    return replace(outcome, entity=entity)
