# Overview: Service-layer operations for reconciliation; optimistic local collections plus debounced authoritative re-fetch.

"""
Reconciliation & Refresh Controller

================================================================================
PURPOSE: Keep the admin's view of each collection close to the remote truth
================================================================================

After a successful write the changed columns are merged into the in-process
collection immediately (optimistic state). A full re-fetch of that collection
is then scheduled after LEDGER_REFRESH_DELAY_SECONDS, debounced per collection,
so the remote store's own propagation settles before re-reading. Whatever the
re-fetch returns replaces the optimistic rows (last-reconciled-wins).

Every surfaced error (anything but a ValidationError, which never reached the
store) forces an immediate re-fetch, so the admin never acts on stale rows.

No locking across admin sessions: concurrent writers are caught by the
guarded writes of the update protocol and corrected here, eventually.
================================================================================
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from functools import partial
from typing import Any, Callable, Mapping

from flask import current_app, has_app_context

from ..errors import LedgerError, ValidationError
from ..time_utils import utcnow
from .concurrency import run_with_retry


RECONCILER_EXTENSION_KEY = "careledger.reconciler"

# collection name -> callable returning the authoritative rows (app context required)
LOADERS: dict[str, Callable[[], list[dict]]] = {}


def collection_loader(name: str):
    """Register the authoritative loader for a collection."""
    def decorator(fn):
        LOADERS[name] = fn
        return fn
    return decorator


class ReconciledCollection:
    """In-memory rows of one collection, keyed by row id."""

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.RLock()
        self._rows: dict[str, dict] = {}
        self.version = 0
        self.loaded = False
        self.last_refreshed_at = None

    def replace(self, rows) -> None:
        with self._lock:
            self._rows = {str(row["id"]): dict(row) for row in rows}
            self.version += 1
            self.loaded = True
            self.last_refreshed_at = utcnow()

    def merge(self, row_id, values: Mapping[str, Any]) -> dict:
        with self._lock:
            key = str(row_id)
            row = self._rows.get(key)
            if row is None:
                row = {"id": row_id}
                self._rows[key] = row
            row.update(values)
            self.version += 1
            return dict(row)

    def remove(self, row_id) -> dict | None:
        with self._lock:
            row = self._rows.pop(str(row_id), None)
            if row is not None:
                self.version += 1
            return row

    def get(self, row_id) -> dict | None:
        with self._lock:
            row = self._rows.get(str(row_id))
            return dict(row) if row is not None else None

    def rows(self) -> list[dict]:
        with self._lock:
            return [dict(row) for row in self._rows.values()]


class RefreshScheduler:
    """
    Debounced per-key callbacks.

    Scheduling a key that is already pending restarts its timer. A delay of 0
    (or less) runs the callback inline.
    """

    def __init__(self, delay: float, timer_factory=threading.Timer):
        self.delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: dict[str, tuple[Any, Callable[[], Any]]] = {}

    def schedule(self, key: str, callback: Callable[[], Any]) -> None:
        if self.delay <= 0:
            callback()
            return

        with self._lock:
            existing = self._pending.pop(key, None)
            if existing is not None:
                existing[0].cancel()
            timer = self._timer_factory(self.delay, self._fire, args=(key,))
            timer.daemon = True
            self._pending[key] = (timer, callback)
            timer.start()

    def _fire(self, key: str) -> None:
        with self._lock:
            entry = self._pending.pop(key, None)
        if entry is not None:
            entry[1]()

    def pending(self) -> set[str]:
        with self._lock:
            return set(self._pending)

    def flush(self) -> None:
        """Run every pending callback now, in the calling thread."""
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for timer, callback in entries:
            timer.cancel()
            callback()

    def cancel_all(self) -> None:
        with self._lock:
            entries = list(self._pending.values())
            self._pending.clear()
        for timer, _ in entries:
            timer.cancel()


class Reconciler:
    def __init__(self, app, *, delay: float = 1.0, attempts: int = 3, backoff: float = 0.1):
        self._app = app
        self._attempts = attempts
        self._backoff = backoff
        self._lock = threading.Lock()
        self._collections: dict[str, ReconciledCollection] = {}
        self.scheduler = RefreshScheduler(delay)

    def collection(self, name: str) -> ReconciledCollection:
        if name not in LOADERS:
            raise ValueError(f"Unknown ledger collection '{name}'")
        with self._lock:
            coll = self._collections.get(name)
            if coll is None:
                coll = ReconciledCollection(name)
                self._collections[name] = coll
            return coll

    def refresh(self, name: str) -> list[dict]:
        """Authoritative re-fetch; replaces the local rows."""
        coll = self.collection(name)
        rows = run_with_retry(
            LOADERS[name],
            attempts=self._attempts,
            backoff_base=self._backoff,
        )
        coll.replace(rows)
        return coll.rows()

    def rows(self, name: str, *, cached: bool = False) -> list[dict]:
        coll = self.collection(name)
        if cached and coll.loaded:
            return coll.rows()
        return self.refresh(name)

    def settle(self, name: str, row_id, values: Mapping[str, Any]) -> dict:
        """Merge a committed write optimistically and schedule reconciliation."""
        merged = self.collection(name).merge(row_id, values)
        self.scheduler.schedule(name, partial(self._scheduled_refresh, name))
        return merged

    def forget(self, name: str, row_id) -> None:
        """Drop a deleted row optimistically and schedule reconciliation."""
        self.collection(name).remove(row_id)
        self.scheduler.schedule(name, partial(self._scheduled_refresh, name))

    def force_refresh(self, name: str) -> bool:
        """Refresh now; a failed refresh is logged and leaves the local rows alone."""
        try:
            self.refresh(name)
            return True
        except LedgerError as exc:
            current_app.logger.warning("Reconciliation of %s failed: %s", name, exc)
            return False

    def _scheduled_refresh(self, name: str) -> None:
        if has_app_context():
            self.force_refresh(name)
            return
        with self._app.app_context():
            self.force_refresh(name)

    @contextmanager
    def surfaced_errors(self, name: str):
        """
        Force a re-fetch of `name` when a ledger error escapes the block.

        ValidationError is re-raised untouched: nothing was sent to the store.
        Nested blocks refresh only once per error.
        """
        try:
            yield
        except ValidationError:
            raise
        except LedgerError as exc:
            if not getattr(exc, "reconciled", False):
                self.force_refresh(name)
                exc.reconciled = True
            raise

    def flush(self) -> None:
        self.scheduler.flush()

    def shutdown(self) -> None:
        self.scheduler.cancel_all()


class ReconcilerExtension:
    """Flask extension holding one Reconciler per app."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        app.extensions[RECONCILER_EXTENSION_KEY] = Reconciler(
            app,
            delay=app.config.get("LEDGER_REFRESH_DELAY_SECONDS", 1.0),
            attempts=app.config.get("LEDGER_REFRESH_ATTEMPTS", 3),
            backoff=app.config.get("LEDGER_REFRESH_BACKOFF_SECONDS", 0.1),
        )

    @property
    def current(self) -> Reconciler:
        return current_app.extensions[RECONCILER_EXTENSION_KEY]

    def collection(self, name: str) -> ReconciledCollection:
        return self.current.collection(name)

    def refresh(self, name: str) -> list[dict]:
        return self.current.refresh(name)

    def rows(self, name: str, *, cached: bool = False) -> list[dict]:
        return self.current.rows(name, cached=cached)

    def settle(self, name: str, row_id, values) -> dict:
        return self.current.settle(name, row_id, values)

    def forget(self, name: str, row_id) -> None:
        self.current.forget(name, row_id)

    def force_refresh(self, name: str) -> bool:
        return self.current.force_refresh(name)

    def surfaced_errors(self, name: str):
        return self.current.surfaced_errors(name)

    def flush(self) -> None:
        self.current.flush()
