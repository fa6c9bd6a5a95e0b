# Overview: Domain error taxonomy shared by the ledger services and routes.

from __future__ import annotations


class LedgerError(ValueError):
    """Base class for every error the admin ledger raises on purpose."""


class ValidationError(LedgerError):
    """Local invariant violated. Raised before any remote I/O."""


class TransitionError(LedgerError):
    """Requested status is not reachable from the current status."""

    def __init__(self, entity_kind: str, current: str, target: str, message: str | None = None):
        self.entity_kind = entity_kind
        self.current = current
        self.target = target
        super().__init__(
            message
            or f"Cannot move {entity_kind} from '{current}' to '{target}'"
        )


class NotFoundError(LedgerError):
    """Target row does not exist in the remote store."""


class NotAppliedError(LedgerError):
    """A write completed without affecting any row."""


class RemoteStoreError(LedgerError):
    """Remote data store could not be reached or rejected a plain row operation."""


class RemoteProcedureError(RemoteStoreError):
    """Atomic remote procedure failed (authorization, missing procedure, transient error)."""


class AuditWriteError(LedgerError):
    """A best-effort side write failed. Logged, never surfaced."""


class AuthorizationError(LedgerError):
    """Administrator context is missing, expired, or revoked."""
