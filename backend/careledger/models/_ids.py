from __future__ import annotations

import uuid


def new_uuid() -> str:
    """Row identifiers are UUID strings, matching the hosted store."""
    return str(uuid.uuid4())


LEDGER_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "careledger")


def derived_uuid(*parts) -> str:
    """Stable UUID for the same inputs, so retried creates target one row."""
    return str(uuid.uuid5(LEDGER_NAMESPACE, ":".join(str(p) for p in parts)))
