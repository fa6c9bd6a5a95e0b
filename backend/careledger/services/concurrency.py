# Overview: Service-layer operations for concurrency; retry helper for remote store reads.

from __future__ import annotations

import time

from ..errors import RemoteStoreError


def run_with_retry(
    func,
    *,
    attempts: int = 3,
    backoff_base: float = 0.1,
    retry_on: tuple = (RemoteStoreError,),
):
    """
    Execute a remote store operation with retry on transient failures.

    Only reads go through here: a retried write could double-apply. Sleeps
    backoff_base * 2**attempt between tries and re-raises the last error.
    """
    attempts = max(1, attempts)
    for attempt in range(attempts):
        try:
            return func()
        except retry_on:
            if attempt >= attempts - 1:
                raise
            if backoff_base > 0:
                time.sleep(backoff_base * (2 ** attempt))
