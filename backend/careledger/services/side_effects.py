# Overview: Best-effort side-effect queue for audit and history writes that must never fail the primary mutation.

"""
Side effects

Audit trails, order history, reviewer stamps on superseded rows and role
demotions are best-effort: the primary write has already committed and is
what the patient or doctor sees.

Callers enqueue these writes instead of wrapping them in try/except. drain()
runs them in order, turns every failure into an AuditWriteError that is
logged and reported, and never raises. The result type (SideEffectReport) is
separate from the primary result, so a failed side effect can not be
mistaken for a failed operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from flask import current_app

from ..errors import AuditWriteError


@dataclass
class SideEffect:
    name: str
    fn: Callable[..., Any]
    args: tuple = ()
    kwargs: dict = field(default_factory=dict)


@dataclass
class SideEffectReport:
    completed: list[str] = field(default_factory=list)
    failed: list[AuditWriteError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "completed": list(self.completed),
            "failed": [str(err) for err in self.failed],
        }


class SideEffectQueue:
    def __init__(self):
        self._pending: list[SideEffect] = []

    def __len__(self) -> int:
        return len(self._pending)

    def enqueue(self, name: str, fn: Callable[..., Any], *args, **kwargs) -> None:
        self._pending.append(SideEffect(name, fn, args, kwargs))

    def drain(self) -> SideEffectReport:
        report = SideEffectReport()
        pending, self._pending = self._pending, []

        for effect in pending:
            try:
                effect.fn(*effect.args, **effect.kwargs)
            except Exception as exc:
                err = AuditWriteError(f"{effect.name} failed: {exc}")
                current_app.logger.warning("Best-effort write skipped: %s", err)
                report.failed.append(err)
            else:
                report.completed.append(effect.name)
        return report
