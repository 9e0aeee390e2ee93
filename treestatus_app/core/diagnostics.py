"""Collector for data anomalies found while processing a tree's log."""

from __future__ import annotations

import logging

from .models import Diagnostic

logger = logging.getLogger(__name__)

MALFORMED_EVENT = "malformed-event"
UNKNOWN_STATUS = "unknown-status"
UNKNOWN_REASON = "unknown-reason"


class DiagnosticLog:
    """Accumulates diagnostics for one tree, folding repeats into a count."""

    def __init__(self, tree: str):
        self.tree = tree
        self._entries: dict[tuple[str, str], Diagnostic] = {}

    def emit(self, kind: str, value: object, message: str) -> None:
        key = (kind, str(value))
        existing = self._entries.get(key)
        if existing is not None:
            existing.occurrences += 1
            return
        self._entries[key] = Diagnostic(tree=self.tree, kind=kind, value=str(value), message=message)
        logger.debug("[%s] %s: %s", self.tree, kind, message)

    def malformed_event(self, raw: object, problem: str) -> None:
        self.emit(
            MALFORMED_EVENT,
            problem,
            f"Malformed status change in data for tree '{self.tree}' ({problem}): {raw!r}. Event dropped.",
        )

    def unknown_status(self, status: str) -> None:
        self.emit(
            UNKNOWN_STATUS,
            status,
            f"Unknown tree status '{status}' in data for tree '{self.tree}'. Data dropped.",
        )

    def unknown_reason(self, reason: str) -> None:
        self.emit(
            UNKNOWN_REASON,
            reason,
            f"Unknown closed reason '{reason}' in data for tree '{self.tree}'. "
            'Counted as "unknown" for closure reasons but still used for closure time.',
        )

    @property
    def entries(self) -> list[Diagnostic]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
