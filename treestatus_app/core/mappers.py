"""Mapping raw Treestatus log entries into StatusChange sequences."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .diagnostics import DiagnosticLog
from .models import StatusChange
from .status import canonical_label
from .timeutils import to_epoch_ms


def _parse_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, Iterable):
        return tuple(str(v) for v in value if v is not None)
    return ()


def map_status_change(raw: Mapping[str, Any], diagnostics: DiagnosticLog) -> StatusChange | None:
    """Map one raw log entry, or report it and return None when malformed."""
    if not isinstance(raw, Mapping):
        diagnostics.malformed_event(raw, "not a record")
        return None
    if raw.get("when") is None:
        diagnostics.malformed_event(raw, "missing timestamp")
        return None
    when = to_epoch_ms(raw.get("when"))
    if when is None:
        diagnostics.malformed_event(raw, "unparseable timestamp")
        return None
    status = canonical_label(raw.get("status"))
    if not status:
        diagnostics.malformed_event(raw, "missing status")
        return None
    return StatusChange(
        timestamp=when,
        status=status,
        reason=str(raw.get("reason") or ""),
        tags=_parse_tags(raw.get("tags")),
    )


def normalize_status_changes(
    raw_changes: Iterable[Mapping[str, Any]],
    start: int,
    end: int,
    diagnostics: DiagnosticLog,
) -> list[StatusChange]:
    """Build the newest-first StatusChange sequence for ``[start, end)``.

    The result starts with a sentinel for "now" (no status, timestamp
    ``end``) so every real change has a successor. Changes at or after
    ``end`` are discarded. Consumption stops at the first change at or before
    ``start``, which is kept so the oldest interval can be clipped at
    ``start``. Input order is preserved.

    Parameters
    ----------
    raw_changes : Iterable[Mapping]
        Raw entries with ``when``, ``status``, ``reason`` and ``tags``,
        newest first.
    start, end : int
        Requested range in epoch milliseconds.
    diagnostics : DiagnosticLog
        Receives one entry per malformed record.

    Returns
    -------
    list[StatusChange]
    """
    changes = [StatusChange(timestamp=end, status=None)]
    for raw in raw_changes:
        change = map_status_change(raw, diagnostics)
        if change is None:
            continue
        if change.timestamp >= end:
            continue
        changes.append(change)
        if change.timestamp <= start:
            break
    return changes
