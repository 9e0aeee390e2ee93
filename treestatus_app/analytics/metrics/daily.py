"""Per-day status duration buckets and the short-term hours table."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from treestatus_app.core.config import HOUR_MS, EngineSettings
from treestatus_app.core.diagnostics import DiagnosticLog
from treestatus_app.core.models import StatusBucket, SubInterval
from treestatus_app.core.status import classify_closed_reason, is_open_status
from treestatus_app.core.timeutils import day_string


def build_empty_buckets(
    end_day: int,
    days_back: int,
    statuses: Sequence[str],
    reasons: Sequence[str],
) -> dict[str, StatusBucket]:
    """Create buckets for ``end_day`` and the ``days_back`` days before it.

    The mapping is ordered newest day first.
    """
    buckets: dict[str, StatusBucket] = {}
    for i in range(days_back + 1):
        day = day_string(end_day - i)
        buckets[day] = StatusBucket.empty(day, statuses, reasons)
    return buckets


def add_piece(
    bucket: StatusBucket,
    piece: SubInterval,
    diagnostics: DiagnosticLog,
) -> None:
    """Fold one split interval into its day bucket.

    Unrecognized statuses are reported and dropped. Any status other than
    open is also attributed to a closure reason; an unrecognized reason is
    reported and counted as "unknown".
    """
    if piece.status not in bucket.durations:
        diagnostics.unknown_status(piece.status)
        return
    bucket.add_status(piece.status, piece.duration)
    if is_open_status(piece.status):
        return
    reason, unrecognized = classify_closed_reason(piece.tag, bucket.closed_reasons)
    if unrecognized:
        diagnostics.unknown_reason(piece.tag)
    bucket.add_reason(reason, piece.duration)


def aggregate_daily(
    pieces: Iterable[SubInterval],
    buckets: dict[str, StatusBucket],
    diagnostics: DiagnosticLog,
) -> dict[str, StatusBucket]:
    for piece in pieces:
        bucket = buckets.get(piece.day)
        if bucket is None:
            # Outside the configured window
            continue
        add_piece(bucket, piece, diagnostics)
    return buckets


def summarize_pieces(
    pieces: Iterable[SubInterval],
    settings: EngineSettings,
    diagnostics: DiagnosticLog,
    label: str = "summary",
) -> StatusBucket:
    """Aggregate pieces of any day into a single bucket."""
    summary = StatusBucket.empty(label, settings.statuses, settings.closed_reasons, is_working_day=False)
    for piece in pieces:
        add_piece(summary, piece, diagnostics)
    return summary


def buckets_to_frame(buckets: dict[str, StatusBucket]) -> pd.DataFrame:
    """Long-form frame of bucket durations in hours.

    Returns
    -------
    pd.DataFrame
        Columns: day, is_working_day, kind ("status" or "reason"), category,
        hours. Ordered oldest day first.
    """
    rows: list[dict[str, object]] = []
    for day in sorted(buckets):
        bucket = buckets[day]
        for kind, values in (("status", bucket.durations), ("reason", bucket.closed_reasons)):
            for category, value in values.items():
                rows.append(
                    {
                        "day": day,
                        "is_working_day": bucket.is_working_day,
                        "kind": kind,
                        "category": category,
                        "hours": round(value / HOUR_MS, 2),
                    }
                )
    if not rows:
        return pd.DataFrame(columns=["day", "is_working_day", "kind", "category", "hours"])
    return pd.DataFrame(rows)


def shortterm_table(buckets: dict[str, StatusBucket], end_day: int, shortterm_days: int) -> pd.DataFrame:
    """Hours per status and reason for the last ``shortterm_days + 1`` days."""
    days = {day_string(end_day - i) for i in range(shortterm_days + 1)}
    recent = {day: bucket for day, bucket in buckets.items() if day in days}
    return buckets_to_frame(recent)
