"""Tree closure statistics per release cycle.

For every release cycle that has started, this module reconstructs the spans
during which the tree was not open, merges spans separated by very short
reopenings, and summarizes their durations.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from treestatus_app.core.config import DAY_MS, OPEN_STATUS
from treestatus_app.core.models import (
    ClosureInterval,
    CycleStatistics,
    ReleaseCycle,
    StatusBucket,
    StatusChange,
)
from treestatus_app.core.status import is_open_status
from treestatus_app.core.timeutils import date_start_ms

MINUTE_MS = 60 * 1000


def cycle_open_closed_totals(
    buckets: Mapping[str, StatusBucket],
    cycle: ReleaseCycle,
    days: Sequence[str] | None = None,
) -> tuple[int, int]:
    """Sum open and not-open time of the day buckets within ``[start, end)``."""
    start, end = cycle.start.isoformat(), cycle.end.isoformat()
    open_time = 0
    closed_time = 0
    for day in days if days is not None else buckets:
        if not (start <= day < end):
            continue
        bucket = buckets.get(day)
        if bucket is None:
            continue
        open_time += bucket.durations.get(OPEN_STATUS, 0)
        closed_time += bucket.not_open_total(OPEN_STATUS)
    return open_time, closed_time


def closed_share(open_time: int, closed_time: int) -> float | None:
    total = open_time + closed_time
    if total <= 0:
        return None
    return closed_time / total


def reconstruct_closures(
    changes: Sequence[StatusChange],
    cycle_start: int,
    cycle_end: int,
    now: int,
) -> list[ClosureInterval]:
    """Rebuild the not-open spans of one cycle from a newest-first sequence.

    The status in effect when the cycle starts is taken from the newest
    change before ``cycle_start``; without one the tree counts as open. A
    closure still running at the end is closed at ``min(now, cycle_end)``.
    """
    real = [c for c in changes if not c.is_sentinel]
    chronological = list(reversed(real))

    previous_status: str | None = None
    for change in chronological:
        if change.timestamp >= cycle_start:
            break
        previous_status = change.status

    closures: list[ClosureInterval] = []
    current_start: int | None = None
    if previous_status is not None and not is_open_status(previous_status):
        current_start = cycle_start

    for change in chronological:
        if change.timestamp < cycle_start or change.timestamp > cycle_end:
            continue
        was_open = previous_status is None or is_open_status(previous_status)
        if not was_open and is_open_status(change.status) and current_start is not None:
            closures.append(ClosureInterval(current_start, change.timestamp))
            current_start = None
        elif was_open and not is_open_status(change.status):
            current_start = change.timestamp
        previous_status = change.status

    if current_start is not None:
        closures.append(ClosureInterval(current_start, max(current_start, min(now, cycle_end))))
    return closures


def merge_short_reopenings(closures: Sequence[ClosureInterval], threshold_ms: int) -> list[ClosureInterval]:
    """Merge closures separated by less than ``threshold_ms`` of open time.

    When all trees get closed at once, most are often reopened by reverting
    that action and a few closed again right away. Those short reopenings
    are not real open time.
    """
    merged: list[ClosureInterval] = []
    for closure in sorted(closures, key=lambda c: (c.start, c.end)):
        if merged and closure.start - merged[-1].end < threshold_ms:
            previous = merged[-1]
            merged[-1] = ClosureInterval(previous.start, max(previous.end, closure.end))
        else:
            merged.append(closure)
    return merged


def _float_or_none(value) -> float | None:
    return None if pd.isna(value) else float(value)


def median(values: Sequence[float]) -> float | None:
    """Median; even counts average the two middle values."""
    return _float_or_none(pd.Series(values, dtype="float64").median())


def closure_statistics(
    cycle: ReleaseCycle,
    closures: Sequence[ClosureInterval],
    share: float | None,
    cycle_start: int,
    cycle_end: int,
    now: int,
) -> CycleStatistics:
    minutes = pd.Series([c.duration / MINUTE_MS for c in closures], dtype="float64")
    count = len(minutes)
    elapsed_days = (min(now, cycle_end) - cycle_start) / DAY_MS
    return CycleStatistics(
        version=cycle.version,
        start=cycle.start,
        end=cycle.end,
        closed_share=share,
        mean=_float_or_none(minutes.mean()),
        median=median(minutes),
        max=_float_or_none(minutes.max()),
        count=count,
        rate_per_day=count / elapsed_days if elapsed_days > 0 else None,
    )


def analyze_release_cycles(
    changes: Sequence[StatusChange],
    buckets: Mapping[str, StatusBucket],
    cycles: Sequence[ReleaseCycle],
    now: int,
    offset_ms: int,
    merge_threshold_ms: int,
    days: Sequence[str] | None = None,
) -> list[CycleStatistics]:
    """Closure statistics for each cycle that started at or before ``now``.

    Parameters
    ----------
    changes : Sequence[StatusChange]
        Normalized newest-first sequence, sentinel included.
    buckets : Mapping[str, StatusBucket]
        Daily buckets used for open/closed totals.
    cycles : Sequence[ReleaseCycle]
        Configured release cycles; dates are logical-day labels.
    now : int
        Processing time in epoch milliseconds.
    offset_ms : int
        Day-start offset from UTC midnight.
    merge_threshold_ms : int
        Closures with less open time between them are merged.
    days : Sequence[str], optional
        Restrict the open/closed totals to these day labels.

    Returns
    -------
    list[CycleStatistics]
        In configured cycle order.
    """
    results: list[CycleStatistics] = []
    for cycle in cycles:
        cycle_start = date_start_ms(cycle.start, offset_ms)
        cycle_end = date_start_ms(cycle.end, offset_ms)
        if now < cycle_start:
            continue
        open_time, closed_time = cycle_open_closed_totals(buckets, cycle, days)
        closures = reconstruct_closures(changes, cycle_start, cycle_end, now)
        merged = merge_short_reopenings(closures, merge_threshold_ms)
        results.append(
            closure_statistics(
                cycle,
                merged,
                closed_share(open_time, closed_time),
                cycle_start,
                cycle_end,
                now,
            )
        )
    return results
