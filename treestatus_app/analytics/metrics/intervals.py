"""Status interval construction and logical-day splitting.

Each pair of adjacent changes (newer, older) in a newest-first StatusChange
sequence defines the time the tree spent in ``older.status``. Those intervals
are clipped to the requested range and cut at logical-day boundaries, so
every piece can be attributed to exactly one day bucket.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from treestatus_app.core.models import StatusChange, SubInterval
from treestatus_app.core.status import first_tag
from treestatus_app.core.timeutils import day_start_ms, day_string, logical_day


@dataclass(slots=True, frozen=True)
class StatusInterval:
    start: int
    end: int
    change: StatusChange


def iter_status_intervals(
    changes: Sequence[StatusChange],
    start: int,
    end: int,
) -> Iterator[StatusInterval]:
    """Yield clipped status intervals from newest to oldest.

    The walk stops after the first change at or before ``start``; that
    change's interval begins at ``start`` instead of its own timestamp.
    """
    if not changes:
        return
    next_ts = min(changes[0].timestamp, end)
    for change in changes[1:]:
        interval_start = max(change.timestamp, start)
        interval_end = max(next_ts, interval_start)
        yield StatusInterval(interval_start, interval_end, change)
        if change.timestamp <= start:
            break
        next_ts = min(change.timestamp, end)


def split_by_day(interval: StatusInterval, offset_ms: int) -> list[SubInterval]:
    """Cut one interval at every logical-day boundary it crosses."""
    change = interval.change
    tag = first_tag(change.tags)
    first_day = logical_day(interval.start, offset_ms)
    if interval.end == interval.start:
        return [SubInterval(interval.start, interval.end, change.status, tag, day_string(first_day))]
    last_day = logical_day(interval.end - 1, offset_ms)
    pieces: list[SubInterval] = []
    for day in range(first_day, last_day + 1):
        piece_start = max(interval.start, day_start_ms(day, offset_ms))
        piece_end = min(interval.end, day_start_ms(day + 1, offset_ms))
        pieces.append(SubInterval(piece_start, piece_end, change.status, tag, day_string(day)))
    return pieces


def split_status_changes(
    changes: Sequence[StatusChange],
    start: int,
    end: int,
    offset_ms: int,
) -> list[SubInterval]:
    """Split a newest-first change sequence into per-day pieces.

    Parameters
    ----------
    changes : Sequence[StatusChange]
        Normalized sequence, sentinel first.
    start, end : int
        Requested range in epoch milliseconds.
    offset_ms : int
        Day-start offset from UTC midnight.

    Returns
    -------
    list[SubInterval]
        Pieces in walk order (newest interval first, each interval's pieces
        oldest day first).
    """
    pieces: list[SubInterval] = []
    for interval in iter_status_intervals(changes, start, end):
        pieces.extend(split_by_day(interval, offset_ms))
    return pieces
