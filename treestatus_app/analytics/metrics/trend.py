"""Working-day moving average of tree status shares."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import pandas as pd

from treestatus_app.core.config import OPEN_STATUS
from treestatus_app.core.models import StatusBucket, TrendPoint
from treestatus_app.core.timeutils import day_string


def share_percent(value: int, total: int) -> float | None:
    """Share of ``value`` in ``total`` in percent, one decimal; None if total is 0."""
    if total <= 0:
        return None
    return round(1000 * value / total) / 10


def accumulate_moving_sums(
    buckets: Mapping[str, StatusBucket],
    end_day: int,
    output_days: int,
    average_days: int,
    statuses: Sequence[str],
    reasons: Sequence[str],
) -> dict[str, StatusBucket]:
    """Sum each output day's trailing ``average_days`` window of working days.

    A working day's durations are distributed forward into itself and the
    following ``average_days - 1`` calendar days, as long as those lie within
    the output window (``end_day`` and the ``output_days`` days before it).
    Weekend days add nothing, not even to their own value, but still receive
    the sums of the working days before them.

    Returns
    -------
    dict[str, StatusBucket]
        Summed durations per output day, newest day first.
    """
    sums = {
        day_string(end_day - i): StatusBucket.empty(day_string(end_day - i), statuses, reasons)
        for i in range(output_days + 1)
    }
    days_back = output_days + average_days
    for i in range(days_back + 1):
        source = buckets.get(day_string(end_day - i))
        if source is None or not source.is_working_day:
            continue
        for lag in range(average_days):
            target = i - lag
            if target < 0:
                # Future
                break
            if target > output_days:
                continue
            sums[day_string(end_day - target)].absorb(source)
    return sums


def trend_point(summed: StatusBucket) -> TrendPoint:
    total = summed.total
    status_percents = {k: share_percent(v, total) for k, v in summed.durations.items()}
    reason_percents = {k: share_percent(v, total) for k, v in summed.closed_reasons.items()}
    return TrendPoint(
        day=summed.day,
        open_percent=share_percent(summed.durations.get(OPEN_STATUS, 0), total),
        closed_percent=share_percent(summed.not_open_total(OPEN_STATUS), total),
        status_percents=status_percents,
        reason_percents=reason_percents,
    )


def build_trend(
    buckets: Mapping[str, StatusBucket],
    end_day: int,
    output_days: int,
    average_days: int,
    statuses: Sequence[str],
    reasons: Sequence[str],
) -> list[TrendPoint]:
    """Moving-average share series, oldest day first."""
    sums = accumulate_moving_sums(buckets, end_day, output_days, average_days, statuses, reasons)
    return [trend_point(sums[day]) for day in sorted(sums)]


def trend_to_frame(points: Sequence[TrendPoint]) -> pd.DataFrame:
    """Frame with day (datetime), open_percent and closed_percent columns."""
    if not points:
        return pd.DataFrame(columns=["day", "open_percent", "closed_percent"])
    df = pd.DataFrame(
        {
            "day": [p.day for p in points],
            "open_percent": [p.open_percent for p in points],
            "closed_percent": [p.closed_percent for p in points],
        }
    )
    df["day"] = pd.to_datetime(df["day"])
    return df
