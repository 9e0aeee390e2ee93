from datetime import UTC, date, datetime

from treestatus_app.analytics.metrics.release_cycles import (
    MINUTE_MS,
    analyze_release_cycles,
    closure_statistics,
    median,
    merge_short_reopenings,
    reconstruct_closures,
)
from treestatus_app.core.config import CLOSED_REASONS, DAY_MS, HOUR_MS, TREE_STATUSES
from treestatus_app.core.models import ClosureInterval, ReleaseCycle, StatusBucket, StatusChange

OFFSET = 7 * HOUR_MS
CYCLE = ReleaseCycle("124", date(2024, 3, 4), date(2024, 3, 11))
CYCLE_START = int(datetime(2024, 3, 4, 7, tzinfo=UTC).timestamp() * 1000)
CYCLE_END = int(datetime(2024, 3, 11, 7, tzinfo=UTC).timestamp() * 1000)
THRESHOLD = 2 * MINUTE_MS


def _newest_first(now, *chronological):
    changes = [StatusChange(ts, status) for ts, status in chronological]
    return [StatusChange(now, None)] + list(reversed(changes))


def test_statistics_example():
    closures = [
        ClosureInterval(0, 30 * MINUTE_MS),
        ClosureInterval(HOUR_MS, HOUR_MS + 10 * MINUTE_MS),
        ClosureInterval(2 * HOUR_MS, 2 * HOUR_MS + 40 * MINUTE_MS),
        ClosureInterval(3 * HOUR_MS, 3 * HOUR_MS + 20 * MINUTE_MS),
    ]
    stats = closure_statistics(CYCLE, closures, 0.1, 0, 4 * DAY_MS, 2 * DAY_MS)
    assert stats.mean == 25
    assert stats.median == 25
    assert stats.max == 40
    assert stats.count == 4
    assert stats.rate_per_day == 2.0
    assert stats.closed_share == 0.1


def test_statistics_without_closures():
    stats = closure_statistics(CYCLE, [], None, 0, DAY_MS, DAY_MS)
    assert stats.count == 0
    assert stats.mean is None and stats.median is None and stats.max is None
    assert stats.rate_per_day == 0.0


def test_median_odd_even_and_empty():
    assert median([9.0, 1.0, 2.0]) == 2.0
    assert median([1.0, 2.0, 4.0, 9.0]) == 3.0
    assert median([]) is None


def test_short_reopenings_merge():
    base = CYCLE_START + DAY_MS
    now = CYCLE_END + DAY_MS
    changes = _newest_first(
        now,
        (CYCLE_START - DAY_MS, "open"),
        (base, "closed"),
        (base + 30 * MINUTE_MS, "open"),
        (base + 30 * MINUTE_MS + 90 * 1000, "closed"),
        (base + 60 * MINUTE_MS, "open"),
        (base + 65 * MINUTE_MS, "closed"),
        (base + 80 * MINUTE_MS, "open"),
    )
    closures = reconstruct_closures(changes, CYCLE_START, CYCLE_END, now)
    assert len(closures) == 3
    merged = merge_short_reopenings(closures, THRESHOLD)
    assert merged == [
        ClosureInterval(base, base + 60 * MINUTE_MS),
        ClosureInterval(base + 65 * MINUTE_MS, base + 80 * MINUTE_MS),
    ]


def test_merge_is_idempotent():
    closures = [
        ClosureInterval(10 * MINUTE_MS, 20 * MINUTE_MS),
        ClosureInterval(0, 5 * MINUTE_MS),
        ClosureInterval(21 * MINUTE_MS, 30 * MINUTE_MS),
        ClosureInterval(31 * MINUTE_MS, 32 * MINUTE_MS),
        ClosureInterval(40 * MINUTE_MS, 50 * MINUTE_MS),
    ]
    once = merge_short_reopenings(closures, THRESHOLD)
    assert once == [
        ClosureInterval(0, 5 * MINUTE_MS),
        ClosureInterval(10 * MINUTE_MS, 32 * MINUTE_MS),
        ClosureInterval(40 * MINUTE_MS, 50 * MINUTE_MS),
    ]
    assert merge_short_reopenings(once, THRESHOLD) == once


def test_cycle_entered_closed_starts_at_cycle_start():
    now = CYCLE_END + DAY_MS
    changes = _newest_first(
        now,
        (CYCLE_START - HOUR_MS, "closed"),
        (CYCLE_START + HOUR_MS, "open"),
    )
    closures = reconstruct_closures(changes, CYCLE_START, CYCLE_END, now)
    assert closures == [ClosureInterval(CYCLE_START, CYCLE_START + HOUR_MS)]


def test_closed_throughout_cycle():
    now = CYCLE_END + DAY_MS
    changes = _newest_first(now, (CYCLE_START - DAY_MS, "approval-required"))
    closures = reconstruct_closures(changes, CYCLE_START, CYCLE_END, now)
    assert closures == [ClosureInterval(CYCLE_START, CYCLE_END)]


def test_running_closure_ends_now():
    now = CYCLE_START + 2 * DAY_MS
    changes = _newest_first(
        now,
        (CYCLE_START - DAY_MS, "open"),
        (CYCLE_START + DAY_MS, "closed"),
    )
    closures = reconstruct_closures(changes, CYCLE_START, CYCLE_END, now)
    assert closures == [ClosureInterval(CYCLE_START + DAY_MS, now)]


def test_sentinel_is_not_a_transition():
    now = CYCLE_START + 2 * DAY_MS
    changes = _newest_first(
        now,
        (CYCLE_START - DAY_MS, "open"),
        (CYCLE_START + HOUR_MS, "closed"),
        (CYCLE_START + 2 * HOUR_MS, "open"),
    )
    closures = reconstruct_closures(changes, CYCLE_START, CYCLE_END, now)
    assert closures == [ClosureInterval(CYCLE_START + HOUR_MS, CYCLE_START + 2 * HOUR_MS)]


def test_closed_to_approval_required_is_one_closure():
    now = CYCLE_END + DAY_MS
    changes = _newest_first(
        now,
        (CYCLE_START - DAY_MS, "open"),
        (CYCLE_START + HOUR_MS, "closed"),
        (CYCLE_START + 2 * HOUR_MS, "approval-required"),
        (CYCLE_START + 3 * HOUR_MS, "open"),
    )
    closures = reconstruct_closures(changes, CYCLE_START, CYCLE_END, now)
    assert closures == [ClosureInterval(CYCLE_START + HOUR_MS, CYCLE_START + 3 * HOUR_MS)]


def test_analyze_skips_future_cycles_and_computes_share():
    now = CYCLE_START + 3 * DAY_MS
    future = ReleaseCycle("125", date(2024, 3, 11), date(2024, 4, 15))
    buckets = {}
    for day in ("2024-03-03", "2024-03-04", "2024-03-05"):
        bucket = StatusBucket.empty(day, TREE_STATUSES, CLOSED_REASONS)
        bucket.add_status("open", 18 * HOUR_MS)
        bucket.add_status("closed", 6 * HOUR_MS)
        bucket.add_reason("infra", 6 * HOUR_MS)
        buckets[day] = bucket
    buckets["2024-03-03"].add_status("closed", 100 * HOUR_MS)
    changes = _newest_first(
        now,
        (CYCLE_START - DAY_MS, "open"),
        (CYCLE_START + HOUR_MS, "closed"),
        (CYCLE_START + 7 * HOUR_MS, "open"),
    )
    results = analyze_release_cycles(changes, buckets, [CYCLE, future], now, OFFSET, THRESHOLD)
    assert [r.version for r in results] == ["124"]
    result = results[0]
    assert result.closed_share == 0.25
    assert result.count == 1
    assert result.max == 360.0
    assert result.rate_per_day == 1 / 3


def test_cycle_without_activity_has_no_share():
    now = CYCLE_START + DAY_MS
    results = analyze_release_cycles(
        [StatusChange(now, None)], {}, [CYCLE], now, OFFSET, THRESHOLD
    )
    assert results[0].closed_share is None
    assert results[0].count == 0
