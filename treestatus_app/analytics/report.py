"""End-to-end tree status report: raw log in, day buckets, trend and cycle stats out."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from treestatus_app.analytics.metrics.daily import (
    aggregate_daily,
    build_empty_buckets,
    shortterm_table,
    summarize_pieces,
)
from treestatus_app.analytics.metrics.intervals import split_status_changes
from treestatus_app.analytics.metrics.release_cycles import analyze_release_cycles
from treestatus_app.analytics.metrics.trend import build_trend, trend_to_frame
from treestatus_app.core.config import DAY_MS, EngineSettings
from treestatus_app.core.diagnostics import DiagnosticLog
from treestatus_app.core.mappers import normalize_status_changes
from treestatus_app.core.models import (
    CycleStatistics,
    Diagnostic,
    ReleaseCycle,
    StatusBucket,
    StatusChange,
    TrendPoint,
)
from treestatus_app.core.timeutils import day_string, logical_day

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TreeReport:
    tree: str
    now: int
    changes: list[StatusChange]
    daily: dict[str, StatusBucket]
    shortterm: pd.DataFrame
    shortterm_summary: StatusBucket
    trend: list[TrendPoint]
    cycles: list[CycleStatistics]
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def trend_frame(self) -> pd.DataFrame:
        return trend_to_frame(self.trend)


def build_tree_report(
    tree: str,
    raw_changes: Iterable[Mapping[str, Any]],
    now: int,
    settings: EngineSettings | None = None,
    cycles: Sequence[ReleaseCycle] | None = None,
) -> TreeReport:
    """Run the whole aggregation pipeline for one tree.

    Parameters
    ----------
    tree : str
        Tree name, used to tag diagnostics.
    raw_changes : Iterable[Mapping]
        Raw log entries, newest first.
    now : int
        End of the analyzed range in epoch milliseconds.
    settings : EngineSettings, optional
        Window sizes, day offset, labels; defaults from config.
    cycles : Sequence[ReleaseCycle], optional
        Release cycles; defaults to ``settings.release_cycles``.

    Returns
    -------
    TreeReport
    """
    settings = settings or EngineSettings()
    if cycles is None:
        cycles = list(settings.release_cycles)
    diagnostics = DiagnosticLog(tree)
    offset_ms = settings.day_offset_ms

    range_end = now
    range_start = now - settings.days_back * DAY_MS
    changes = normalize_status_changes(raw_changes, range_start, range_end, diagnostics)
    logger.debug("%s: %d status changes in range", tree, len(changes) - 1)

    end_day = logical_day(range_end, offset_ms)
    pieces = split_status_changes(changes, range_start, range_end, offset_ms)
    daily = build_empty_buckets(end_day, settings.days_back, settings.statuses, settings.closed_reasons)
    aggregate_daily(pieces, daily, diagnostics)

    shortterm_start = now - settings.shortterm_days * DAY_MS
    shortterm_pieces = split_status_changes(changes, shortterm_start, range_end, offset_ms)
    # Same changes as the daily pass, which already reported their anomalies
    summary = summarize_pieces(
        shortterm_pieces,
        settings,
        DiagnosticLog(tree),
        label=f"last {settings.shortterm_days} days",
    )

    trend = build_trend(
        daily,
        end_day,
        settings.longterm_days,
        settings.average_days,
        settings.statuses,
        settings.closed_reasons,
    )

    longterm_days = [day_string(end_day - i) for i in range(settings.longterm_days + 1)]
    cycle_stats = analyze_release_cycles(
        changes,
        daily,
        cycles,
        now,
        offset_ms,
        settings.merge_threshold_ms,
        days=longterm_days,
    )

    return TreeReport(
        tree=tree,
        now=now,
        changes=changes,
        daily=daily,
        shortterm=shortterm_table(daily, end_day, settings.shortterm_days),
        shortterm_summary=summary,
        trend=trend,
        cycles=cycle_stats,
        diagnostics=diagnostics.entries,
    )
