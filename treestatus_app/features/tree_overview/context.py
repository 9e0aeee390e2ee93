"""Pure helpers to build tree overview context for testing (no Streamlit)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import altair as alt
import pandas as pd

from treestatus_app.analytics.metrics.trend import share_percent
from treestatus_app.analytics.report import TreeReport
from treestatus_app.core.config import CHART_CATEGORIES, OPEN_STATUS
from treestatus_app.visual.charts import longterm_chart, shortterm_chart
from treestatus_app.visual.tables import cycle_statistics_table, diagnostics_table


@dataclass(slots=True)
class TreeOverviewContext:
    tree: str
    shortterm_chart: alt.Chart | None
    longterm_chart: alt.Chart | None
    cycle_table: pd.DataFrame
    diagnostics: pd.DataFrame
    shortterm_open_percent: float | None
    latest_open_percent: float | None


def build_overview_context(
    report: TreeReport,
    categories: Sequence[tuple[str, str, str]] = CHART_CATEGORIES,
    average_days: int | None = None,
) -> TreeOverviewContext:
    summary = report.shortterm_summary
    latest = next((p.open_percent for p in reversed(report.trend) if p.open_percent is not None), None)
    return TreeOverviewContext(
        tree=report.tree,
        shortterm_chart=shortterm_chart(report.shortterm, categories),
        longterm_chart=longterm_chart(report.trend_frame, tree=report.tree, average_days=average_days),
        cycle_table=cycle_statistics_table(report.cycles),
        diagnostics=diagnostics_table(report.diagnostics),
        shortterm_open_percent=share_percent(summary.durations.get(OPEN_STATUS, 0), summary.total),
        latest_open_percent=latest,
    )
