from datetime import UTC, date, datetime

import pandas as pd

from treestatus_app.analytics.report import build_tree_report
from treestatus_app.core.config import DAY_MS, HOUR_MS, EngineSettings
from treestatus_app.core.models import CycleStatistics, Diagnostic, ReleaseCycle
from treestatus_app.features.tree_overview import build_overview_context
from treestatus_app.visual.charts import longterm_chart, shortterm_chart
from treestatus_app.visual.tables import CYCLE_COLUMNS, cycle_statistics_table, diagnostics_table

NOW = int(datetime(2024, 3, 8, 12, tzinfo=UTC).timestamp() * 1000)
SETTINGS = EngineSettings(
    shortterm_days=3,
    longterm_days=5,
    average_days=2,
    release_cycles=(ReleaseCycle("124", date(2024, 3, 4), date(2024, 3, 11)),),
)


def _report():
    raw = [
        {"when": NOW - 2 * HOUR_MS, "status": "open", "tags": []},
        {"when": NOW - 30 * HOUR_MS, "status": "closed", "tags": ["infra"]},
        {"when": NOW - 40 * DAY_MS, "status": "open", "tags": []},
    ]
    return build_tree_report("autoland", raw, NOW, SETTINGS)


def test_charts_from_report():
    report = _report()
    assert shortterm_chart(report.shortterm) is not None
    assert longterm_chart(report.trend_frame, tree="autoland", average_days=2) is not None


def test_charts_without_data():
    assert shortterm_chart(pd.DataFrame(columns=["day", "kind", "category", "hours"])) is None
    empty_trend = pd.DataFrame({"day": pd.to_datetime(["2024-03-08"]), "open_percent": [None], "closed_percent": [None]})
    assert longterm_chart(empty_trend) is None


def test_cycle_table_newest_first_and_rounded():
    stats = [
        CycleStatistics("123", date(2024, 2, 1), date(2024, 3, 4), 0.12345, 10.04, 9.96, 30.0, 3, 0.333),
        CycleStatistics("124", date(2024, 3, 4), date(2024, 3, 11), None, None, None, None, 0, 0.0),
    ]
    table = cycle_statistics_table(stats)
    assert list(table.columns) == list(CYCLE_COLUMNS)
    assert list(table["Version"]) == ["124", "123"]
    older = table.iloc[1]
    assert older["Closed [%]"] == 12.3
    assert older["Mean closure [min]"] == 10.0
    assert older["Closures per day"] == 0.3
    assert pd.isna(table.iloc[0]["Closed [%]"])


def test_diagnostics_table_columns():
    table = diagnostics_table([Diagnostic("try", "unknown-status", "frozen", "Unknown tree status", 3)])
    assert table.loc[0, "occurrences"] == 3
    assert diagnostics_table([]).empty


def test_overview_context():
    ctx = build_overview_context(_report(), average_days=SETTINGS.average_days)
    assert ctx.tree == "autoland"
    assert ctx.shortterm_chart is not None
    assert ctx.longterm_chart is not None
    assert list(ctx.cycle_table["Version"]) == ["124"]
    # 28 of the last 72 hours were closed
    assert ctx.shortterm_open_percent == 61.1
    assert ctx.latest_open_percent is not None
