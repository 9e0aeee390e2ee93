"""Chart builders (Altair) for daily tree status and long-term trends."""

from __future__ import annotations

from collections.abc import Sequence

import altair as alt
import pandas as pd

from treestatus_app.core.config import CHART_CATEGORIES


def _select_categories(table: pd.DataFrame, categories: Sequence[tuple[str, str, str]]) -> pd.DataFrame:
    order = {(kind, category): idx for idx, (kind, category, _color) in enumerate(categories)}
    keys = list(zip(table["kind"], table["category"]))
    tmp = table.copy()
    tmp["order"] = [order.get(key, -1) for key in keys]
    return tmp[tmp["order"] >= 0]


def shortterm_chart(
    table: pd.DataFrame,
    categories: Sequence[tuple[str, str, str]] = CHART_CATEGORIES,
) -> alt.Chart | None:
    """Stacked bar chart of hours per day by status and closure reason.

    Parameters
    ----------
    table : pd.DataFrame
        Long-form frame with day, kind, category and hours columns.
    categories : Sequence[tuple[str, str, str]]
        Ordered (kind, category, color) entries to stack, bottom first.

    Returns
    -------
    alt.Chart or None
        None when there is nothing to plot.
    """
    if table is None or table.empty:
        return None
    tmp = _select_categories(table, categories)
    if tmp.empty:
        return None
    labels = [category for _kind, category, _color in categories]
    colors = [color for _kind, _category, color in categories]
    return (
        alt.Chart(tmp)
        .mark_bar()
        .encode(
            x=alt.X("day:O", title="Day"),
            y=alt.Y("sum(hours):Q", title="Hours", scale=alt.Scale(domain=[0, 24])),
            color=alt.Color(
                "category:N",
                scale=alt.Scale(domain=labels, range=colors),
                legend=alt.Legend(title="Status / reason"),
            ),
            order=alt.Order("order:Q", sort="ascending"),
            tooltip=[
                alt.Tooltip("day:O", title="Day"),
                alt.Tooltip("category:N", title="Category"),
                alt.Tooltip("hours:Q", title="Hours", format=".2f"),
            ],
        )
        .properties(title="Tree closure statistics by day [hours]", height=320)
    )


def longterm_chart(trend: pd.DataFrame, *, tree: str = "", average_days: int | None = None) -> alt.Chart | None:
    """Line chart of the moving-average open share."""
    if trend is None or trend.empty or "open_percent" not in trend.columns:
        return None
    tmp = trend.dropna(subset=["open_percent"])
    if tmp.empty:
        return None
    window = f" [average for {average_days} days]" if average_days else ""
    title = f"{tree} tree open in %{window} for working days [Monday to Friday]".strip()
    return (
        alt.Chart(tmp)
        .mark_line(color="#39D000")
        .encode(
            x=alt.X("day:T", title="Date"),
            y=alt.Y("open_percent:Q", title="Share open [%]", scale=alt.Scale(domain=[0, 100])),
            tooltip=[
                alt.Tooltip("day:T", title="Date"),
                alt.Tooltip("open_percent:Q", title="Open [%]", format=".1f"),
                alt.Tooltip("closed_percent:Q", title="Closed [%]", format=".1f"),
            ],
        )
        .properties(title=title, height=300)
    )
