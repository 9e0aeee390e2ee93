"""Tree overview page.

Fetches status logs for the selected trees (reusing logs kept in the session)
and shows daily closure hours, the long-term open share and per release
cycle closure statistics.
"""

from __future__ import annotations

import logging

import streamlit as st

from treestatus_app.app import register_page
from treestatus_app.core.config import DISPLAY_TIMEZONE, SETTINGS
from treestatus_app.core.service import TreeStatusService
from treestatus_app.core.timeutils import format_local
from treestatus_app.features.tree_overview import build_overview_context

logger = logging.getLogger(__name__)


@register_page("Tree Overview")
def tree_overview_page():
    st.title("Tree Closure Statistics")
    service: TreeStatusService | None = st.session_state.get("treestatus_service")
    if service is None:
        st.warning("Initialize connection on Setup page first.")
        return
    trees = st.session_state.get("trees") or []
    refresh = st.button("Refresh Data", type="primary")
    if refresh and hasattr(service.api, "clear_cache"):
        service.api.clear_cache()

    status = st.empty()

    def _progress(message: str, current: int | None = None, total: int | None = None) -> None:
        suffix = f" ({current}/{total})" if current is not None and total else ""
        status.write(f"{message}{suffix}")

    try:
        reports, logs = service.fetch_and_build(
            trees,
            st.session_state.get("tree_logs"),
            refresh=refresh,
            progress=_progress,
        )
    except Exception as exc:
        logger.error("Failed to build tree statistics: %s", exc)
        st.error(f"Failed to build tree statistics: {exc}")
        return
    status.empty()
    st.session_state["tree_logs"] = logs

    missing = [t for t in trees if t not in reports]
    if missing:
        st.warning(f"No data could be fetched for: {', '.join(missing)}")

    settings = service.settings
    for tree, report in reports.items():
        ctx = build_overview_context(report, settings.chart_categories, settings.average_days)
        st.header(tree)
        st.caption(f"Data as of {format_local(report.now, DISPLAY_TIMEZONE)}")

        if not ctx.diagnostics.empty:
            with st.expander(f"Warnings and errors ({len(ctx.diagnostics)})", expanded=False):
                st.dataframe(ctx.diagnostics.head(SETTINGS.max_table_rows), hide_index=True)

        col_a, col_b = st.columns(2)
        col_a.metric(
            f"Open, last {settings.shortterm_days} days",
            f"{ctx.shortterm_open_percent:.1f} %" if ctx.shortterm_open_percent is not None else "n/a",
        )
        col_b.metric(
            f"Open, {settings.average_days} day working-day average",
            f"{ctx.latest_open_percent:.1f} %" if ctx.latest_open_percent is not None else "n/a",
        )

        if ctx.shortterm_chart is not None:
            st.altair_chart(ctx.shortterm_chart, use_container_width=True)
        else:
            st.info("No status changes in the short-term window.")
        if ctx.longterm_chart is not None:
            st.altair_chart(ctx.longterm_chart, use_container_width=True)

        st.subheader("Release cycle statistics")
        st.dataframe(ctx.cycle_table, hide_index=True)
        csv = ctx.cycle_table.to_csv(index=False).encode(SETTINGS.download_encoding)
        st.download_button(
            "Download Cycle Statistics CSV",
            data=csv,
            file_name=f"treestatus_cycles_{tree}.csv",
            mime="text/csv",
            key=f"download_cycles_{tree}",
        )
