"""Tree Overview feature module: per-tree charts, cycle table and warnings."""

from treestatus_app.features.tree_overview.context import TreeOverviewContext, build_overview_context

__all__ = [
    "TreeOverviewContext",
    "build_overview_context",
]
