"""Table helpers for release cycle statistics and diagnostics."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from treestatus_app.core.models import CycleStatistics, Diagnostic

CYCLE_COLUMNS: Sequence[str] = (
    "Version",
    "Start",
    "End",
    "Closed [%]",
    "Mean closure [min]",
    "Median closure [min]",
    "Max closure [min]",
    "Closures",
    "Closures per day",
)


def _one_digit(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value, 1)


def cycle_statistics_table(stats: Sequence[CycleStatistics]) -> pd.DataFrame:
    """Release cycle statistics, newest cycle first, values rounded to one digit."""
    if not stats:
        return pd.DataFrame(columns=list(CYCLE_COLUMNS))
    rows = []
    for s in reversed(stats):
        rows.append(
            {
                "Version": s.version,
                "Start": s.start.isoformat(),
                "End": s.end.isoformat(),
                "Closed [%]": _one_digit(s.closed_share * 100) if s.closed_share is not None else None,
                "Mean closure [min]": _one_digit(s.mean),
                "Median closure [min]": _one_digit(s.median),
                "Max closure [min]": _one_digit(s.max),
                "Closures": s.count,
                "Closures per day": _one_digit(s.rate_per_day),
            }
        )
    return pd.DataFrame(rows, columns=list(CYCLE_COLUMNS))


def diagnostics_table(diagnostics: Sequence[Diagnostic]) -> pd.DataFrame:
    if not diagnostics:
        return pd.DataFrame(columns=["tree", "kind", "value", "occurrences", "message"])
    return pd.DataFrame(
        [
            {
                "tree": d.tree,
                "kind": d.kind,
                "value": d.value,
                "occurrences": d.occurrences,
                "message": d.message,
            }
            for d in diagnostics
        ]
    )
