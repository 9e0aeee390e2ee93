"""Central configuration, constants, and engine settings."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

# =============================================================================
# Treestatus Connection Settings
# =============================================================================
TREESTATUS_DEFAULT_SERVER = "https://treestatus.mozilla-releng.net"
DEFAULT_TREES: Sequence[str] = ("autoland", "try", "mozilla-inbound")
# Used only for display of "data as of" captions
DISPLAY_TIMEZONE = "America/Los_Angeles"
FETCH_TIMEOUT_SECONDS: float = 60.0
FETCH_MAX_WORKERS = 4

# =============================================================================
# Time Windows
# =============================================================================
SHORTTERM_VIEW_IN_DAYS: int = 28
LONGTERM_VIEW_IN_DAYS: int = 2 * 365
MOVING_AVERAGE_IN_DAYS: int = 28  # 4 weeks

# Pacific Daylight Saving Time for the start of the day
DAYSTART_OFFSET_TO_UTC_IN_HOURS: int = 7

# Open time between two closures below which they count as one closure
CLOSURE_MERGE_THRESHOLD_IN_MINUTES: float = 2.0

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS

# =============================================================================
# Tree Status Configuration
# =============================================================================
OPEN_STATUS = "open"

# Statuses tracked as separate duration fields
TREE_STATUSES: Sequence[str] = (
    "open",
    "closed",
    "approval-required",
)

# Closure reason categories taken from the first tag of a closing change.
# "unknown" is the fallback for missing or unrecognized tags.
UNKNOWN_REASON = "unknown"
CLOSED_REASONS: Sequence[str] = (
    "checkin-compilation",
    "checkin-test",
    "backlog",
    "infra",
    "merges",
    "planned",
    "other",
    "unknown",
    "waiting-for-coverage",
)

# Stacking order and colors of the daily chart. Each entry is
# (kind, category, color) where kind is "status" or "reason".
# approval-required time is already split over its reason tags.
CHART_CATEGORIES: Sequence[tuple[str, str, str]] = (
    ("status", "open", "#39D000"),
    ("reason", "planned", "#000099"),
    ("reason", "merges", "#0000DD"),
    ("reason", "waiting-for-coverage", "#DDD666"),
    ("reason", "backlog", "#DD44BB"),
    ("reason", "unknown", "#777777"),
    ("reason", "other", "#4488CC"),
    ("reason", "infra", "#881166"),
    ("reason", "checkin-test", "#FF6600"),
    ("reason", "checkin-compilation", "#DD0000"),
)

# =============================================================================
# Release Cycles (mozilla-central). Overridable via release_cycles.yaml
# =============================================================================
RELEASE_CYCLES: Sequence[dict[str, object]] = (
    {"version": 65, "start": "2018-10-22", "end": "2018-12-10"},
    {"version": 66, "start": "2018-12-10", "end": "2019-01-28"},
    {"version": 67, "start": "2019-01-28", "end": "2019-03-18"},
    {"version": 68, "start": "2019-03-18", "end": "2019-05-20"},
    {"version": 69, "start": "2019-05-20", "end": "2019-07-08"},
    {"version": 70, "start": "2019-07-08", "end": "2019-09-02"},
    {"version": 71, "start": "2019-09-02", "end": "2019-10-21"},
    {"version": 72, "start": "2019-10-21", "end": "2019-12-02"},
    {"version": 73, "start": "2019-12-02", "end": "2020-01-06"},
    {"version": 74, "start": "2020-01-06", "end": "2020-02-10"},
)


@dataclass(slots=True)
class EngineSettings:
    shortterm_days: int = SHORTTERM_VIEW_IN_DAYS
    longterm_days: int = LONGTERM_VIEW_IN_DAYS
    average_days: int = MOVING_AVERAGE_IN_DAYS
    day_offset_hours: float = DAYSTART_OFFSET_TO_UTC_IN_HOURS
    merge_threshold_minutes: float = CLOSURE_MERGE_THRESHOLD_IN_MINUTES
    statuses: Sequence[str] = TREE_STATUSES
    closed_reasons: Sequence[str] = CLOSED_REASONS
    chart_categories: Sequence[tuple[str, str, str]] = CHART_CATEGORIES
    release_cycles: Sequence = field(default_factory=tuple)

    @property
    def day_offset_ms(self) -> int:
        return int(self.day_offset_hours * HOUR_MS)

    @property
    def merge_threshold_ms(self) -> int:
        return int(self.merge_threshold_minutes * 60 * 1000)

    @property
    def days_back(self) -> int:
        """Number of days before today covered by the daily buckets.

        Long-term view, plus the averaging lookback for its first day, plus
        one because the data ends in the middle of the current day.
        """
        return self.longterm_days + 1 + self.average_days


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 1000
    download_encoding: str = "utf-8"


SETTINGS = AppSettings()
