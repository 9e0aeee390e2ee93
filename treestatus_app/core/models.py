"""Domain data models for tree status changes, day buckets, and cycle statistics."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date


@dataclass(slots=True, frozen=True)
class StatusChange:
    timestamp: int  # ms since epoch, UTC
    status: str | None  # None marks the "now" sentinel
    reason: str = ""
    tags: tuple[str, ...] = ()

    @property
    def is_sentinel(self) -> bool:
        return self.status is None


@dataclass(slots=True, frozen=True)
class SubInterval:
    """A piece of a status interval lying within a single logical day."""

    start: int
    end: int
    status: str
    tag: str | None
    day: str

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(slots=True)
class StatusBucket:
    """Duration accumulator for one logical day (milliseconds).

    Keys of ``durations`` and ``closed_reasons`` are fixed at creation; adding
    to a key that was not configured raises ``KeyError``.
    """

    day: str
    is_working_day: bool
    durations: dict[str, int] = field(default_factory=dict)
    closed_reasons: dict[str, int] = field(default_factory=dict)

    @classmethod
    def empty(
        cls,
        day: str,
        statuses: Iterable[str],
        reasons: Iterable[str],
        *,
        is_working_day: bool | None = None,
    ) -> StatusBucket:
        if is_working_day is None:
            is_working_day = date.fromisoformat(day).weekday() < 5
        return cls(
            day=day,
            is_working_day=is_working_day,
            durations={s: 0 for s in statuses},
            closed_reasons={r: 0 for r in reasons},
        )

    def add_status(self, status: str, duration: int) -> None:
        if status not in self.durations:
            raise KeyError(f"Unrecognized status {status!r}")
        self.durations[status] += duration

    def add_reason(self, reason: str, duration: int) -> None:
        if reason not in self.closed_reasons:
            raise KeyError(f"Unrecognized closed reason {reason!r}")
        self.closed_reasons[reason] += duration

    def absorb(self, other: StatusBucket) -> None:
        """Add all durations of ``other`` into this bucket."""
        for status, value in other.durations.items():
            self.add_status(status, value)
        for reason, value in other.closed_reasons.items():
            self.add_reason(reason, value)

    @property
    def total(self) -> int:
        return sum(self.durations.values())

    def not_open_total(self, open_status: str = "open") -> int:
        return sum(v for k, v in self.durations.items() if k != open_status)


@dataclass(slots=True, frozen=True)
class ReleaseCycle:
    version: str
    start: date
    end: date


@dataclass(slots=True, frozen=True)
class ClosureInterval:
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(slots=True)
class CycleStatistics:
    version: str
    start: date
    end: date
    closed_share: float | None
    mean: float | None
    median: float | None
    max: float | None
    count: int
    rate_per_day: float | None


@dataclass(slots=True)
class TrendPoint:
    day: str
    open_percent: float | None
    closed_percent: float | None
    status_percents: dict[str, float | None] = field(default_factory=dict)
    reason_percents: dict[str, float | None] = field(default_factory=dict)


@dataclass(slots=True)
class Diagnostic:
    tree: str
    kind: str
    value: str
    message: str
    occurrences: int = 1
