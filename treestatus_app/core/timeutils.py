"""Epoch-millisecond and logical-day helpers.

All engine arithmetic runs on integer milliseconds since the epoch (UTC). A
logical day is a 24 hour window starting ``offset_ms`` after UTC midnight.
"""

from __future__ import annotations

import math
import numbers
from datetime import date, datetime

import pandas as pd
import pytz

from .config import DAY_MS


def to_epoch_ms(value) -> int | None:
    """Convert a timestamp-like value to epoch milliseconds.

    Numbers and all-digit strings are taken as epoch milliseconds; other
    strings and datetimes are parsed with pandas and assumed UTC when naive.
    Returns None when the input cannot be parsed or is not a single value.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if value.lstrip("-").isdigit():
            return int(value)
    elif not isinstance(value, (datetime, date)):
        return None
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError):
        return None
    if not isinstance(ts, pd.Timestamp):
        # NaT or a whole index
        return None
    return int(ts.value // 1_000_000)


def utc_now_ms() -> int:
    return int(datetime.now(tz=pytz.UTC).timestamp() * 1000)


def logical_day(ts_ms: int, offset_ms: int) -> int:
    """Index of the logical day containing ``ts_ms``."""
    return (ts_ms - offset_ms) // DAY_MS


def day_start_ms(day_index: int, offset_ms: int) -> int:
    return day_index * DAY_MS + offset_ms


def day_string(day_index: int) -> str:
    """YYYY-MM-DD label of a logical day."""
    return datetime.fromtimestamp(day_index * DAY_MS / 1000, tz=pytz.UTC).date().isoformat()


def date_start_ms(value: date, offset_ms: int) -> int:
    """Start of the logical day labelled ``value``."""
    midnight = pytz.UTC.localize(datetime(value.year, value.month, value.day))
    return int(midnight.timestamp() * 1000) + offset_ms


def format_local(ts_ms: int, tz_name: str, fmt: str = "%Y-%m-%d %H:%M %Z") -> str:
    tz = pytz.timezone(tz_name)
    return datetime.fromtimestamp(ts_ms / 1000, tz=pytz.UTC).astimezone(tz).strftime(fmt)
