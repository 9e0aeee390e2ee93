"""Load release cycle definitions from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from pathlib import Path

import yaml

from .config import RELEASE_CYCLES
from .models import ReleaseCycle

logger = logging.getLogger(__name__)

_CACHE: dict[Path, list[ReleaseCycle]] = {}


def parse_release_cycles(entries: Iterable[Mapping[str, object]]) -> list[ReleaseCycle]:
    """Validate raw cycle entries and return them ordered by start date.

    Entries with missing or invalid dates, or an end not after the start, are
    skipped with a warning. Overlapping cycles are kept but logged.
    """
    cycles: list[ReleaseCycle] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            logger.warning("Ignoring release cycle entry %r: not a mapping", entry)
            continue
        version = entry.get("version")
        try:
            start = _as_date(entry.get("start"))
            end = _as_date(entry.get("end"))
        except (TypeError, ValueError) as exc:
            logger.warning("Ignoring release cycle %r: %s", version, exc)
            continue
        if version is None or end <= start:
            logger.warning("Ignoring release cycle %r: invalid version or date range", version)
            continue
        cycles.append(ReleaseCycle(version=str(version), start=start, end=end))
    cycles.sort(key=lambda c: c.start)
    for previous, current in zip(cycles, cycles[1:]):
        if current.start < previous.end:
            logger.warning("Release cycles %s and %s overlap", previous.version, current.version)
    return cycles


def _as_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise TypeError(f"expected YYYY-MM-DD date, got {value!r}")
    return date.fromisoformat(value.strip())


def load_release_cycles(base_path: str | Path | None = None) -> list[ReleaseCycle]:
    """Release cycles from ``release_cycles.yaml`` or the built-in defaults."""
    base = Path(base_path or Path(__file__).resolve().parent.parent)
    yaml_path = base / "release_cycles.yaml"
    if yaml_path in _CACHE:
        return list(_CACHE[yaml_path])
    if not yaml_path.exists():
        cycles = parse_release_cycles(RELEASE_CYCLES)
    else:
        try:
            data = yaml.safe_load(yaml_path.read_text()) or {}
            entries = data.get("release_cycles") or []
            cycles = parse_release_cycles(entries) or parse_release_cycles(RELEASE_CYCLES)
        except (OSError, yaml.YAMLError, AttributeError) as exc:
            logger.warning("Failed to read %s, using built-in release cycles: %s", yaml_path, exc)
            cycles = parse_release_cycles(RELEASE_CYCLES)
    _CACHE[yaml_path] = cycles
    return list(cycles)
