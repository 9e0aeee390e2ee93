"""Tree status and closure reason normalization utilities.

Statuses and closure reasons arrive as free text from the Treestatus service.
These helpers map them onto the canonical labels configured in config.py
(TREE_STATUSES, CLOSED_REASONS) so day buckets can use fixed keys.
"""

from __future__ import annotations

import re
from collections.abc import Collection, Sequence

from .config import OPEN_STATUS, UNKNOWN_REASON

_SEPARATORS = re.compile(r"[\s_]+")


def canonical_label(value: str | None) -> str:
    """Lowercase and hyphenate a label.

    Examples
    --------
    >>> canonical_label("approval required")
    'approval-required'
    >>> canonical_label("Checkin_Test")
    'checkin-test'
    """
    if value is None:
        return ""
    return _SEPARATORS.sub("-", str(value).strip().lower())


def is_open_status(status: str | None) -> bool:
    return status == OPEN_STATUS


def first_tag(tags: Sequence[str]) -> str | None:
    """Return the first non-empty tag; multiple categories collapse to one."""
    if not tags:
        return None
    tag = tags[0]
    if tag is None or not str(tag).strip():
        return None
    return str(tag)


def classify_closed_reason(tag: str | None, known: Collection[str]) -> tuple[str, bool]:
    """Map a closing change's tag to a configured reason category.

    Parameters
    ----------
    tag : str | None
        First tag of the change, as supplied.
    known : Collection[str]
        Configured reason categories.

    Returns
    -------
    tuple[str, bool]
        The category, and whether the tag was present but unrecognized.
    """
    if tag is None:
        return UNKNOWN_REASON, False
    reason = canonical_label(tag)
    if not reason:
        return UNKNOWN_REASON, False
    if reason not in known:
        return UNKNOWN_REASON, True
    return reason, False
