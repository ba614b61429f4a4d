"""Month-key (``MM/YYYY``) arithmetic and start/end selection rules.

Month keys are ordered by (year, month). Plain string comparison is wrong for
this format (``"12/2023" > "01/2024"``), so every ordering goes through
:func:`compare_month_keys`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, Optional, Sequence, Tuple

MONTH_KEY_PATTERN = re.compile(r"^[0-9]{2}/[0-9]{4}\Z")


def is_month_key(text: Optional[str]) -> bool:
    """True when ``text`` is a zero-padded ``MM/YYYY`` token with month 01-12."""

    if text is None or not MONTH_KEY_PATTERN.match(text):
        return False
    return 1 <= int(text[:2]) <= 12


def split_month_key(month_key: str) -> Tuple[int, int]:
    """Return ``(month, year)`` integers for a ``MM/YYYY`` key."""

    month_text, year_text = month_key.split("/")
    return int(month_text), int(year_text)


def format_month_key(month: int, year: int) -> str:
    return f"{month:02d}/{year:04d}"


def compare_month_keys(a: str, b: str) -> int:
    """Negative when ``a`` is earlier, zero when equal, positive when later."""

    a_month, a_year = split_month_key(a)
    b_month, b_year = split_month_key(b)
    if a_year != b_year:
        return a_year - b_year
    return a_month - b_month


month_sort_key = cmp_to_key(compare_month_keys)


def sort_month_keys(keys: Iterable[str]) -> List[str]:
    return sorted(keys, key=month_sort_key)


def shift_back(month_key: str, months: int) -> str:
    """Return the key ``months`` months before ``month_key``.

    Years are borrowed as needed, so shifts spanning several years work.
    Non-positive shifts return the key unchanged.
    """

    month, year = split_month_key(month_key)
    if months <= 0:
        return format_month_key(month, year)
    # Work on a zero-based month count so borrowing is a single divmod.
    year_delta, month_index = divmod(month - 1 - months, 12)
    return format_month_key(month_index + 1, year + year_delta)


def clamp_to_options(target: str, options: Sequence[str]) -> str:
    """Snap ``target`` onto ``options``.

    Returns ``target`` when it is available, otherwise the latest option not
    after it, otherwise the earliest option. With no options the target is
    returned unchanged and callers treat that as "no data".
    """

    if not options:
        return target
    if target in options:
        return target
    ordered = sort_month_keys(options)
    for candidate in reversed(ordered):
        if compare_month_keys(candidate, target) <= 0:
            return candidate
    return ordered[0]


@dataclass(frozen=True)
class Selection:
    """Start/end months for the historical comparison; ``start <= end``."""

    start: str
    end: str


def _enforce_order(start: str, end: str) -> Selection:
    if compare_month_keys(start, end) > 0:
        return Selection(start=end, end=end)
    return Selection(start=start, end=end)


def default_selection(options: Sequence[str], months_back: int = 12) -> Optional[Selection]:
    """Latest month as end, the month ``months_back`` earlier (clamped) as start."""

    if not options:
        return None
    ordered = sort_month_keys(options)
    end = ordered[-1]
    start = clamp_to_options(shift_back(end, months_back), ordered)
    return _enforce_order(start, end)


def reconcile_selection(
    previous: Optional[Selection],
    options: Sequence[str],
    months_back: int = 12,
) -> Optional[Selection]:
    """Carry a prior selection onto a new set of month options."""

    if not options:
        return None
    if previous is None:
        return default_selection(options, months_back)
    return _enforce_order(
        clamp_to_options(previous.start, options),
        clamp_to_options(previous.end, options),
    )


def select_start(selection: Selection, month_key: str) -> Selection:
    """Apply a new start month; a start after the end is forced down to the end."""

    return _enforce_order(month_key, selection.end)


def select_end(selection: Selection, month_key: str) -> Selection:
    """Apply a new end month; the start is pulled down if it would exceed it."""

    return _enforce_order(selection.start, month_key)


def start_options(options: Sequence[str], end: Optional[str]) -> List[str]:
    """Months selectable as start: every option not after ``end``."""

    ordered = sort_month_keys(options)
    if not end:
        return ordered
    return [m for m in ordered if compare_month_keys(m, end) <= 0]


def end_options(options: Sequence[str], start: Optional[str]) -> List[str]:
    """Months selectable as end: every option not before ``start``."""

    ordered = sort_month_keys(options)
    if not start:
        return ordered
    return [m for m in ordered if compare_month_keys(m, start) >= 0]
