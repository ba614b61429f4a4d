"""Numeric coercion and display helpers shared by the capacity tables."""

from __future__ import annotations

import math
from typing import Any

import numpy as np


def safe_number(value: Any) -> float:
    """Coerce ``value`` to a finite float, mapping anything else to 0.0.

    Strings are stripped first and an empty string counts as zero, so cleared
    inputs and blank CSV cells behave like an explicit 0. Never raises.
    """

    if value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if np.isfinite(number) else 0.0


def round2(value: float) -> float:
    """Round to the nearest 0.01 with halves rounded away from zero."""

    number = safe_number(value)
    shifted = abs(number) * 100.0
    if not np.isfinite(shifted):
        # Already far beyond 0.01 resolution.
        return number
    scaled = math.floor(shifted + 0.5) / 100.0
    return math.copysign(scaled, number) if scaled else 0.0


def format2(value: float) -> str:
    """Render ``value`` rounded to two decimals, e.g. ``85.00``."""

    return f"{round2(value):.2f}"


def format_signed2(value: float) -> str:
    """Two-decimal rendering with an explicit ``+`` for positive values."""

    rounded = round2(value)
    return f"+{rounded:.2f}" if rounded > 0 else f"{rounded:.2f}"
