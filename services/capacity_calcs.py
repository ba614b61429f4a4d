"""Derived capacity values: rated capacity, month totals and net additions.

Everything here is a pure function of store state. Values are recomputed on
every script run; with eight sources and a few hundred months there is
nothing worth caching.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from services.capacity_store import SOURCES, HistoryRow, Source, freeze_values
from services.month_keys import Selection
from utils.numeric import round2, safe_number


@dataclass(frozen=True)
class RatedCapacity:
    """Rated capacity (GW) per source and in total.

    ``per_source`` values are rounded to 0.01 GW; ``total`` sums those rounded
    values. ``installed_total`` is the unrounded sum of installed capacity.
    """

    per_source: Mapping[Source, float]
    total: float
    installed_total: float


@dataclass(frozen=True)
class SourceTotals:
    per_source: Mapping[Source, float]
    total: float


@dataclass(frozen=True)
class NetAdditions:
    """End minus start capacity (GW).

    When either side is missing every value is 0 and ``complete`` is False;
    callers render a placeholder instead of a real zero in that case.
    """

    per_source: Mapping[Source, float]
    total: float
    complete: bool


@dataclass(frozen=True)
class HistoricalComparison:
    selection: Optional[Selection]
    start: Optional[SourceTotals]
    end: Optional[SourceTotals]
    net: NetAdditions


def sum_sources(values: Mapping[Source, float]) -> float:
    return sum(safe_number(values.get(source)) for source in SOURCES)


def rated_value(installed_gw: float, plf_pct: float) -> float:
    """``installed × PLF / 100`` rounded to 0.01 GW."""

    return round2(safe_number(installed_gw) * (safe_number(plf_pct) / 100.0))


def rated_capacity(installed: Mapping[Source, float], plf: Mapping[Source, float]) -> RatedCapacity:
    per_source = freeze_values(
        {source: rated_value(installed.get(source), plf.get(source)) for source in SOURCES}
    )
    return RatedCapacity(
        per_source=per_source,
        total=sum_sources(per_source),
        installed_total=sum_sources(installed),
    )


def totals(values: Optional[Mapping[Source, float]]) -> Optional[SourceTotals]:
    """Per-source passthrough (missing → 0) plus the sum; ``None`` passes through."""

    if values is None:
        return None
    per_source = freeze_values(values)
    return SourceTotals(per_source=per_source, total=sum_sources(per_source))


def net_additions(start: Optional[SourceTotals], end: Optional[SourceTotals]) -> NetAdditions:
    if start is None or end is None:
        return NetAdditions(
            per_source=freeze_values({}),
            total=0.0,
            complete=False,
        )
    per_source = freeze_values(
        {source: round2(end.per_source[source] - start.per_source[source]) for source in SOURCES}
    )
    return NetAdditions(per_source=per_source, total=round2(end.total - start.total), complete=True)


def net_indicator(value: float) -> str:
    """Classify a net addition as ``positive``, ``negative`` or ``neutral``."""

    if value > 0:
        return "positive"
    if value < 0:
        return "negative"
    return "neutral"


def _row_for(history: Sequence[HistoryRow], month: Optional[str]) -> Optional[HistoryRow]:
    if not month:
        return None
    return next((row for row in history if row.month == month), None)


def historical_comparison(
    history: Sequence[HistoryRow],
    selection: Optional[Selection],
) -> HistoricalComparison:
    """Totals at the selected start/end months and the net additions between them."""

    start_row = _row_for(history, selection.start if selection else None)
    end_row = _row_for(history, selection.end if selection else None)
    start = totals(start_row.values) if start_row else None
    end = totals(end_row.values) if end_row else None
    return HistoricalComparison(
        selection=selection,
        start=start,
        end=end,
        net=net_additions(start, end),
    )
