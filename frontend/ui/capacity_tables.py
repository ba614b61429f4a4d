"""Rated and historical capacity tables for the capacity page."""

from __future__ import annotations

from typing import Mapping

import pandas as pd
import streamlit as st

from frontend.ui.rendering import MetricSpec, render_metrics, render_styled_table
from services.capacity_calcs import (
    HistoricalComparison,
    RatedCapacity,
    historical_comparison,
    net_indicator,
    rated_capacity,
)
from services.capacity_store import SOURCES, CapacityStore, Source
from services.month_keys import end_options, start_options
from utils.numeric import format2, format_signed2

PLACEHOLDER = "—"
TOTAL_COLUMN = "Total"
TABLE_COLUMNS = [source.value for source in SOURCES] + [TOTAL_COLUMN]

INSTALLED_ROW = "Capacity as on current date"
PLF_ROW = "PLF %"
RATED_ROW = "Rated Capacity"
NET_ROW = "Net Addition (GW)"

# emerald-600 / rose-600 / slate-700
NET_INDICATOR_COLORS = {
    "positive": "#059669",
    "negative": "#e11d48",
    "neutral": "#334155",
}


def net_addition_color(value: float) -> str:
    return NET_INDICATOR_COLORS[net_indicator(value)]


def _formatted_row(values: Mapping[Source, float], total: str) -> list[str]:
    return [format2(values[source]) for source in SOURCES] + [total]


def build_rated_table(
    installed: Mapping[Source, float],
    plf: Mapping[Source, float],
    rated: RatedCapacity,
) -> pd.DataFrame:
    """Three-row summary (installed, PLF, rated) with sources as columns."""

    rows = {
        INSTALLED_ROW: _formatted_row(installed, format2(rated.installed_total)),
        PLF_ROW: _formatted_row(plf, PLACEHOLDER),
        RATED_ROW: _formatted_row(rated.per_source, format2(rated.total)),
    }
    df = pd.DataFrame.from_dict(rows, orient="index", columns=TABLE_COLUMNS)
    df.index.name = "Capacity (GW)"
    return df


def start_row_label(comparison: HistoricalComparison) -> str:
    month = comparison.selection.start if comparison.selection else PLACEHOLDER
    return f"Capacity as on Start Date ({month})"


def end_row_label(comparison: HistoricalComparison) -> str:
    month = comparison.selection.end if comparison.selection else PLACEHOLDER
    return f"Capacity as on End Date ({month})"


def build_history_table(comparison: HistoricalComparison) -> pd.DataFrame:
    """Start/end capacity and net additions; placeholders where a side is missing."""

    def _totals_row(totals) -> list[str]:
        if totals is None:
            return [PLACEHOLDER] * len(TABLE_COLUMNS)
        return _formatted_row(totals.per_source, format2(totals.total))

    net = comparison.net
    if net.complete:
        net_row = [format_signed2(net.per_source[source]) for source in SOURCES] + [format_signed2(net.total)]
    else:
        net_row = [PLACEHOLDER] * len(TABLE_COLUMNS)

    rows = {
        start_row_label(comparison): _totals_row(comparison.start),
        end_row_label(comparison): _totals_row(comparison.end),
        NET_ROW: net_row,
    }
    df = pd.DataFrame.from_dict(rows, orient="index", columns=TABLE_COLUMNS)
    df.index.name = "Capacity (GW)"
    return df


def build_history_styles(comparison: HistoricalComparison, table: pd.DataFrame) -> pd.DataFrame:
    """CSS frame matching ``table``: net additions colored by sign."""

    styles = pd.DataFrame("", index=table.index, columns=table.columns)
    net = comparison.net
    neutral = f"color: {NET_INDICATOR_COLORS['neutral']}; font-weight: 600"
    if not net.complete:
        styles.loc[NET_ROW, :] = neutral
        return styles
    for source in SOURCES:
        styles.loc[NET_ROW, source.value] = f"color: {net_addition_color(net.per_source[source])}; font-weight: 600"
    styles.loc[NET_ROW, TOTAL_COLUMN] = f"color: {net_addition_color(net.total)}; font-weight: 600"
    return styles


def _sync_widget(key: str, value) -> None:
    # Widget state must follow the store when a load changed it since the last run.
    if st.session_state.get(key) != value:
        st.session_state[key] = value


def _on_installed_change(store: CapacityStore, source: Source, key: str) -> None:
    store.set_installed(source, st.session_state.get(key))


def _on_plf_change(store: CapacityStore, source: Source, key: str) -> None:
    store.set_plf(source, st.session_state.get(key))


def _on_start_change(store: CapacityStore, key: str) -> None:
    store.select_start(st.session_state[key])


def _on_end_change(store: CapacityStore, key: str) -> None:
    store.select_end(st.session_state[key])


def render_rated_capacity_card(store: CapacityStore) -> RatedCapacity:
    """Editable installed capacity and PLF inputs with the computed rated table."""

    st.subheader("Rated Capacity")
    st.caption("GW")
    if store.snapshot_message:
        st.error(store.snapshot_message)

    st.markdown("**Capacity as on current date (GW)**")
    installed_cols = st.columns(len(SOURCES))
    for col, source in zip(installed_cols, SOURCES):
        key = f"installed_{source.name}"
        _sync_widget(key, float(store.installed[source]))
        col.number_input(
            source.value,
            key=key,
            step=0.01,
            format="%.2f",
            on_change=_on_installed_change,
            args=(store, source, key),
        )

    st.markdown("**PLF %**")
    plf_cols = st.columns(len(SOURCES))
    for col, source in zip(plf_cols, SOURCES):
        key = f"plf_{source.name}"
        _sync_widget(key, float(store.plf[source]))
        col.number_input(
            source.value,
            key=key,
            step=0.01,
            format="%.2f",
            help="Plant load factor, 0–100 %.",
            on_change=_on_plf_change,
            args=(store, source, key),
        )

    rated = rated_capacity(store.installed, store.plf)
    render_styled_table(build_rated_table(store.installed, store.plf, rated))
    render_metrics(
        st.columns(2),
        [
            MetricSpec("Installed capacity", f"{format2(rated.installed_total)} GW"),
            MetricSpec("Rated capacity", f"{format2(rated.total)} GW"),
        ],
    )
    st.caption(
        "Rated Capacity (GW) = Installed Capacity × (PLF / 100). "
        "Values are editable and saved locally."
    )
    return rated


def render_historical_capacity_card(store: CapacityStore) -> HistoricalComparison:
    """Start/end month selectors and the net-addition comparison table."""

    st.subheader("Historical Capacity")
    st.caption("GW")

    options = store.month_options
    selection = store.selection
    start_col, end_col = st.columns(2)
    if options and selection is not None:
        start_key, end_key = "history_start_month", "history_end_month"
        _sync_widget(start_key, selection.start)
        _sync_widget(end_key, selection.end)
        start_col.selectbox(
            "Start Month/Year",
            start_options(options, selection.end),
            key=start_key,
            on_change=_on_start_change,
            args=(store, start_key),
        )
        end_col.selectbox(
            "End Month/Year",
            end_options(options, selection.start),
            key=end_key,
            on_change=_on_end_change,
            args=(store, end_key),
        )
    else:
        start_col.selectbox("Start Month/Year", ["No data"], disabled=True)
        end_col.selectbox("End Month/Year", ["No data"], disabled=True)

    if store.history_message:
        st.error(store.history_message)

    comparison = historical_comparison(store.history, store.selection)
    table = build_history_table(comparison)
    render_styled_table(table, build_history_styles(comparison, table))
    st.caption(
        "Net Addition (GW) = Capacity at End Date − Capacity at Start Date. "
        f"Data sourced from monthly {store.history_name}."
    )
    return comparison
