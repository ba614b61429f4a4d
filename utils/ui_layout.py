"""Reusable layout helpers for Streamlit pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import streamlit as st
from streamlit.delta_generator import DeltaGenerator

from services.capacity_store import CapacityStore, LoadState

NavRenderer = Callable[[CapacityStore], None]

_STATE_LABELS = {
    LoadState.UNINITIALIZED: "Not started",
    LoadState.LOADING: "Loading…",
    LoadState.LOADED: "Loaded",
    LoadState.LOAD_FAILED: "Not loaded",
}


@dataclass(frozen=True)
class _NavigationLink:
    label: str
    target: str
    help_text: Optional[str] = None


_NAV_LINKS = (
    _NavigationLink("Rated & historical capacity", "app.py", "Edit installed capacity and PLF; compare months."),
    _NavigationLink("Capacity trend", "pages/01_Capacity_Trend.py", "Monthly capacity by source."),
)


def _render_navigation_block(container: DeltaGenerator) -> None:
    """Render standardized navigation links for the workspace."""

    container.markdown("#### Navigate")
    for link in _NAV_LINKS:
        container.page_link(link.target, label=link.label, help=link.help_text)


def _render_status_block(container: DeltaGenerator, store: CapacityStore) -> None:
    """Show concise session status for the two capacity data files."""

    container.markdown("#### Session status")
    container.caption(f"{store.snapshot_name}: {_STATE_LABELS[store.snapshot_state]}")
    options = store.month_options
    history_detail = (
        f"{len(options):,} months ({options[0]} – {options[-1]})" if options else "no months available"
    )
    container.caption(f"{store.history_name}: {_STATE_LABELS[store.history_state]}, {history_detail}")


def init_page_layout(
    *,
    page_title: str,
    main_title: str,
    description: Optional[str] = None,
) -> NavRenderer:
    """Initialize the page layout with shared navigation and status blocks.

    ``st.set_page_config`` runs immediately and a header slot is reserved at
    the top of the page. The returned renderer fills it once the store has
    settled its loads, so the status block reflects the current run.
    """

    st.set_page_config(page_title=page_title, layout="wide")
    header_container = st.container()

    def _render(store: CapacityStore) -> None:
        with header_container:
            st.title(main_title)
            if description:
                st.caption(description)

            nav_col, status_col = st.columns([3, 2])
            _render_navigation_block(nav_col)
            _render_status_block(status_col, store)

        st.divider()

    return _render
