# app.py — CapacityLab (rated & historical generation capacity) v0.1.0
# - Rated Capacity: editable installed capacity (GW) + PLF (%), rated = installed × PLF / 100
# - Historical Capacity: start/end month comparison with net additions by source
# - Edits persist per browser session (or a configured state file); CSVs load in the background

from pathlib import Path

import streamlit as st

from frontend.ui.capacity_tables import render_historical_capacity_card, render_rated_capacity_card
from utils.config import load_config
from utils.ui_layout import init_page_layout
from utils.ui_state import bootstrap_capacity_state, reload_capacity_state, settle_capacity_loads

BASE_DIR = Path(__file__).resolve().parent


def run_app():
    render_layout = init_page_layout(
        page_title="CapacityLab",
        main_title="Rated & historical capacity",
        description=(
            "Installed capacity × plant load factor by source, and net capacity additions "
            "between two months of the monthly history."
        ),
    )
    cfg = load_config(BASE_DIR)

    store = bootstrap_capacity_state(cfg)
    if st.sidebar.button("Reload data", help="Discard in-flight loads and re-read both CSV files."):
        store = reload_capacity_state(cfg)

    with st.spinner("Loading capacity data…"):
        still_loading = settle_capacity_loads(cfg.load_timeout_seconds)
    if still_loading:
        st.info("Capacity data is still loading; the tables update on the next interaction.")

    render_layout(store)

    with st.container(border=True):
        render_rated_capacity_card(store)
    with st.container(border=True):
        render_historical_capacity_card(store)


if __name__ == "__main__":
    run_app()
