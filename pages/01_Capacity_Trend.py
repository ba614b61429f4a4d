import streamlit as st

from app import BASE_DIR
from frontend.ui.charts import build_history_long_df, history_area_chart
from utils.config import load_config
from utils.ui_layout import init_page_layout
from utils.ui_state import bootstrap_capacity_state, settle_capacity_loads

render_layout = init_page_layout(
    page_title="Capacity trend",
    main_title="Monthly capacity by source",
    description="Stacked monthly capacity (GW) from the history file; dashed rules mark the selected start and end months.",
)

cfg = load_config(BASE_DIR)
store = bootstrap_capacity_state(cfg)
with st.spinner("Loading capacity data…"):
    settle_capacity_loads(cfg.load_timeout_seconds)
render_layout(store)

if store.history_message:
    st.error(store.history_message)

if not store.history:
    st.info("No monthly capacity rows available.")
    st.stop()

history_df = build_history_long_df(store.history)
st.altair_chart(history_area_chart(history_df, store.selection), use_container_width=True)
st.caption(
    f"{len(store.month_options):,} months from {store.month_options[0]} to {store.month_options[-1]}. "
    "Change the comparison months on the main page."
)
