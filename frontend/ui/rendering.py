"""Shared rendering helpers for Streamlit pages."""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import pandas as pd
import streamlit as st
from streamlit.delta_generator import DeltaGenerator


@dataclass(frozen=True)
class MetricSpec:
    """Specification for a Streamlit metric card."""

    label: str
    value: str
    help: Optional[str] = None
    caption: Optional[str] = None


def render_metrics(columns: Sequence[DeltaGenerator], specs: Sequence[MetricSpec]) -> None:
    """Render metric cards from specs to keep layout and captions consistent."""

    for col, spec in zip(columns, specs):
        col.metric(spec.label, spec.value, help=spec.help)
        if spec.caption:
            col.caption(spec.caption)


def render_styled_table(
    df: pd.DataFrame,
    styles: Optional[pd.DataFrame] = None,
    *,
    use_container_width: bool = True,
    **dataframe_kwargs: Any,
) -> None:
    """Render a pre-formatted table, optionally with a same-shaped CSS frame.

    Tables arrive with their cells already rendered as text (two-decimal
    values or placeholders), so only per-cell CSS is applied here.
    """

    styler = df.style.set_properties(**{"text-align": "right"})
    if styles is not None:
        styler = styler.apply(lambda _: styles, axis=None)
    st.dataframe(styler, use_container_width=use_container_width, **dataframe_kwargs)
