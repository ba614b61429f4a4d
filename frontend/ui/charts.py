"""Chart and data prep helpers for the capacity trend page."""

from typing import Optional, Sequence, Union

import altair as alt
import pandas as pd

from services.capacity_store import SOURCES, HistoryRow
from services.month_keys import Selection


def build_history_long_df(history: Sequence[HistoryRow]) -> pd.DataFrame:
    """Long-form month × source capacity (GW) in display order."""
    records = [
        {"month": row.month, "source": source.value, "capacity_gw": float(row.values[source])}
        for row in history
        for source in SOURCES
    ]
    df = pd.DataFrame(records, columns=["month", "source", "capacity_gw"])
    df["month_start"] = pd.to_datetime(df["month"], format="%m/%Y")
    df["source_order"] = df["source"].map({source.value: idx for idx, source in enumerate(SOURCES)})
    return df


def history_area_chart(df: pd.DataFrame, selection: Optional[Selection] = None) -> Union[alt.Chart, alt.LayerChart]:
    """Stacked area of capacity by source, with the selected months marked."""
    source_names = [source.value for source in SOURCES]
    area = (
        alt.Chart(df)
        .mark_area(opacity=0.85)
        .encode(
            x=alt.X("month_start:T", title="Month", axis=alt.Axis(format="%m/%Y")),
            y=alt.Y("capacity_gw:Q", title="Capacity (GW)", stack="zero"),
            color=alt.Color("source:N", title="Source", sort=source_names),
            order=alt.Order("source_order:Q"),
            tooltip=[
                alt.Tooltip("month:N", title="Month"),
                alt.Tooltip("source:N", title="Source"),
                alt.Tooltip("capacity_gw:Q", title="GW", format=",.2f"),
            ],
        )
    )
    if selection is None:
        return area

    marks = pd.DataFrame(
        {
            "label": ["Start", "End"],
            "month_start": pd.to_datetime([selection.start, selection.end], format="%m/%Y"),
        }
    )
    rules = (
        alt.Chart(marks)
        .mark_rule(strokeDash=[4, 4], color="#334155")
        .encode(x="month_start:T", tooltip=[alt.Tooltip("label:N", title="Selection")])
    )
    return alt.layer(area, rules)
