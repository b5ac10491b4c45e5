"""Visualization utilities for the report consolidation panel."""

from __future__ import annotations

import html
from collections.abc import Iterable, Mapping

import plotly.express as px
import plotly.graph_objects as go

from . import utils


def _empty_figure(message: str) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text=message,
        showarrow=False,
        x=0.5,
        y=0.5,
        xref="paper",
        yref="paper",
        font=dict(size=14, color="#6c757d"),
    )
    fig.update_layout(margin=dict(l=0, r=0, t=20, b=20))
    return fig


def plot_entry_shares(breakdown: Iterable[Mapping[str, object]], *, dark: bool = False) -> go.Figure:
    """Horizontal bars with each enabled entry's share of the total."""

    df = utils.ensure_dataframe(breakdown)
    if df.empty:
        return _empty_figure("Nenhuma entrada marcada.")

    df["amount"] = df["amount"].astype(float)
    df["amount_label"] = df["amount"].apply(utils.format_currency)
    df["share_label"] = df["share"].apply(lambda value: f"{value:.1f}%")

    fig = px.bar(
        df,
        x="share",
        y="label",
        orientation="h",
        text="share_label",
        custom_data=["amount_label"],
        labels={"share": "Participação (%)", "label": "Entrada"},
        range_x=[0, 100],
    )
    fig.update_traces(
        marker_color="#6366f1",
        hovertemplate="%{y}<br>%{customdata[0]}<extra></extra>",
    )
    fig.update_yaxes(autorange="reversed", title=None)
    fig.update_layout(
        margin=dict(l=0, r=0, t=10, b=0),
        template="plotly_dark" if dark else "plotly_white",
        height=max(160, 60 * len(df)),
    )
    return fig


def breakdown_rows_html(breakdown: Iterable[Mapping[str, object]]) -> str:
    """HTML rows for the consolidation card; labels are escaped."""

    return "".join(
        f'<div class="total-card__row"><span>{html.escape(str(entry["label"]))}</span>'
        f'<strong>{utils.format_currency(entry["amount"])}</strong></div>'
        for entry in breakdown
    )
