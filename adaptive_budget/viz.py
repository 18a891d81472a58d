"""Visualization utilities for the adaptive budget report."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go


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


def plot_category_donut(categories: Iterable[Mapping[str, object]], limit: int = 5) -> go.Figure:
    """Current-month spend split across the largest categories."""

    df = pd.DataFrame(list(categories))
    if df.empty:
        return _empty_figure("No category spend to display.")

    df = df.loc[df["current_month_spent"] > 0].head(limit)
    if df.empty:
        return _empty_figure("No spending recorded this month.")

    fig = px.pie(
        df,
        names="name",
        values="current_month_spent",
        hole=0.55,
        title="Spending by category",
    )
    fig.update_traces(textinfo="label+percent", pull=[0.03] * len(df))
    fig.update_layout(margin=dict(l=0, r=0, t=40, b=0))
    return fig


def plot_budget_progress(progress: Iterable[Mapping[str, object]]) -> go.Figure:
    """Horizontal bars of budget used, with the expected pace as a dashed marker."""

    df = pd.DataFrame(list(progress))
    if df.empty:
        return _empty_figure("No budget progress for this month yet.")

    colors = np.where(
        df["is_over_pace"],
        "#dc2626",
        np.where(df["is_under_pace"], "#15803d", "#2563eb"),
    )
    fig = go.Figure()
    fig.add_bar(
        name="Spent",
        x=df["spent_percentage"].clip(upper=100),
        y=df["name"],
        orientation="h",
        marker_color=colors,
        customdata=np.stack([df["spent"], df["budget"]], axis=-1),
        hovertemplate="%{y}: $%{customdata[0]:,.0f} of $%{customdata[1]:,.0f}<extra></extra>",
    )
    fig.add_vline(
        x=float(df["expected_spending_percentage"].iloc[0]),
        line_dash="dash",
        line_color="#64748b",
        annotation_text="Expected",
    )
    fig.update_layout(
        title="Adaptive budget progress",
        xaxis=dict(title="% of budget spent", range=[0, 100]),
        yaxis=dict(autorange="reversed"),
        margin=dict(l=0, r=0, t=45, b=0),
        showlegend=False,
    )
    return fig


def plot_category_trends(categories: Iterable[Mapping[str, object]], limit: int = 8) -> go.Figure:
    """Historical monthly average against the recent three-month average."""

    df = pd.DataFrame(list(categories))
    if df.empty:
        return _empty_figure("No spending history available.")

    df = df.head(limit)
    fig = go.Figure()
    fig.add_bar(name="Historical avg", x=df["name"], y=df["historical_avg_spend"], marker_color="#94a3b8")
    fig.add_bar(name="Recent avg", x=df["name"], y=df["recent_trend_spend"], marker_color="#8b5cf6")
    fig.add_trace(
        go.Scatter(
            name="Adaptive budget",
            x=df["name"],
            y=df["adaptive_budget"],
            mode="markers",
            marker=dict(color="#0f172a", size=10, symbol="diamond"),
        )
    )
    fig.update_layout(
        barmode="group",
        title="Spending trends by category",
        yaxis_title="Monthly amount",
        margin=dict(l=0, r=0, t=45, b=0),
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig
