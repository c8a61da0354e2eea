from datetime import date
from typing import Iterable, Optional

import plotly.express as px
import plotly.graph_objects as go

from tracker.domain import WeekPoint
from tracker.series import breakdown_frame, series_frame

TEMPLATE = "plotly_white"


def _empty(title: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(template=TEMPLATE, title=title)
    return fig


def category_pie(rows: list[dict], title: str = "Spending %") -> go.Figure:
    if not rows:
        return _empty(title)
    df = breakdown_frame(rows)
    fig = px.pie(
        df,
        values="value",
        names="name",
        hole=0.6,
        color="name",
        color_discrete_map=dict(zip(df["name"], df["color"])),
        title=title,
    )
    fig.update_layout(template=TEMPLATE, margin=dict(t=40, b=10, l=10, r=10))
    return fig


def category_bars(rows: list[dict], title: str = "Totals") -> go.Figure:
    if not rows:
        return _empty(title)
    df = breakdown_frame(rows)
    fig = go.Figure(go.Bar(x=df["name"], y=df["value"], marker_color=list(df["color"])))
    fig.update_layout(template=TEMPLATE, title=title, margin=dict(t=40, b=10, l=10, r=10))
    return fig


def week_bars(points: Iterable[WeekPoint], highlight: Optional[date] = None, title: str = "This week") -> go.Figure:
    df = series_frame(points)
    colors = ["#2563eb" if d == highlight else "#cbd5e1" for d in df["day"]]
    fig = go.Figure(go.Bar(x=df["label"], y=df["total"], marker_color=colors))
    fig.update_layout(template=TEMPLATE, title=title, margin=dict(t=40, b=10, l=10, r=10))
    return fig
