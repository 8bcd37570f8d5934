"""Plotly figures for the metrics dashboard."""

from __future__ import annotations

import pandas as pd
import plotly.express as px
from plotly.graph_objs import Figure

from .metrics import TicketMetrics, timing_frame, volume_frame, weekly_volume_frame

BACKLOG_COLORS = {
    "0-2d": "#198754",
    "3-7d": "#0dcaf0",
    "8-14d": "#ffc107",
    "15+d": "#dc3545",
}


def build_backlog_age_figure(metrics: TicketMetrics) -> Figure:
    df = pd.DataFrame(list(metrics.backlog_by_age.items()), columns=["age_bucket", "tickets"])
    return px.bar(
        df,
        x="age_bucket",
        y="tickets",
        color="age_bucket",
        color_discrete_map=BACKLOG_COLORS,
        title="Backlog by Age (Active + Waiting on Customer)",
    )


def build_weekly_volume_figure(metrics: TicketMetrics) -> Figure | None:
    if not metrics.volume_by_week:
        return None
    df = weekly_volume_frame(metrics.volume_by_week)
    return px.line(df, x="week", y="tickets", markers=True, title="Ticket Volume by Week")


def build_inbox_volume_figure(metrics: TicketMetrics) -> Figure | None:
    if not metrics.volume_by_inbox:
        return None
    df = volume_frame(metrics.volume_by_inbox, "inbox")
    return px.bar(df, x="inbox", y="tickets", title="Ticket Volume by Inbox")


def build_response_time_figure(metrics: TicketMetrics) -> Figure | None:
    df = timing_frame(metrics.avg_first_response_time, "avg_hours")
    if df.empty:
        return None
    return px.bar(df, x="priority", y="avg_hours", title="Avg First Response Time by Priority (hours)")


def build_time_to_close_figure(metrics: TicketMetrics) -> Figure | None:
    df = timing_frame(metrics.avg_time_to_close, "avg_days")
    if df.empty:
        return None
    return px.bar(df, x="priority", y="avg_days", title="Avg Time to Close by Priority (days)")


def build_metric_figures(metrics: TicketMetrics) -> dict[str, Figure]:
    figures = {
        "backlog_by_age": build_backlog_age_figure(metrics),
        "volume_by_week": build_weekly_volume_figure(metrics),
        "volume_by_inbox": build_inbox_volume_figure(metrics),
        "first_response_time": build_response_time_figure(metrics),
        "time_to_close": build_time_to_close_figure(metrics),
    }
    return {name: figure for name, figure in figures.items() if figure is not None}
