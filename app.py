from __future__ import annotations

from datetime import datetime

import pandas as pd
import streamlit as st

from helpdesk_metrics.backlog import backlog_to_frame
from helpdesk_metrics.metrics import timing_frame, volume_frame
from helpdesk_metrics.pipeline import TicketReportSession
from helpdesk_metrics.session_state import clear_report, current_report, store_report, uploader_key
from helpdesk_metrics.visualization import build_metric_figures


st.set_page_config(page_title="Helpdesk Ticket Metrics", page_icon="📊", layout="wide")


@st.cache_data(show_spinner=False)
def _load_report(file_name: str, payload: bytes) -> TicketReportSession:
    return TicketReportSession.from_bytes(payload, file_name=file_name)


def _highlight_age(row: pd.Series) -> list[str]:
    if row["age_band"] == "critical":
        return ["background-color: #f8d7da"] * len(row)
    if row["age_band"] == "aging":
        return ["background-color: #fff3cd"] * len(row)
    return [""] * len(row)


st.title("Helpdesk Ticket Metrics")
st.caption("Upload a helpdesk CSV export to see volume, backlog age, response and close times.")

uploaded = st.file_uploader("Upload ticket CSV", type=["csv"], key=uploader_key(st.session_state))
if uploaded is not None:
    store_report(st.session_state, _load_report(uploaded.name, uploaded.getvalue()))
    st.success(f'✓ File "{uploaded.name}" uploaded successfully!')

report = current_report(st.session_state)
if report is None:
    st.info("No CSV data found. Please upload a CSV file first.")
    st.stop()

if st.sidebar.button("Clear uploaded data"):
    clear_report(st.session_state)
    st.rerun()

now = datetime.now()
metrics = report.metrics(now)
backlog = report.backlog(now)

col1, col2, col3, col4 = st.columns(4)
col1.metric("Total Tickets", f"{metrics.total_tickets}")
col2.metric("Resolved Tickets", f"{metrics.resolved_tickets}")
col3.metric("Open Backlog", f"{metrics.open_backlog}", help="Active + Waiting on Customer")
col4.metric("Resolution Rate", f"{metrics.resolution_rate:.2f}%")

metrics_tab, backlog_tab = st.tabs(["Metrics", "Backlog"])

with metrics_tab:
    figures = build_metric_figures(metrics)
    st.plotly_chart(figures["backlog_by_age"], use_container_width=True)

    left, right = st.columns(2)

    with left:
        st.subheader("Avg First Response Time by Priority")
        st.write(f"**Overall Average:** {metrics.avg_first_response_time.overall} hours")
        st.dataframe(timing_frame(metrics.avg_first_response_time, "avg_hours"), use_container_width=True)

        st.subheader("Avg Time to Close by Priority")
        st.write(f"**Overall Average:** {metrics.avg_time_to_close.overall} days")
        st.dataframe(timing_frame(metrics.avg_time_to_close, "avg_days"), use_container_width=True)

        st.subheader("Tag Coverage")
        coverage = metrics.tag_coverage
        tags_col, priority_col = st.columns(2)
        tags_col.metric(
            "Tickets with Tags",
            f"{coverage.percent_with_tags}%",
            help=f"{coverage.tickets_with_tags} of {metrics.total_tickets}",
        )
        priority_col.metric(
            "Assigned Priority",
            f"{coverage.percent_with_priority}%",
            help=f"{coverage.tickets_with_priority} of {metrics.total_tickets}",
        )

    with right:
        if "volume_by_week" in figures:
            st.plotly_chart(figures["volume_by_week"], use_container_width=True)

        inbox_col, client_col = st.columns(2)
        with inbox_col:
            st.subheader("By Inbox")
            st.dataframe(volume_frame(metrics.volume_by_inbox, "inbox"), use_container_width=True)
        with client_col:
            st.subheader("By Customer")
            st.dataframe(volume_frame(metrics.volume_by_client, "client"), use_container_width=True)

with backlog_tab:
    if not backlog:
        st.info("No open backlog tickets found.")
    else:
        frame = backlog_to_frame(backlog)
        st.dataframe(frame.style.apply(_highlight_age, axis=1), use_container_width=True)
        st.caption(f"Total Open Tickets: {len(backlog)} | red: critical (15+ days) | amber: aging (8-14 days)")
        st.download_button(
            "Download Backlog CSV",
            data=frame.to_csv(index=False).encode("utf-8"),
            file_name="backlog.csv",
            mime="text/csv",
        )
