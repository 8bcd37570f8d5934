"""Upload state for the Streamlit dashboard, kept in ``st.session_state``."""

from __future__ import annotations

from typing import Any, MutableMapping

from .pipeline import TicketReportSession

REPORT_KEY = "report"
UPLOAD_GENERATION_KEY = "upload_generation"


def uploader_key(state: MutableMapping[str, Any]) -> str:
    # A new key gives a fresh, empty file uploader widget.
    return f"csv_upload_{state.get(UPLOAD_GENERATION_KEY, 0)}"


def store_report(state: MutableMapping[str, Any], report: TicketReportSession) -> None:
    state[REPORT_KEY] = report


def current_report(state: MutableMapping[str, Any]) -> TicketReportSession | None:
    return state.get(REPORT_KEY)


def clear_report(state: MutableMapping[str, Any]) -> None:
    state.pop(REPORT_KEY, None)
    state[UPLOAD_GENERATION_KEY] = state.get(UPLOAD_GENERATION_KEY, 0) + 1
