"""Helpdesk ticket metrics package."""

from .backlog import compute_backlog
from .metrics import compute_metrics
from .pipeline import TicketReportSession, run_backlog_pipeline, run_metrics_pipeline
from .preprocessing import parse_date, parse_line

__all__ = [
    "TicketReportSession",
    "compute_backlog",
    "compute_metrics",
    "parse_date",
    "parse_line",
    "run_backlog_pipeline",
    "run_metrics_pipeline",
]
