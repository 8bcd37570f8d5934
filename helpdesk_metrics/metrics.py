"""Single-pass aggregation of helpdesk tickets into operational metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

import pandas as pd

from .constants import (
    BACKLOG_AGE_BUCKETS,
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    PRIORITY_LABELS,
    PRIORITY_ORDER,
    UNKNOWN,
)
from .features import (
    backlog_age_bucket,
    days_between,
    has_priority,
    is_backlog_status,
    is_resolved_status,
    is_tagged,
    normalize_reference_time,
    priority_key,
    week_label,
)
from .preprocessing import RowScanStats, Ticket, build_ticket, iter_ticket_rows, parse_minutes

logger = logging.getLogger(__name__)


@dataclass
class PriorityAverage:
    total: float = 0.0
    count: int = 0
    average: float = 0.0

    def add(self, value: float) -> None:
        self.total += value
        self.count += 1


@dataclass
class TimingAverages:
    """Overall and per-priority averages of one duration metric."""

    overall: float = 0.0
    by_priority: dict[str, PriorityAverage] = field(default_factory=dict)

    def add(self, key: str, value: float) -> None:
        self.by_priority.setdefault(key, PriorityAverage()).add(value)

    def finalize(self, digits: int = 1) -> None:
        total = 0.0
        count = 0
        for bucket in self.by_priority.values():
            total += bucket.total
            count += bucket.count
            bucket.average = round(_safe_ratio(bucket.total, bucket.count), digits)
        self.overall = round(_safe_ratio(total, count), digits)

    def ordered(self) -> list[tuple[str, PriorityAverage]]:
        known = [key for key in PRIORITY_ORDER if key in self.by_priority]
        extra = sorted(key for key in self.by_priority if key not in PRIORITY_ORDER)
        return [(key, self.by_priority[key]) for key in known + extra]


@dataclass
class TagCoverage:
    tickets_with_tags: int = 0
    tickets_with_priority: int = 0
    percent_with_tags: float = 0.0
    percent_with_priority: float = 0.0


@dataclass
class TicketMetrics:
    total_tickets: int = 0
    resolved_tickets: int = 0
    resolution_rate: float = 0.0
    volume_by_inbox: dict[str, int] = field(default_factory=dict)
    volume_by_client: dict[str, int] = field(default_factory=dict)
    volume_by_week: dict[str, int] = field(default_factory=dict)
    backlog_by_age: dict[str, int] = field(
        default_factory=lambda: {label: 0 for _, label in BACKLOG_AGE_BUCKETS}
    )
    avg_first_response_time: TimingAverages = field(default_factory=TimingAverages)
    avg_time_to_close: TimingAverages = field(default_factory=TimingAverages)
    tag_coverage: TagCoverage = field(default_factory=TagCoverage)

    @property
    def open_backlog(self) -> int:
        return sum(self.backlog_by_age.values())


def _safe_ratio(num: float, den: float) -> float:
    if den == 0:
        return 0.0
    return float(num) / float(den)


def _increment(mapping: dict[str, int], key: str) -> None:
    mapping[key] = mapping.get(key, 0) + 1


def _time_to_close_days(ticket: Ticket) -> float:
    if ticket.resolution_time and ticket.resolution_time != UNKNOWN:
        minutes = parse_minutes(ticket.resolution_time)
        if minutes is None:
            return 0.0
        return minutes / MINUTES_PER_DAY

    if (
        is_resolved_status(ticket.status)
        and ticket.created_at is not None
        and ticket.updated_at is not None
    ):
        return float(days_between(ticket.created_at, ticket.updated_at))
    return 0.0


def accumulate_ticket(metrics: TicketMetrics, ticket: Ticket, now: pd.Timestamp) -> None:
    metrics.total_tickets += 1

    if is_resolved_status(ticket.status):
        metrics.resolved_tickets += 1
    if is_tagged(ticket.tagged):
        metrics.tag_coverage.tickets_with_tags += 1
    if has_priority(ticket.priority):
        metrics.tag_coverage.tickets_with_priority += 1

    if ticket.inbox.strip():
        _increment(metrics.volume_by_inbox, ticket.inbox.strip())
    _increment(metrics.volume_by_client, ticket.client)

    if ticket.created_at is not None:
        _increment(metrics.volume_by_week, week_label(ticket.created_at))
        if is_backlog_status(ticket.status):
            age = days_between(ticket.created_at, now)
            metrics.backlog_by_age[backlog_age_bucket(age)] += 1

    key = priority_key(ticket.priority)

    response_minutes = parse_minutes(ticket.response_time)
    if response_minutes is not None and response_minutes > 0:
        metrics.avg_first_response_time.add(key, response_minutes / MINUTES_PER_HOUR)

    close_days = _time_to_close_days(ticket)
    if close_days > 0:
        metrics.avg_time_to_close.add(key, close_days)


def finalize_metrics(metrics: TicketMetrics) -> TicketMetrics:
    total = metrics.total_tickets
    metrics.resolution_rate = round(_safe_ratio(metrics.resolved_tickets, total) * 100.0, 2)
    metrics.avg_first_response_time.finalize()
    metrics.avg_time_to_close.finalize()

    coverage = metrics.tag_coverage
    coverage.percent_with_tags = round(_safe_ratio(coverage.tickets_with_tags, total) * 100.0, 1)
    coverage.percent_with_priority = round(_safe_ratio(coverage.tickets_with_priority, total) * 100.0, 1)
    return metrics


def compute_metrics(lines: Iterable[str], reference_time: datetime) -> TicketMetrics:
    """Aggregate CSV lines (header first) into a fresh :class:`TicketMetrics`.

    Rows without an id or without an assigned agent contribute nothing.
    ``reference_time`` is the "now" used for backlog ages.
    """
    now = normalize_reference_time(reference_time)
    metrics = TicketMetrics()
    stats = RowScanStats()

    for columns in iter_ticket_rows(lines, stats):
        ticket = build_ticket(columns)
        if not ticket.id:
            stats.missing_id += 1
            continue
        stats.accepted += 1
        accumulate_ticket(metrics, ticket, now)

    logger.debug(
        "Aggregated %d tickets from %d rows (%d skipped)",
        stats.accepted,
        stats.rows_read,
        stats.skipped,
    )
    return finalize_metrics(metrics)


def _label_priority(key: str) -> str:
    return PRIORITY_LABELS.get(key, key.capitalize())


def timing_frame(averages: TimingAverages, value_name: str) -> pd.DataFrame:
    rows = [
        {"priority": _label_priority(key), value_name: bucket.average, "tickets": bucket.count}
        for key, bucket in averages.ordered()
    ]
    return pd.DataFrame(rows, columns=["priority", value_name, "tickets"])


def volume_frame(volume: dict[str, int], label: str) -> pd.DataFrame:
    frame = pd.DataFrame(list(volume.items()), columns=[label, "tickets"])
    return frame.sort_values("tickets", ascending=False, kind="stable").reset_index(drop=True)


def weekly_volume_frame(volume_by_week: dict[str, int]) -> pd.DataFrame:
    frame = pd.DataFrame(list(volume_by_week.items()), columns=["week", "tickets"])
    frame["week_number"] = frame["week"].str.replace("Week ", "", regex=False).astype(int)
    return frame.sort_values("week_number").reset_index(drop=True)


def metrics_summary(metrics: TicketMetrics) -> dict:
    return {
        "total_tickets": metrics.total_tickets,
        "resolved_tickets": metrics.resolved_tickets,
        "open_backlog": metrics.open_backlog,
        "resolution_rate": metrics.resolution_rate,
        "avg_first_response_hours": metrics.avg_first_response_time.overall,
        "avg_time_to_close_days": metrics.avg_time_to_close.overall,
        "percent_with_tags": metrics.tag_coverage.percent_with_tags,
        "percent_with_priority": metrics.tag_coverage.percent_with_priority,
    }
