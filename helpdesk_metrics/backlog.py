"""Aging backlog of unresolved tickets."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

import pandas as pd

from .features import backlog_age_band, days_between, is_resolved_status, normalize_reference_time
from .preprocessing import BacklogTicket, RowScanStats, build_backlog_ticket, iter_ticket_rows

logger = logging.getLogger(__name__)

BACKLOG_COLUMNS = ["id", "url", "subject", "inbox", "agent", "status", "created_at", "days_open", "age_band"]


def compute_backlog(lines: Iterable[str], reference_time: datetime) -> list[BacklogTicket]:
    """Return unresolved tickets with a known creation date, oldest first."""
    now = normalize_reference_time(reference_time)
    stats = RowScanStats()
    backlog: list[BacklogTicket] = []

    for columns in iter_ticket_rows(lines, stats):
        ticket = build_backlog_ticket(columns)
        if not ticket.id:
            stats.missing_id += 1
            continue
        stats.accepted += 1

        if is_resolved_status(ticket.status) or ticket.created_at is None:
            continue

        ticket.days_open = days_between(ticket.created_at, now)
        ticket.age_band = backlog_age_band(ticket.days_open)
        backlog.append(ticket)

    logger.debug("Backlog holds %d of %d tickets", len(backlog), stats.accepted)
    return sorted(backlog, key=lambda item: item.days_open, reverse=True)


def backlog_to_frame(tickets: list[BacklogTicket]) -> pd.DataFrame:
    rows = [
        {
            "id": ticket.id,
            "url": ticket.url,
            "subject": ticket.subject,
            "inbox": ticket.inbox,
            "agent": ticket.agent,
            "status": ticket.status,
            "created_at": ticket.created_at,
            "days_open": ticket.days_open,
            "age_band": ticket.age_band,
        }
        for ticket in tickets
    ]
    return pd.DataFrame(rows, columns=BACKLOG_COLUMNS)
