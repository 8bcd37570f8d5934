"""Row parsing and ticket construction for helpdesk CSV exports."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

import pandas as pd

from .constants import COLUMN_INDEX, UNKNOWN

logger = logging.getLogger(__name__)

# e.g. "2026-01-01 19:52:24 -0500 EST"
_OFFSET_ZONE_SUFFIX = re.compile(r"\s[+-]\d{4}\s[A-Z]{3}$")
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

TEXT_ENCODINGS = ["utf-8-sig", "latin-1"]


@dataclass
class Ticket:
    id: str
    url: str
    subject: str
    inbox: str
    status: str
    type: str
    source: str
    priority: str
    tagged: str
    agent: str
    company: str
    client: str
    email: str
    happiness_comment: str
    happiness_rating: str
    time_tracked: str
    time_billed: str
    response_time: str
    resolution_time: str
    created_at: pd.Timestamp | None
    updated_at: pd.Timestamp | None


@dataclass
class BacklogTicket:
    id: str
    url: str
    subject: str
    inbox: str
    status: str
    agent: str
    created_at: pd.Timestamp | None
    days_open: int = 0
    age_band: str = "fresh"


@dataclass
class RowScanStats:
    """Counters for rows dropped before a ticket is built."""

    rows_read: int = 0
    blank: int = 0
    too_few_fields: int = 0
    missing_agent: int = 0
    missing_id: int = 0
    accepted: int = 0

    @property
    def skipped(self) -> int:
        return self.blank + self.too_few_fields + self.missing_agent + self.missing_id


def decode_csv_payload(payload: bytes) -> str:
    attempts: list[str] = []
    for encoding in TEXT_ENCODINGS:
        try:
            text = payload.decode(encoding)
        except UnicodeDecodeError as exc:
            attempts.append(f"encoding={encoding}: {exc}")
            logger.warning("CSV payload is not valid %s, trying next encoding", encoding)
            continue
        return text

    sample = "; ".join(attempts[:3])
    raise ValueError(f"Unable to decode CSV payload. Attempts failed: {sample}")


def split_lines(text: str) -> list[str]:
    return text.split("\n")


def parse_line(line: str) -> list[str]:
    """Split one CSV line on commas, treating double quotes as an on/off toggle.

    Quote characters are dropped from the output and ``""`` is not an escape:
    every quote flips the state. Each field is stripped of surrounding
    whitespace.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def _to_naive(value: pd.Timestamp) -> pd.Timestamp:
    if value.tzinfo is not None:
        return value.tz_convert("UTC").tz_localize(None)
    return value


def parse_date(raw: str | None) -> pd.Timestamp | None:
    if raw is None or not str(raw).strip():
        return None

    cleaned = _OFFSET_ZONE_SUFFIX.sub("", str(raw).strip())
    parsed = pd.to_datetime(cleaned, errors="coerce")
    if pd.isna(parsed):
        return None
    return _to_naive(pd.Timestamp(parsed))


def parse_minutes(value: str | None) -> float | None:
    """Read the leading number of ``value`` the way a lenient float parser does."""
    if value is None:
        return None
    match = _LEADING_NUMBER.match(str(value).strip())
    if match is None:
        return None
    number = float(match.group(0))
    if not math.isfinite(number):
        return None
    return number


def _field(columns: Sequence[str], name: str, default: str = "") -> str:
    index = COLUMN_INDEX[name]
    if index >= len(columns):
        return default
    return columns[index] or default


def iter_ticket_rows(lines: Iterable[str], stats: RowScanStats | None = None) -> Iterator[list[str]]:
    """Yield field lists for rows that carry an assigned agent.

    The first line is the header and is always skipped.
    """
    if stats is None:
        stats = RowScanStats()

    for position, raw_line in enumerate(lines):
        if position == 0:
            continue
        stats.rows_read += 1

        line = raw_line.strip()
        if not line:
            stats.blank += 1
            continue

        columns = parse_line(line)
        if len(columns) < 2:
            stats.too_few_fields += 1
            continue

        agent = _field(columns, "agent").strip()
        if not agent or agent == UNKNOWN:
            stats.missing_agent += 1
            continue

        yield columns


def build_ticket(columns: Sequence[str]) -> Ticket:
    return Ticket(
        id=_field(columns, "id"),
        url=_field(columns, "url", "Uncategorized"),
        subject=_field(columns, "subject", "No Subject"),
        inbox=_field(columns, "inbox"),
        status=_field(columns, "status", "open"),
        type=_field(columns, "type", UNKNOWN),
        source=_field(columns, "source", UNKNOWN),
        priority=_field(columns, "priority"),
        tagged=_field(columns, "tagged", "false"),
        agent=_field(columns, "agent").strip(),
        company=_field(columns, "company", UNKNOWN),
        client=_field(columns, "client", UNKNOWN),
        email=_field(columns, "email", UNKNOWN),
        happiness_comment=_field(columns, "happiness_comment", UNKNOWN),
        happiness_rating=_field(columns, "happiness_rating", UNKNOWN),
        time_tracked=_field(columns, "time_tracked", UNKNOWN),
        time_billed=_field(columns, "time_billed", UNKNOWN),
        response_time=_field(columns, "response_time"),
        resolution_time=_field(columns, "resolution_time", UNKNOWN),
        created_at=parse_date(_field(columns, "created_at")),
        updated_at=parse_date(_field(columns, "updated_at")),
    )


def build_backlog_ticket(columns: Sequence[str]) -> BacklogTicket:
    return BacklogTicket(
        id=_field(columns, "id"),
        url=_field(columns, "url", "N/A"),
        subject=_field(columns, "subject", "No Subject"),
        inbox=_field(columns, "inbox", "N/A"),
        status=_field(columns, "status", "open"),
        agent=_field(columns, "agent").strip(),
        created_at=parse_date(_field(columns, "created_at")),
    )


def load_tickets(lines: Iterable[str], stats: RowScanStats | None = None) -> list[Ticket]:
    if stats is None:
        stats = RowScanStats()
    tickets: list[Ticket] = []
    for columns in iter_ticket_rows(lines, stats):
        ticket = build_ticket(columns)
        if not ticket.id:
            stats.missing_id += 1
            continue
        stats.accepted += 1
        tickets.append(ticket)
    return tickets
