"""Pipeline orchestration from raw CSV text to metrics and backlog."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path

import pandas as pd

from .backlog import compute_backlog
from .metrics import TicketMetrics, compute_metrics
from .preprocessing import BacklogTicket, decode_csv_payload, load_tickets, split_lines


class MissingDocumentError(LookupError):
    """Raised when a computation is requested before any CSV was uploaded."""


def run_metrics_pipeline(raw_text: str, reference_time: datetime) -> TicketMetrics:
    return compute_metrics(split_lines(raw_text), reference_time=reference_time)


def run_backlog_pipeline(raw_text: str, reference_time: datetime) -> list[BacklogTicket]:
    return compute_backlog(split_lines(raw_text), reference_time=reference_time)


@dataclass
class TicketReportSession:
    raw_text: str
    file_name: str = "tickets.csv"

    @classmethod
    def from_bytes(cls, payload: bytes, file_name: str = "tickets.csv") -> "TicketReportSession":
        return cls(decode_csv_payload(payload), file_name=file_name)

    @classmethod
    def from_file(cls, path: str) -> "TicketReportSession":
        file_path = Path(path)
        return cls.from_bytes(file_path.read_bytes(), file_name=file_path.name)

    def _require_text(self) -> str:
        if not self.raw_text or not self.raw_text.strip():
            raise MissingDocumentError("No CSV data found. Please upload a CSV file first.")
        return self.raw_text

    def metrics(self, reference_time: datetime) -> TicketMetrics:
        return run_metrics_pipeline(self._require_text(), reference_time)

    def backlog(self, reference_time: datetime) -> list[BacklogTicket]:
        return run_backlog_pipeline(self._require_text(), reference_time)

    def tickets_frame(self) -> pd.DataFrame:
        tickets = load_tickets(split_lines(self._require_text()))
        return pd.DataFrame([asdict(ticket) for ticket in tickets])
