from __future__ import annotations

from datetime import datetime

import pytest

from helpdesk_metrics.constants import COLUMN_INDEX

HEADER = (
    "ID,URL,Subject,Inbox,Status,Type,Source,Priority,Tagged,Agent,Company,Customer,Email,"
    "Happiness Comment,Happiness Rating,Time Tracked,Time Billed,Response Time,Resolution Time,"
    "Created at,Updated at"
)

COLUMNS = sorted(COLUMN_INDEX, key=COLUMN_INDEX.get)


def make_row(**values: str) -> str:
    return ",".join(values.get(name, "") for name in COLUMNS)


def make_csv(*rows: str) -> str:
    return "\n".join([HEADER, *rows])


@pytest.fixture
def reference_time() -> datetime:
    return datetime(2026, 1, 15, 12, 0, 0)


@pytest.fixture
def sample_csv() -> str:
    return make_csv(
        make_row(
            id="T1",
            url="https://help.example.com/t/1",
            subject="Invoice question",
            inbox="Support",
            status="Solved",
            priority="High",
            tagged="billing",
            agent="Alice",
            client="Acme",
            response_time="120",
            created_at="2026-01-01 00:00:00",
            updated_at="2026-01-05 00:00:00",
        ),
        make_row(
            id="T2",
            subject="Demo request",
            inbox="Sales",
            status="Active",
            tagged="false",
            agent="Bob",
            response_time="30",
            resolution_time="2880",
            created_at="2026-01-14 10:00:00 -0500 EST",
        ),
        make_row(
            id="T3",
            subject="Waiting on logs",
            inbox="Support",
            status="Waiting on Customer",
            priority="Low",
            tagged="true",
            agent="Carol",
            client="Acme",
            response_time="abc",
            resolution_time="Unknown",
            created_at="2025-12-20 12:00:00",
        ),
        make_row(id="T6", subject="Unassigned", status="Active", agent="Unknown", created_at="2026-01-10"),
        make_row(id="T7", subject="No agent", status="Active", created_at="2026-01-10"),
        make_row(subject="No id", status="Active", agent="Erin", created_at="2026-01-10"),
        "",
        make_row(
            id="T4",
            subject="Password reset",
            status="Closed",
            priority="Medium",
            agent="Alice",
            client="Globex",
            response_time="90",
            resolution_time="1440",
            created_at="not a date",
        ),
        make_row(
            id="T5",
            subject='"Refund, partial"',
            inbox="Support",
            status="Pending",
            priority="High",
            agent="Dan",
            client="Acme",
            response_time="0",
            created_at="2026-01-08 12:00:00",
        ),
    )


@pytest.fixture
def row():
    return make_row


@pytest.fixture
def csv_text():
    return make_csv
