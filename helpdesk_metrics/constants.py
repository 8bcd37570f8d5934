"""Column layout and status vocabularies for helpdesk CSV exports."""

from __future__ import annotations

from typing import Dict, List

# Fixed 21-column export layout, 0-indexed.
COLUMN_INDEX: Dict[str, int] = {
    "id": 0,
    "url": 1,
    "subject": 2,
    "inbox": 3,
    "status": 4,
    "type": 5,
    "source": 6,
    "priority": 7,
    "tagged": 8,
    "agent": 9,
    "company": 10,
    "client": 11,
    "email": 12,
    "happiness_comment": 13,
    "happiness_rating": 14,
    "time_tracked": 15,
    "time_billed": 16,
    "response_time": 17,
    "resolution_time": 18,
    "created_at": 19,
    "updated_at": 20,
}

UNKNOWN = "Unknown"
NO_PRIORITY = "none"

RESOLVED_STATUSES = {
    "solved",
    "resolved",
    "closed",
}

BACKLOG_STATUSES = {
    "active",
    "waiting on customer",
}

PRIORITY_ORDER: List[str] = ["none", "low", "medium", "high"]

PRIORITY_LABELS: Dict[str, str] = {
    "none": "None (Unassigned)",
    "low": "Low",
    "medium": "Medium",
    "high": "High",
}

# (upper bound in days, label); the last bucket is open-ended.
BACKLOG_AGE_BUCKETS: List[tuple] = [
    (2, "0-2d"),
    (7, "3-7d"),
    (14, "8-14d"),
    (None, "15+d"),
]

MINUTES_PER_HOUR = 60.0
MINUTES_PER_DAY = 1440.0
