"""Derived ticket attributes: status classes, priority keys, ages and weeks."""

from __future__ import annotations

import math
from datetime import datetime

import pandas as pd

from .constants import BACKLOG_AGE_BUCKETS, BACKLOG_STATUSES, NO_PRIORITY, RESOLVED_STATUSES

SECONDS_PER_DAY = 86400.0


def is_resolved_status(status: str) -> bool:
    return status.lower() in RESOLVED_STATUSES


def is_backlog_status(status: str) -> bool:
    return status.lower() in BACKLOG_STATUSES


def is_tagged(tagged: str) -> bool:
    text = tagged.strip()
    return bool(text) and text.lower() != "false"


def has_priority(priority: str) -> bool:
    return bool(priority and priority.strip())


def priority_key(priority: str) -> str:
    if not has_priority(priority):
        return NO_PRIORITY
    return priority.strip().lower()


def days_between(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded up; order does not matter."""
    elapsed = abs((pd.Timestamp(end) - pd.Timestamp(start)).total_seconds())
    return math.ceil(elapsed / SECONDS_PER_DAY)


def week_number(value: datetime) -> int:
    # Week 1 starts on the Sunday on or before January 1; this is not ISO 8601.
    stamp = pd.Timestamp(value)
    first_day = pd.Timestamp(year=stamp.year, month=1, day=1)
    elapsed_days = (stamp - first_day).total_seconds() / SECONDS_PER_DAY
    sunday_based_weekday = (first_day.weekday() + 1) % 7
    return math.ceil((elapsed_days + sunday_based_weekday + 1) / 7)


def week_label(value: datetime) -> str:
    return f"Week {week_number(value)}"


def backlog_age_bucket(age_days: int) -> str:
    for upper, label in BACKLOG_AGE_BUCKETS:
        if upper is None or age_days <= upper:
            return label
    return BACKLOG_AGE_BUCKETS[-1][1]


def backlog_age_band(days_open: int) -> str:
    if days_open > 14:
        return "critical"
    if days_open > 7:
        return "aging"
    return "fresh"


def normalize_reference_time(reference_time: datetime) -> pd.Timestamp:
    stamp = pd.Timestamp(reference_time)
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert("UTC").tz_localize(None)
    return stamp
