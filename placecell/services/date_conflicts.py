"""
Date Conflict Evaluator

Answers two questions for a candidate drive date, using lists that were
already fetched (nothing here touches the database):

1. Is the date inside a blocked period?   -> needs an admin-approved request
2. Is the date locked by another company's scheduled drive?  -> pick another date

The same functions back the calendar preview and the POST /drives handler,
so what the coordinator sees highlighted is exactly what submission enforces.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

SCHEDULED = "scheduled"

DateLike = Union[date, datetime]


def as_calendar_date(value: DateLike) -> date:
    """Drop the time of day; drives lock whole calendar days."""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass
class DateConflicts:
    candidate: date
    blocked: Optional[object] = None  # BlockedDate
    locked: Optional[object] = None   # CampusDrive

    @property
    def is_blocked(self) -> bool:
        return self.blocked is not None

    @property
    def is_locked(self) -> bool:
        return self.locked is not None

    @property
    def is_free(self) -> bool:
        return not self.is_blocked and not self.is_locked


def find_blocked_conflict(candidate: DateLike, blocked_dates: Iterable) -> Optional[object]:
    """
    First blocked range (in the given order) with start_date <= candidate <= end_date.
    Both ends are inclusive. Overlapping ranges are legal; whichever comes first wins.
    """
    day = as_calendar_date(candidate)
    for blocked in blocked_dates:
        if as_calendar_date(blocked.start_date) <= day <= as_calendar_date(blocked.end_date):
            return blocked
    return None


def find_locked_conflict(
    candidate: DateLike,
    drives: Iterable,
    excluding_company_id: Optional[int] = None
) -> Optional[object]:
    """Scheduled drive on the same calendar day held by a different company."""
    day = as_calendar_date(candidate)
    for drive in drives:
        if drive.status != SCHEDULED:
            continue
        if excluding_company_id is not None and drive.company_id == excluding_company_id:
            continue
        if as_calendar_date(drive.drive_date) == day:
            return drive
    return None


def is_blocked(candidate: DateLike, blocked_dates: Iterable) -> bool:
    return find_blocked_conflict(candidate, blocked_dates) is not None


def is_locked(candidate: DateLike, drives: Iterable, excluding_company_id: Optional[int] = None) -> bool:
    return find_locked_conflict(candidate, drives, excluding_company_id) is not None


def evaluate_date(
    candidate: DateLike,
    blocked_dates: Iterable,
    drives: Iterable,
    excluding_company_id: Optional[int] = None
) -> DateConflicts:
    """Full evaluation for one date."""
    return DateConflicts(
        candidate=as_calendar_date(candidate),
        blocked=find_blocked_conflict(candidate, blocked_dates),
        locked=find_locked_conflict(candidate, drives, excluding_company_id),
    )


def evaluate_range(
    start: DateLike,
    end: DateLike,
    blocked_dates: List,
    drives: List,
    excluding_company_id: Optional[int] = None
) -> List[DateConflicts]:
    """Evaluate every day in [start, end] for calendar highlighting."""
    first, last = as_calendar_date(start), as_calendar_date(end)
    days = []
    current = first
    while current <= last:
        days.append(evaluate_date(current, blocked_dates, drives, excluding_company_id))
        current += timedelta(days=1)
    return days
