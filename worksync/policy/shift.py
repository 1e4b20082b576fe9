"""Shift policy resolution: shift length, half-shift gate, lateness cutoff."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from worksync.common.constants import STANDARD_SHIFT_HOURS
from worksync.common.dates import as_utc, local_datetime, local_day
from worksync.policy.schemas import WorkingHours


def parse_clock(value: str) -> time:
    hours, minutes = (int(p) for p in value.split(":"))
    return time(hours, minutes)


def parse_hhmm(value: str) -> float:
    """'09:30' → 9.5"""
    t = parse_clock(value)
    return t.hour + t.minute / 60


def standard_shift_hours(working_hours: Optional[WorkingHours]) -> float:
    """Scheduled shift length in hours.

    Overnight shifts (check-out earlier than check-in) wrap past midnight.
    Falls back to ``STANDARD_SHIFT_HOURS`` when no policy is set or the
    computed length is not positive.
    """
    if working_hours is None:
        return STANDARD_SHIFT_HOURS

    length = parse_hhmm(working_hours.check_out) - parse_hhmm(working_hours.check_in)
    if length < 0:
        length += 24
    return length if length > 0 else STANDARD_SHIFT_HOURS


def lateness_cutoff(
    working_hours: Optional[WorkingHours],
    day: date,
    tz: Optional[ZoneInfo] = None,
) -> Optional[datetime]:
    """Last instant on *day* that still counts as on time."""
    if working_hours is None:
        return None
    start = local_datetime(day, parse_clock(working_hours.check_in), tz)
    return start + timedelta(minutes=working_hours.grace_period)


def is_late(
    moment: datetime,
    working_hours: Optional[WorkingHours],
    tz: Optional[ZoneInfo] = None,
) -> bool:
    """True when *moment* is strictly after the cutoff of its own local day."""
    cutoff = lateness_cutoff(working_hours, local_day(moment, tz), tz)
    if cutoff is None:
        return False
    return as_utc(moment) > cutoff


def hours_between(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds() / 3600
