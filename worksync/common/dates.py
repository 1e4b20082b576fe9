"""Calendar-day helpers.

A calendar day is a plain ``datetime.date`` in the organization's local time
zone. Every attendance lookup and range iteration is keyed by it; timestamps
are stored in UTC and only converted to a day through :func:`local_day`.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Iterator, Optional
from zoneinfo import ZoneInfo

from worksync.config import settings

# date.weekday() index → canonical short name
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_WEEKDAY_ALIASES: dict[str, int] = {}
for _idx, _name in enumerate(calendar.day_name):
    _WEEKDAY_ALIASES[_name.lower()] = _idx
    _WEEKDAY_ALIASES[_name[:3].lower()] = _idx


def org_timezone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from the database
    (SQLite drops tzinfo on round-trip). Client input goes through
    :func:`localize` first."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def localize(value: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    """Read naive wall-clock input as organization-local time."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz or org_timezone())
    return value


def local_day(value: datetime, tz: Optional[ZoneInfo] = None) -> date:
    """Calendar day of a timestamp in organization-local time."""
    return as_utc(value).astimezone(tz or org_timezone()).date()


def local_today(tz: Optional[ZoneInfo] = None) -> date:
    return datetime.now(tz or org_timezone()).date()


def local_datetime(day: date, at: time, tz: Optional[ZoneInfo] = None) -> datetime:
    """Aware datetime for a wall-clock time on a calendar day."""
    return datetime.combine(day, at, tzinfo=tz or org_timezone())


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in ``[start, end]`` ascending."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def weekday_index(name: str) -> int:
    """Map 'Sat', 'saturday', 'SAT' … to ``date.weekday()`` numbering."""
    try:
        return _WEEKDAY_ALIASES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown weekday name: {name!r}") from None


def weekday_set(names: Iterable[str]) -> frozenset[int]:
    return frozenset(weekday_index(n) for n in names)


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]
