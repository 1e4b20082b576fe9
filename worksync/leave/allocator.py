"""Leave quota allocation — turns an approved range into per-day statuses.

The quota pool is shared across leave types: every stored ``leave`` or
``unpaid_leave`` day of the year counts against the quota of whichever type
is being approved.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from worksync.common.constants import LEAVE_STATUSES, AttendanceStatus
from worksync.common.dates import iter_days

FULL_DAY = Decimal("1")


@dataclass(frozen=True)
class DayAllocation:
    day: date
    status: AttendanceStatus
    duration: Decimal


def used_leave_days(
    records: Iterable[Any],
    *,
    exclude: Optional[tuple[date, date]] = None,
) -> Decimal:
    """Sum ``leave_duration`` over leave/unpaid-leave records.

    A stored duration of 0 counts as a full day. Records inside *exclude*
    (the range being allocated) are skipped so a retried allocation sees the
    same starting balance as the first attempt.
    """
    total = Decimal("0")
    for record in records:
        if record.status not in LEAVE_STATUSES:
            continue
        if exclude is not None and exclude[0] <= record.date <= exclude[1]:
            continue
        duration = Decimal(str(record.leave_duration or 0))
        total += duration if duration > 0 else FULL_DAY
    return total


def plan_leave_allocation(
    start: date,
    end: date,
    *,
    duration: Decimal,
    quota: Decimal,
    used: Decimal,
    weekend_days: frozenset[int],
) -> list[DayAllocation]:
    """Assign ``leave`` while the quota lasts, ``unpaid_leave`` after.

    Weekend days are skipped entirely: no entry and no quota consumed.
    """
    plan: list[DayAllocation] = []
    current = used
    for day in iter_days(start, end):
        if day.weekday() in weekend_days:
            continue
        if current + duration > quota:
            plan.append(DayAllocation(day, AttendanceStatus.unpaid_leave, duration))
        else:
            current += duration
            plan.append(DayAllocation(day, AttendanceStatus.leave, duration))
    return plan


def charged_days(
    start: date,
    end: date,
    duration: Decimal,
    weekend_days: frozenset[int],
) -> Decimal:
    """Days a request draws from its type, ignoring the quota split."""
    working = sum(1 for day in iter_days(start, end) if day.weekday() not in weekend_days)
    return duration * working
